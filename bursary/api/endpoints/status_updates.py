# bursary/api/endpoints/status_updates.py

from typing import List, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session, optional_identity
from bursary.models.enums import UserRole
from bursary.schemas.application import LifecycleResponse, StatusUpdateCreate, StatusUpdateRead
from bursary.services.application_service import get_history, record_status_transition
from bursary.services.email_service import EmailNotifier, get_notifier

router = APIRouter(prefix="/status", tags=["Status Updates"])


@router.post("/update", response_model=LifecycleResponse)
async def update_status(
    payload: StatusUpdateCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    notifier: EmailNotifier = Depends(get_notifier),
    identity: Optional[Tuple[int, UserRole]] = Depends(optional_identity),
):
    """
    `updated_by` / `updated_by_role` are taken from the body and trusted as
    sent when the call is anonymous. When a bearer token is present they must
    name the token's own account, otherwise the call is refused with 403.
    """
    if identity is not None and identity != (payload.updated_by, payload.updated_by_role):
        raise HTTPException(status_code=403, detail="Token does not match updated_by / updated_by_role")

    update, application, email_data = await record_status_transition(session, payload)

    notification = "skipped"
    if email_data:
        background_tasks.add_task(notifier.notify, email_data)
        notification = "queued"

    return LifecycleResponse(
        message="Status updated successfully",
        application_id=application.id,
        current_status=application.current_status,
        status_update_id=update.id,
        notification=notification,
    )


@router.get("/{application_id}/history", response_model=List[StatusUpdateRead])
async def status_history(
    application_id: int,
    visible_only: bool = Query(False, description="Only entries visible to the student"),
    session: AsyncSession = Depends(get_db_session),
):
    """Full ordered audit trail of an application, oldest first."""
    return await get_history(session, application_id, visible_only)
