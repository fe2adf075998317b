# bursary/api/endpoints/applications.py

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session
from bursary.schemas.application import (
    AdminApplicationRead,
    ApplicationRequest,
    LifecycleResponse,
    StudentApplicationRead,
)
from bursary.services.application_service import (
    get_admin_view,
    get_student_applications,
    reconcile_current_status,
    submit_application,
    withdraw_application,
)
from bursary.services.email_service import EmailNotifier, get_notifier

router = APIRouter(tags=["Applications"])


# ------------------------------------------------------------
# SUBMIT APPLICATION
# ------------------------------------------------------------
@router.post("/applications", response_model=LifecycleResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    payload: ApplicationRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    notifier: EmailNotifier = Depends(get_notifier),
):
    application, email_data = await submit_application(session, payload.student_id, payload.bursary_id)

    # Runs after the response is sent; delivery failures are only logged
    background_tasks.add_task(notifier.notify, email_data)

    return LifecycleResponse(
        message="Application submitted successfully",
        application_id=application.id,
        current_status=application.current_status,
    )


# ------------------------------------------------------------
# WITHDRAW APPLICATION
# ------------------------------------------------------------
@router.post("/applications/withdraw", response_model=LifecycleResponse)
async def withdraw(
    payload: ApplicationRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    notifier: EmailNotifier = Depends(get_notifier),
):
    email_data = await withdraw_application(session, payload.student_id, payload.bursary_id)
    background_tasks.add_task(notifier.notify, email_data)

    return LifecycleResponse(message="Application withdrawn successfully")


# ------------------------------------------------------------
# STUDENT: MY APPLICATIONS
# ------------------------------------------------------------
@router.get("/student/{student_id}/applications", response_model=List[StudentApplicationRead])
async def student_applications(
    student_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await get_student_applications(session, student_id)


# ------------------------------------------------------------
# ADMIN: ALL APPLICATIONS + FULL HISTORY
# ------------------------------------------------------------
@router.get("/admin/applications", response_model=List[AdminApplicationRead])
async def admin_applications(session: AsyncSession = Depends(get_db_session)):
    return await get_admin_view(session)


@router.post("/admin/applications/{application_id}/reconcile", response_model=LifecycleResponse)
async def reconcile_application(
    application_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    application = await reconcile_current_status(session, application_id)
    return LifecycleResponse(
        message="Application status reconciled",
        application_id=application.id,
        current_status=application.current_status,
        notification="skipped",
    )
