# bursary/services/application_service.py
"""
Application lifecycle.

`applications.current_status` always equals the status of the latest
`status_updates` row for that application. Every write path below appends
history and syncs the summary inside a single transaction. Notification
payloads are returned to the caller, which schedules delivery after commit.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bursary.core.exceptions import ConflictError, NotFoundError, PersistenceError
from bursary.core.storage import delete_stored_file
from bursary.models.application import Application
from bursary.models.bursary import Bursary
from bursary.models.document import Document
from bursary.models.enums import ActionType, ApplicationStatus, UserRole
from bursary.models.status_update import StatusUpdate
from bursary.models.student import Student
from bursary.schemas.application import StatusUpdateCreate, StatusUpdateRead
from bursary.services.email_service import (
    EVENT_STATUS_CHANGED,
    EVENT_SUBMITTED,
    EVENT_WITHDRAWN,
    build_payload,
)


# ------------------------------------------------------------
# INTERNAL HELPERS
# ------------------------------------------------------------
async def _commit(session: AsyncSession, action: str):
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Database error while {action}: {e}")
        raise PersistenceError(f"Could not complete {action}.")


def _ordered_history(application_ids):
    return (
        select(StatusUpdate)
        .where(StatusUpdate.application_id.in_(application_ids))
        .order_by(StatusUpdate.updated_at.asc(), StatusUpdate.id.asc())
    )


async def _fetch_history_grouped(
    session: AsyncSession,
    application_ids: List[int],
    visible_only: bool = False,
) -> Dict[int, List[StatusUpdateRead]]:
    """One batched query for every application, grouped in memory."""
    grouped: Dict[int, List[StatusUpdateRead]] = defaultdict(list)
    if not application_ids:
        return grouped

    query = _ordered_history(application_ids)
    if visible_only:
        query = query.where(StatusUpdate.is_visible_to_student == True)  # noqa: E712

    result = await session.execute(query)
    for update in result.scalars().all():
        grouped[update.application_id].append(StatusUpdateRead.model_validate(update))
    return grouped


async def get_notification_context(session: AsyncSession, application_id: int) -> Optional[Tuple[Student, Bursary]]:
    result = await session.execute(
        select(Student, Bursary)
        .join(Application, Application.student_id == Student.id)
        .join(Bursary, Application.bursary_id == Bursary.id)
        .where(Application.id == application_id)
    )
    row = result.first()
    if not row:
        return None
    return row[0], row[1]


# ------------------------------------------------------------
# SUBMIT
# ------------------------------------------------------------
async def submit_application(
    session: AsyncSession,
    student_id: int,
    bursary_id: int,
) -> Tuple[Application, dict]:

    student = await session.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")

    bursary = await session.get(Bursary, bursary_id)
    if not bursary:
        raise NotFoundError("Bursary not found")

    existing = await session.execute(
        select(Application.id).where(
            (Application.student_id == student_id) & (Application.bursary_id == bursary_id)
        )
    )
    if existing.first():
        raise ConflictError("You have already applied for this bursary.")

    application = Application(
        student_id=student_id,
        bursary_id=bursary_id,
        current_status=ApplicationStatus.Submitted.value,
    )
    session.add(application)

    try:
        await session.flush()  # assigns application.id

        session.add(StatusUpdate(
            application_id=application.id,
            status=ApplicationStatus.Submitted.value,
            updated_by=student_id,
            updated_by_role=UserRole.Student.value,
            remarks="Application submitted by student",
            is_visible_to_student=True,
            action_type=ActionType.InitialSubmission.value,
        ))
        await _commit(session, "submitting the application")

    except IntegrityError:
        # Lost a race against a concurrent submit for the same pair
        await session.rollback()
        raise ConflictError("You have already applied for this bursary.")

    await session.refresh(application)
    logger.info(f"Application {application.id} submitted by student {student_id} for bursary {bursary_id}")

    payload = build_payload(
        recipient_email=student.email,
        recipient_name=student.full_name,
        bursary_title=bursary.title,
        event_kind=EVENT_SUBMITTED,
        status=application.current_status,
    )
    return application, payload


# ------------------------------------------------------------
# WITHDRAW
# ------------------------------------------------------------
async def withdraw_application(
    session: AsyncSession,
    student_id: int,
    bursary_id: int,
) -> dict:
    """
    Hard-deletes the application together with its history and documents.
    The notification payload is built before the rows disappear.
    """
    result = await session.execute(
        select(Application, Student, Bursary)
        .join(Student, Application.student_id == Student.id)
        .join(Bursary, Application.bursary_id == Bursary.id)
        .where(
            (Application.student_id == student_id) & (Application.bursary_id == bursary_id)
        )
    )
    row = result.first()
    if not row:
        raise NotFoundError("No application found for this student and bursary.")

    application, student, bursary = row
    application_id = application.id

    payload = build_payload(
        recipient_email=student.email,
        recipient_name=student.full_name,
        bursary_title=bursary.title,
        event_kind=EVENT_WITHDRAWN,
    )

    docs = await session.execute(
        select(Document.file_url).where(Document.application_id == application_id)
    )
    file_urls = list(docs.scalars().all())

    await session.execute(delete(Document).where(Document.application_id == application_id))
    await session.execute(delete(StatusUpdate).where(StatusUpdate.application_id == application_id))
    await session.delete(application)

    try:
        await _commit(session, "withdrawing the application")
    except IntegrityError as e:
        logger.error(f"Integrity error while withdrawing application {application_id}: {e}")
        raise PersistenceError("Could not complete withdrawing the application.")

    for url in file_urls:
        delete_stored_file(url)

    logger.info(f"Application {application_id} withdrawn by student {student_id}")
    return payload


# ------------------------------------------------------------
# RECORD STATUS TRANSITION
# ------------------------------------------------------------
async def record_status_transition(
    session: AsyncSession,
    data: StatusUpdateCreate,
) -> Tuple[StatusUpdate, Application, Optional[dict]]:
    """
    Appends the history row and moves `current_status` in one transaction.

    An update with `is_visible_to_student=False` still becomes the stored
    `current_status` (admins see it everywhere). Students never see its
    label or remarks: it is left out of their history, their application
    list keeps showing the latest visible status, and the email only says
    that the application was updated.
    """

    # Row lock (Postgres) so concurrent transitions on one application serialize
    application = await session.get(Application, data.application_id, with_for_update=True)
    if not application:
        raise NotFoundError("Application not found")

    update = StatusUpdate(
        application_id=application.id,
        status=data.status,
        updated_by=data.updated_by,
        updated_by_role=data.updated_by_role.value,
        remarks=data.remarks,
        is_visible_to_student=data.is_visible_to_student,
        action_type=data.action_type or ActionType.StatusChange.value,
        attachment_url=data.attachment_url,
    )
    session.add(update)

    application.current_status = data.status
    session.add(application)

    try:
        await _commit(session, "recording the status update")
    except IntegrityError as e:
        logger.error(f"Integrity error on status update for application {application.id}: {e}")
        raise PersistenceError("Could not complete recording the status update.")

    await session.refresh(update)
    logger.info(
        f"Application {application.id} -> '{data.status}' by {data.updated_by_role.value} {data.updated_by}"
    )

    payload = None
    context = await get_notification_context(session, application.id)
    if context is None:
        logger.warning(f"No student/bursary context for application {application.id}; notification skipped")
    else:
        student, bursary = context
        payload = build_payload(
            recipient_email=student.email,
            recipient_name=student.full_name,
            bursary_title=bursary.title,
            event_kind=EVENT_STATUS_CHANGED,
            status=data.status if data.is_visible_to_student else None,
            remarks=data.remarks if data.is_visible_to_student else None,
        )

    return update, application, payload


# ------------------------------------------------------------
# RECONCILE SUMMARY FIELD
# ------------------------------------------------------------
async def reconcile_current_status(session: AsyncSession, application_id: int) -> Application:
    """Recompute current_status from the latest history row."""

    application = await session.get(Application, application_id, with_for_update=True)
    if not application:
        raise NotFoundError("Application not found")

    result = await session.execute(
        select(StatusUpdate.status)
        .where(StatusUpdate.application_id == application_id)
        .order_by(StatusUpdate.updated_at.desc(), StatusUpdate.id.desc())
        .limit(1)
    )
    latest = result.scalar_one_or_none()

    if latest is not None and latest != application.current_status:
        logger.warning(
            f"Application {application_id} summary drift: '{application.current_status}' -> '{latest}'"
        )
        application.current_status = latest
        session.add(application)
        await _commit(session, "reconciling the application status")
        await session.refresh(application)

    return application


# ------------------------------------------------------------
# READ SIDE
# ------------------------------------------------------------
async def get_history(
    session: AsyncSession,
    application_id: int,
    visible_only: bool = False,
) -> List[StatusUpdateRead]:
    application = await session.get(Application, application_id)
    if not application:
        raise NotFoundError("Application not found")

    grouped = await _fetch_history_grouped(session, [application_id], visible_only)
    return grouped.get(application_id, [])


async def get_admin_view(session: AsyncSession) -> List[dict]:
    result = await session.execute(
        select(Application, Student, Bursary)
        .join(Student, Application.student_id == Student.id)
        .join(Bursary, Application.bursary_id == Bursary.id)
        .order_by(Application.application_date.desc(), Application.id.desc())
    )
    rows = result.all()

    history = await _fetch_history_grouped(session, [app.id for app, _, _ in rows])

    return [
        {
            "application_id": app.id,
            "student_id": student.id,
            "student_name": student.full_name,
            "student_email": student.email,
            "bursary_id": bursary.id,
            "bursary_title": bursary.title,
            "application_date": app.application_date,
            "current_status": app.current_status,
            "status_history": history.get(app.id, []),
        }
        for app, student, bursary in rows
    ]


async def get_student_applications(session: AsyncSession, student_id: int) -> List[dict]:
    student = await session.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")

    result = await session.execute(
        select(Application, Bursary)
        .join(Bursary, Application.bursary_id == Bursary.id)
        .where(Application.student_id == student_id)
        .order_by(Application.application_date.desc(), Application.id.desc())
    )
    rows = result.all()

    # Students only see the entries marked visible to them
    history = await _fetch_history_grouped(session, [app.id for app, _ in rows], visible_only=True)

    applications = []
    for app, bursary in rows:
        visible = history.get(app.id, [])
        applications.append({
            "application_id": app.id,
            "bursary_id": bursary.id,
            "bursary_title": bursary.title,
            "application_date": app.application_date,
            # hidden transitions do not leak through the summary either
            "current_status": visible[-1].status if visible else app.current_status,
            "status_history": visible,
        })
    return applications
