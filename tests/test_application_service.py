import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from bursary.core.exceptions import ConflictError, NotFoundError, PersistenceError
from bursary.core.security import hash_password
from bursary.models.application import Application
from bursary.models.bursary import Bursary
from bursary.models.enums import UserRole
from bursary.models.status_update import StatusUpdate
from bursary.models.student import Student
from bursary.schemas.application import StatusUpdateCreate
from bursary.services.application_service import (
    get_history,
    reconcile_current_status,
    record_status_transition,
    submit_application,
    withdraw_application,
)


async def _seed(session):
    student = Student(full_name="Lerato Molefe", email="lerato@example.com", password_hash=hash_password("pw1234"))
    bursary = Bursary(title="Data Science Bursary")
    session.add(student)
    session.add(bursary)
    await session.commit()
    await session.refresh(student)
    await session.refresh(bursary)
    return student, bursary


def _transition(application_id, status, **extra):
    return StatusUpdateCreate(
        application_id=application_id,
        status=status,
        updated_by=extra.pop("updated_by", 9),
        updated_by_role=extra.pop("updated_by_role", UserRole.Admin),
        **extra,
    )


@pytest.mark.asyncio
async def test_submit_returns_submitted_payload(db_session):
    student, bursary = await _seed(db_session)

    application, payload = await submit_application(db_session, student.id, bursary.id)

    assert application.current_status == "Submitted"
    assert application.application_date is not None
    assert payload == {
        "recipient_email": "lerato@example.com",
        "recipient_name": "Lerato Molefe",
        "bursary_title": "Data Science Bursary",
        "event_kind": "submitted",
        "status": "Submitted",
        "remarks": None,
    }


@pytest.mark.asyncio
async def test_submit_twice_raises_conflict(db_session):
    student, bursary = await _seed(db_session)
    await submit_application(db_session, student.id, bursary.id)

    with pytest.raises(ConflictError):
        await submit_application(db_session, student.id, bursary.id)

    result = await db_session.execute(select(Application))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_submit_unknown_student(db_session):
    _, bursary = await _seed(db_session)
    with pytest.raises(NotFoundError):
        await submit_application(db_session, 12345, bursary.id)


@pytest.mark.asyncio
async def test_transition_appends_history_and_syncs_summary(db_session):
    student, bursary = await _seed(db_session)
    application, _ = await submit_application(db_session, student.id, bursary.id)

    update, app_after, payload = await record_status_transition(
        db_session, _transition(application.id, "Under Review", remarks="Checking transcripts")
    )

    assert update.id is not None
    assert app_after.current_status == "Under Review"
    assert payload["event_kind"] == "status_changed"
    assert payload["status"] == "Under Review"
    assert payload["remarks"] == "Checking transcripts"

    history = await get_history(db_session, application.id)
    assert [h.status for h in history] == ["Submitted", "Under Review"]

    stored = await db_session.get(Application, application.id)
    assert stored.current_status == history[-1].status


@pytest.mark.asyncio
async def test_failed_commit_leaves_history_and_summary_untouched(db_session, monkeypatch):
    student, bursary = await _seed(db_session)
    application, _ = await submit_application(db_session, student.id, bursary.id)
    application_id = application.id

    async def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", broken_commit)

    with pytest.raises(PersistenceError) as exc_info:
        await record_status_transition(db_session, _transition(application_id, "Approved"))
    # driver detail is never part of the public message
    assert "disk I/O" not in exc_info.value.message

    monkeypatch.undo()
    db_session.expire_all()

    history = await get_history(db_session, application_id)
    assert [h.status for h in history] == ["Submitted"]
    stored = await db_session.get(Application, application_id)
    assert stored.current_status == "Submitted"


@pytest.mark.asyncio
async def test_reconcile_repairs_drifted_summary(db_session):
    student, bursary = await _seed(db_session)
    application, _ = await submit_application(db_session, student.id, bursary.id)
    await record_status_transition(db_session, _transition(application.id, "Approved"))

    # Simulate a stale summary written outside the lifecycle functions
    stored = await db_session.get(Application, application.id)
    stored.current_status = "Submitted"
    db_session.add(stored)
    await db_session.commit()

    repaired = await reconcile_current_status(db_session, application.id)
    assert repaired.current_status == "Approved"


@pytest.mark.asyncio
async def test_withdraw_cascades_history(db_session):
    student, bursary = await _seed(db_session)
    application, _ = await submit_application(db_session, student.id, bursary.id)
    await record_status_transition(db_session, _transition(application.id, "Under Review"))

    payload = await withdraw_application(db_session, student.id, bursary.id)
    assert payload["event_kind"] == "withdrawn"
    assert payload["bursary_title"] == "Data Science Bursary"

    remaining = await db_session.execute(
        select(StatusUpdate).where(StatusUpdate.application_id == application.id)
    )
    assert remaining.scalars().all() == []

    with pytest.raises(NotFoundError):
        await get_history(db_session, application.id)


@pytest.mark.asyncio
async def test_withdraw_missing_application(db_session):
    student, bursary = await _seed(db_session)
    with pytest.raises(NotFoundError):
        await withdraw_application(db_session, student.id, bursary.id)
