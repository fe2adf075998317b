import os

import pytest

from bursary.core.config import settings


async def _application(client, create_student, create_bursary):
    student = await create_student()
    bursary = await create_bursary()
    res = await client.post("/applications", json={"student_id": student["id"], "bursary_id": bursary["id"]})
    return student, bursary, res.json()["application_id"]


@pytest.mark.asyncio
async def test_upload_and_list_documents(client, create_student, create_bursary):
    student, _, app_id = await _application(client, create_student, create_bursary)

    res = await client.post(
        "/documents/upload",
        data={"application_id": str(app_id), "student_id": str(student["id"]), "document_type": "ID Copy"},
        files={"file": ("id.pdf", b"%PDF-1.4 test document", "application/pdf")},
    )
    assert res.status_code == 201
    doc = res.json()
    assert doc["file_name"] == "id.pdf"
    assert doc["document_type"] == "ID Copy"
    assert doc["file_url"].startswith(f"/uploads/{student['id']}/{app_id}/")

    stored = os.path.join(settings.UPLOAD_DIR, *doc["file_url"][len("/uploads/"):].split("/"))
    assert os.path.exists(stored)

    listed = await client.get(f"/applications/{app_id}/documents")
    assert [d["id"] for d in listed.json()] == [doc["id"]]


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_type(client, create_student, create_bursary):
    student, _, app_id = await _application(client, create_student, create_bursary)

    res = await client.post(
        "/documents/upload",
        data={"application_id": str(app_id), "student_id": str(student["id"]), "document_type": "Script"},
        files={"file": ("run.sh", b"echo hi", "text/x-shellscript")},
    )
    assert res.status_code == 400
    assert "Only PDF" in res.json()["message"]


@pytest.mark.asyncio
async def test_upload_for_someone_elses_application(client, create_student, create_bursary):
    _, _, app_id = await _application(client, create_student, create_bursary)
    stranger = await create_student()

    res = await client.post(
        "/documents/upload",
        data={"application_id": str(app_id), "student_id": str(stranger["id"]), "document_type": "ID Copy"},
        files={"file": ("id.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_withdraw_removes_documents(client, create_student, create_bursary):
    student, bursary, app_id = await _application(client, create_student, create_bursary)
    upload = await client.post(
        "/documents/upload",
        data={"application_id": str(app_id), "student_id": str(student["id"]), "document_type": "Transcript"},
        files={"file": ("marks.png", b"\x89PNG fake", "image/png")},
    )
    file_url = upload.json()["file_url"]

    res = await client.post("/applications/withdraw", json={"student_id": student["id"], "bursary_id": bursary["id"]})
    assert res.status_code == 200

    assert (await client.get(f"/applications/{app_id}/documents")).status_code == 404
    stored = os.path.join(settings.UPLOAD_DIR, *file_url[len("/uploads/"):].split("/"))
    assert not os.path.exists(stored)
