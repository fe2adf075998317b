# bursary/api/endpoints/documents.py

from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session
from bursary.schemas.document import DocumentRead
from bursary.services.document_service import list_documents, upload_document

router = APIRouter(tags=["Documents"])


@router.post("/documents/upload", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def upload(
    application_id: int = Form(...),
    student_id: int = Form(...),
    document_type: str = Form(...),
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db_session),
):
    return await upload_document(session, application_id, student_id, document_type, file)


@router.get("/applications/{application_id}/documents", response_model=List[DocumentRead])
async def application_documents(
    application_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await list_documents(session, application_id)
