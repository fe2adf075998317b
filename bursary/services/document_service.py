# bursary/services/document_service.py

from fastapi import UploadFile
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bursary.core.exceptions import NotFoundError, ValidationError
from bursary.core.storage import save_application_document, delete_stored_file
from bursary.models.application import Application
from bursary.models.document import Document


async def upload_document(
    session: AsyncSession,
    application_id: int,
    student_id: int,
    document_type: str,
    file: UploadFile,
) -> Document:
    if not document_type or not document_type.strip():
        raise ValidationError("document_type is required")

    application = await session.get(Application, application_id)
    if not application or application.student_id != student_id:
        raise NotFoundError("Application not found for this student")

    file_url = await save_application_document(file, student_id, application_id)

    document = Document(
        application_id=application_id,
        student_id=student_id,
        document_type=document_type.strip(),
        file_name=file.filename or "document",
        file_url=file_url,
    )
    session.add(document)

    try:
        await session.commit()
    except Exception:
        await session.rollback()
        # Don't leave orphan files behind
        delete_stored_file(file_url)
        raise

    await session.refresh(document)
    logger.info(f"Document {document.id} uploaded for application {application_id}")
    return document


async def list_documents(session: AsyncSession, application_id: int) -> list[Document]:
    if not await session.get(Application, application_id):
        raise NotFoundError("Application not found")

    result = await session.execute(
        select(Document)
        .where(Document.application_id == application_id)
        .order_by(Document.uploaded_at.asc(), Document.id.asc())
    )
    return result.scalars().all()
