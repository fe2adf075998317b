# bursary/api/endpoints/messages.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session
from bursary.models.enums import UserRole
from bursary.schemas.message import ConversationRead, MarkReadRequest, MessageCreate, MessageRead
from bursary.services.messaging_service import (
    list_conversations,
    list_messages,
    mark_conversation_read,
    send_message,
)

router = APIRouter(tags=["Messaging"])


@router.post("/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def post_message(data: MessageCreate, session: AsyncSession = Depends(get_db_session)):
    return await send_message(session, data)


@router.get("/conversations/{conversation_id}/messages", response_model=List[MessageRead])
async def conversation_messages(conversation_id: int, session: AsyncSession = Depends(get_db_session)):
    return await list_messages(session, conversation_id)


@router.get("/conversations/{role}/{user_id}", response_model=List[ConversationRead])
async def conversations_for_user(
    role: UserRole,
    user_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    return await list_conversations(session, role, user_id)


@router.post("/conversations/{conversation_id}/read")
async def read_conversation(
    conversation_id: int,
    data: MarkReadRequest,
    session: AsyncSession = Depends(get_db_session),
):
    count = await mark_conversation_read(session, conversation_id, data.reader_id, data.reader_role)
    return {"message": "Messages marked as read", "updated": count}
