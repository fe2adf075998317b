# bursary/services/messaging_service.py

from sqlmodel import select
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from bursary.core.exceptions import ConflictError, NotFoundError
from bursary.models.admin import Admin
from bursary.models.enums import UserRole
from bursary.models.messaging import Conversation, Message
from bursary.models.student import Student
from bursary.schemas.message import MessageCreate


def _opposite(role: UserRole) -> UserRole:
    return UserRole.Admin if role == UserRole.Student else UserRole.Student


def _model_for(role: UserRole):
    return Student if role == UserRole.Student else Admin


async def _get_or_create_conversation(session: AsyncSession, student_id: int, admin_id: int) -> Conversation:
    result = await session.execute(
        select(Conversation).where(
            (Conversation.student_id == student_id) & (Conversation.admin_id == admin_id)
        )
    )
    conversation = result.scalar_one_or_none()
    if conversation:
        return conversation

    conversation = Conversation(student_id=student_id, admin_id=admin_id)
    session.add(conversation)
    try:
        await session.flush()  # assigns conversation.id
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Conversation was created concurrently, please retry")
    return conversation


# ------------------------------------------------------------
# SEND
# ------------------------------------------------------------
async def send_message(session: AsyncSession, data: MessageCreate) -> Message:
    receiver_role = _opposite(data.sender_role)

    if not await session.get(_model_for(data.sender_role), data.sender_id):
        raise NotFoundError(f"Sender {data.sender_role.value} not found")

    # Receiver must exist in the opposite role's table
    if not await session.get(_model_for(receiver_role), data.receiver_id):
        raise NotFoundError(f"Receiver {receiver_role.value} not found")

    if data.sender_role == UserRole.Student:
        student_id, admin_id = data.sender_id, data.receiver_id
    else:
        student_id, admin_id = data.receiver_id, data.sender_id

    conversation = await _get_or_create_conversation(session, student_id, admin_id)

    message = Message(
        conversation_id=conversation.id,
        sender_id=data.sender_id,
        sender_role=data.sender_role.value,
        receiver_id=data.receiver_id,
        receiver_role=receiver_role.value,
        content=data.content.strip(),
    )
    conversation.last_message_at = message.sent_at

    session.add(message)
    session.add(conversation)
    await session.commit()
    await session.refresh(message)

    logger.debug(f"Message {message.id} stored in conversation {conversation.id}")
    return message


# ------------------------------------------------------------
# READ
# ------------------------------------------------------------
async def list_conversations(session: AsyncSession, role: UserRole, user_id: int) -> list[dict]:
    if not await session.get(_model_for(role), user_id):
        raise NotFoundError(f"{role.value.capitalize()} not found")

    if role == UserRole.Student:
        query = (
            select(Conversation, Admin.full_name)
            .join(Admin, Conversation.admin_id == Admin.id)
            .where(Conversation.student_id == user_id)
        )
    else:
        query = (
            select(Conversation, Student.full_name)
            .join(Student, Conversation.student_id == Student.id)
            .where(Conversation.admin_id == user_id)
        )
    result = await session.execute(
        query.order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
    )
    rows = result.all()

    unread_result = await session.execute(
        select(Message.conversation_id, func.count(Message.id))
        .where(
            (Message.receiver_id == user_id)
            & (Message.receiver_role == role.value)
            & (Message.is_read == False)  # noqa: E712
        )
        .group_by(Message.conversation_id)
    )
    unread = dict(unread_result.all())

    return [
        {
            "id": conv.id,
            "student_id": conv.student_id,
            "admin_id": conv.admin_id,
            "counterpart_id": conv.admin_id if role == UserRole.Student else conv.student_id,
            "counterpart_name": name,
            "created_at": conv.created_at,
            "last_message_at": conv.last_message_at,
            "unread_count": unread.get(conv.id, 0),
        }
        for conv, name in rows
    ]


async def list_messages(session: AsyncSession, conversation_id: int) -> list[Message]:
    if not await session.get(Conversation, conversation_id):
        raise NotFoundError("Conversation not found")

    result = await session.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )
    return result.scalars().all()


async def mark_conversation_read(
    session: AsyncSession,
    conversation_id: int,
    reader_id: int,
    reader_role: UserRole,
) -> int:
    if not await session.get(Conversation, conversation_id):
        raise NotFoundError("Conversation not found")

    result = await session.execute(
        update(Message)
        .where(
            (Message.conversation_id == conversation_id)
            & (Message.receiver_id == reader_id)
            & (Message.receiver_role == reader_role.value)
            & (Message.is_read == False)  # noqa: E712
        )
        .values(is_read=True)
    )
    await session.commit()
    return result.rowcount or 0
