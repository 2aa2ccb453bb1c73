"""Direct messages between team members"""

from __future__ import annotations

import logging

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crm.models.chat_message import ChatMessage
from crm.schemas.chat import ConversationSummary
from crm.timeutils import utcnow

logger = logging.getLogger(__name__)


async def send_message(db: AsyncSession, sender_email: str, receiver_email: str, message: str) -> ChatMessage:
    chat_message = ChatMessage(
        sender_email=sender_email,
        receiver_email=receiver_email,
        message=message,
        is_read=False,
        created_at=utcnow(),
    )
    db.add(chat_message)
    await db.commit()
    return chat_message


async def get_conversation(db: AsyncSession, user_email: str, other_email: str) -> list[ChatMessage]:
    """Messages in both directions, oldest first"""
    result = await db.execute(
        select(ChatMessage)
        .where(or_(
            and_(ChatMessage.sender_email == user_email, ChatMessage.receiver_email == other_email),
            and_(ChatMessage.sender_email == other_email, ChatMessage.receiver_email == user_email),
        ))
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    )
    return list(result.scalars().all())


async def list_conversations(db: AsyncSession, user_email: str) -> list[ConversationSummary]:
    """
    One entry per conversation partner with the last message and the
    number of unread messages from that partner, most recent first.
    """
    result = await db.execute(
        select(ChatMessage)
        .where(or_(ChatMessage.sender_email == user_email, ChatMessage.receiver_email == user_email))
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
    )

    conversations: dict[str, ConversationSummary] = {}
    for msg in result.scalars().all():
        other = msg.receiver_email if msg.sender_email == user_email else msg.sender_email
        summary = conversations.get(other)
        if summary is None:
            summary = ConversationSummary(
                other_user_email=other,
                last_message=msg.message,
                last_message_time=msg.created_at,
                last_message_sender=msg.sender_email,
            )
            conversations[other] = summary
        if msg.receiver_email == user_email and not msg.is_read:
            summary.unread_count += 1

    return list(conversations.values())


async def mark_conversation_read(db: AsyncSession, user_email: str, sender_email: str) -> int:
    result = await db.execute(
        update(ChatMessage)
        .where(
            ChatMessage.receiver_email == user_email,
            ChatMessage.sender_email == sender_email,
            ChatMessage.is_read.is_(False),
        )
        .values(is_read=True, read_at=utcnow())
    )
    await db.commit()
    return result.rowcount or 0


async def unread_message_count(db: AsyncSession, user_email: str) -> int:
    count = await db.scalar(
        select(func.count(ChatMessage.id)).where(
            ChatMessage.receiver_email == user_email,
            ChatMessage.is_read.is_(False),
        )
    )
    return count or 0
