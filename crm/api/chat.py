"""Team chat endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.middleware.identity import get_user_email
from crm.schemas.chat import ChatMessageCreate, ChatMessageResponse, ConversationSummary, MarkConversationRead
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.notification import UnreadCountResponse
from crm.services import chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/send", response_model=Envelope[ChatMessageResponse], status_code=status.HTTP_201_CREATED)
async def send_message(
    body: ChatMessageCreate,
    user_email: str = Depends(get_user_email),
    db: AsyncSession = Depends(get_db),
):
    message = await chat_service.send_message(db, user_email, body.receiver_email, body.message)
    return ok(ChatMessageResponse.model_validate(message))


@router.get("/conversations", response_model=Envelope[list[ConversationSummary]])
async def list_conversations(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    conversations = await chat_service.list_conversations(db, user_email)
    return ok(conversations, count=len(conversations))


@router.get("/conversation/{other_user_email}", response_model=Envelope[list[ChatMessageResponse]])
async def get_conversation(
    other_user_email: str,
    user_email: str = Depends(get_user_email),
    db: AsyncSession = Depends(get_db),
):
    messages = await chat_service.get_conversation(db, user_email, other_user_email.strip().lower())
    return ok([ChatMessageResponse.model_validate(m) for m in messages], count=len(messages))


@router.patch("/mark-read", response_model=MessageResponse)
async def mark_read(
    body: MarkConversationRead,
    user_email: str = Depends(get_user_email),
    db: AsyncSession = Depends(get_db),
):
    updated = await chat_service.mark_conversation_read(db, user_email, body.sender_email.strip().lower())
    return {"success": True, "message": f"{updated} message(s) marked as read"}


@router.get("/unread-count", response_model=Envelope[UnreadCountResponse])
async def unread_count(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    return ok({"count": await chat_service.unread_message_count(db, user_email)})
