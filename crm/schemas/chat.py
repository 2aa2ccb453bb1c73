"""Team chat schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import check_email
from crm.timeutils import UTCDateTime


class ChatMessageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    receiver_email: str = Field(..., alias="receiverEmail")
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("receiver_email")
    @classmethod
    def validate_receiver(cls, v: str) -> str:
        return check_email(v, required=True)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class MarkConversationRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_email: str = Field(..., alias="senderEmail")


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_email: str
    receiver_email: str
    message: str
    is_read: bool
    created_at: UTCDateTime
    read_at: Optional[UTCDateTime] = None


class ConversationSummary(BaseModel):
    other_user_email: str
    last_message: str
    last_message_time: UTCDateTime
    last_message_sender: str
    unread_count: int = 0
