"""Direct messages between team members"""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text

from crm.database import Base
from crm.timeutils import utcnow


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_email = Column(String(255), nullable=False, index=True)
    receiver_email = Column(String(255), nullable=False, index=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    read_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_chat_messages_conversation", "sender_email", "receiver_email", "created_at"),
    )

    def __repr__(self):
        return f"<ChatMessage(id={self.id}, from='{self.sender_email}', to='{self.receiver_email}')>"
