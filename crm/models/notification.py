"""Notification model - alerts for team members"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from crm.database import Base
from crm.timeutils import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String(255), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # task_assigned, task_updated
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    related_task_id = Column(Integer, ForeignKey("team_tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    related_lead_id = Column(Integer, ForeignKey("leads.id", ondelete="SET NULL"), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    read_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_notifications_user_unread", "user_email", "is_read"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, user='{self.user_email}', type='{self.type}', is_read={self.is_read})>"
