"""Team task model - assigned to a lead or to a client, never both"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text

from crm.database import Base
from crm.timeutils import utcnow

TASK_STATUSES = ("open", "in_progress", "done")
TASK_PRIORITIES = ("low", "normal", "high")


class Task(Base):
    __tablename__ = "team_tasks"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("contacts.id"), nullable=True, index=True)
    assigned_to_email = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    status = Column(String(50), nullable=False, default="open", index=True)
    priority = Column(String(20), nullable=False, default="normal")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "(lead_id IS NULL) <> (client_id IS NULL)",
            name="ck_team_tasks_lead_xor_client",
        ),
        Index("idx_team_tasks_due_date", "due_date"),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}', assigned_to='{self.assigned_to_email}')>"
