"""Timeline logs attached to a lead: activities, cold calls, onsite visits"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, Time

from crm.database import Base
from crm.timeutils import utcnow


class Activity(Base):
    """Free-form activity (call, email, meeting, note, task)"""

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=True, index=True)
    activity_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<Activity(id={self.id}, lead_id={self.lead_id}, type='{self.activity_type}')>"


class ColdCall(Base):
    __tablename__ = "cold_calls"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True, index=True)
    call_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    duration = Column(Integer, nullable=True)  # seconds
    outcome = Column(String(100), nullable=True)  # answered, voicemail, no_answer
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<ColdCall(id={self.id}, lead_id={self.lead_id}, outcome='{self.outcome}')>"


class OnsiteVisit(Base):
    """Onsite visit; the API exposes address as location and status as outcome"""

    __tablename__ = "onsite_visits"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=True, index=True)
    visit_date = Column(DateTime, nullable=False, default=utcnow)
    address = Column(Text, nullable=True)
    visit_type = Column(String(100), nullable=True)  # initial, follow_up, demo
    status = Column(String(50), nullable=True, default="scheduled")
    notes = Column(Text, nullable=True)
    in_time = Column(Time, nullable=True)
    out_time = Column(Time, nullable=True)
    rescheduled_date = Column(String(50), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_onsite_visits_visit_date", "visit_date"),
    )

    def __repr__(self):
        return f"<OnsiteVisit(id={self.id}, lead_id={self.lead_id}, status='{self.status}')>"
