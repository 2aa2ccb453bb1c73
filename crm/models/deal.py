"""Deal model - pipeline-tracked opportunity derived from a lead"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from crm.database import Base
from crm.timeutils import utcnow

DEAL_STAGES = ("new", "qualified", "proposal", "negotiation", "closed")


def _new_deal_id() -> str:
    return str(uuid.uuid4())


class Deal(Base):
    __tablename__ = "deals"

    id = Column(String(36), primary_key=True, default=_new_deal_id)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    deal_value = Column(Numeric(12, 2), nullable=True)
    stage = Column(String(50), nullable=False, default="new", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Deal(id='{self.id}', lead_id={self.lead_id}, stage='{self.stage}')>"
