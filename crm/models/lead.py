"""Lead model - sales prospects"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from crm.database import Base
from crm.timeutils import utcnow

LEAD_STAGES = ("new", "qualified", "proposal", "negotiation", "closed")
LEAD_STATUSES = ("new", "contacted", "won", "lost")


class Lead(Base):
    """Lead model - owns the Contact created together with it"""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)

    # Denormalized copy of the contact's details for fast reads
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)

    source = Column(String(100), nullable=True)
    stage = Column(String(50), nullable=False, default="new")  # pipeline progress
    status = Column(String(50), nullable=False)  # outcome: new, contacted, won, lost; always set by the service
    verticals = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_by_email = Column(String(255), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    contact = relationship("Contact", back_populates="leads", foreign_keys=[contact_id])

    __table_args__ = (
        Index("idx_leads_status", "status"),
        Index("idx_leads_stage", "stage"),
    )

    def __repr__(self):
        return f"<Lead(id={self.id}, name='{self.name}', stage='{self.stage}', status='{self.status}')>"
