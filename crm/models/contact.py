"""Contact model - people and organizations, promoted to clients when flagged"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from crm.database import Base
from crm.timeutils import utcnow


class Contact(Base):
    """Contact / client record"""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)

    # Client state
    is_client = Column(Boolean, nullable=False, default=False)
    client_number = Column(String(20), nullable=True, unique=True)  # CLT-NNNNNN
    # Lead this client was converted from (back-reference, not ownership).
    # Leads also reference contacts, so the constraint is added after both tables exist.
    lead_id = Column(
        Integer,
        ForeignKey("leads.id", use_alter=True, name="fk_contacts_lead_id", ondelete="SET NULL"),
        nullable=True,
    )
    deleted_at = Column(DateTime, nullable=True)  # soft delete (trash)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    leads = relationship("Lead", back_populates="contact", foreign_keys="Lead.contact_id")

    __table_args__ = (
        Index("idx_contacts_is_client_deleted", "is_client", "deleted_at"),
    )

    def __repr__(self):
        return f"<Contact(id={self.id}, name='{self.name}', is_client={self.is_client}, client_number='{self.client_number}')>"
