"""Per-client project credentials (password encrypted at rest)"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from crm.database import Base
from crm.timeutils import utcnow


class ProjectCredential(Base):
    __tablename__ = "project_credentials"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    url = Column(String(500), nullable=True)
    username = Column(String(255), nullable=True)
    encrypted_password = Column(Text, nullable=False)  # Fernet token
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ProjectCredential(id={self.id}, client_id={self.client_id}, title='{self.title}')>"
