"""Stored-file metadata for client projects (the bytes live in external storage)"""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text

from crm.database import Base
from crm.timeutils import utcnow


class ClientFile(Base):
    __tablename__ = "client_project_files"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)  # stored name
    original_name = Column(String(255), nullable=False)
    file_path = Column(Text, nullable=False)
    file_size = Column(BigInteger, nullable=False)  # bytes
    mime_type = Column(String(100), nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ClientFile(id={self.id}, client_id={self.client_id}, name='{self.original_name}')>"
