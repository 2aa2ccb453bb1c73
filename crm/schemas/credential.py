"""Project credential schemas (passwords travel in plain text over the API only)"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crm.timeutils import UTCDateTime


class CredentialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    url: Optional[str] = Field(None, max_length=500)
    username: Optional[str] = Field(None, max_length=255)
    password: str = Field(..., min_length=1)


class CredentialUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[str] = Field(None, max_length=500)
    username: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=1)


class CredentialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    title: str
    url: Optional[str] = None
    username: Optional[str] = None
    password: str
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None
