"""Contact and client schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import blank_to_none, check_email
from crm.timeutils import UTCDateTime


class ContactBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)

    @field_validator("phone", "company")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class ContactCreate(ContactBase):
    """Contact details supplied when creating a lead"""


class ClientCreate(ContactBase):
    """Direct client creation; lead_id records the lead it was converted from"""

    model_config = ConfigDict(populate_by_name=True)

    lead_id: Optional[int] = Field(None, alias="leadId", gt=0)


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v)


class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    is_client: bool = False
    client_number: Optional[str] = None
    lead_id: Optional[int] = None
    deleted_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class ClientResponse(ContactResponse):
    lead_count: int = 0
    deal_count: int = 0
