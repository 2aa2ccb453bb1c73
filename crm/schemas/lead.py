"""Lead schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.models.lead import LEAD_STAGES
from crm.schemas.common import blank_to_none
from crm.schemas.contact import ContactCreate, ContactResponse
from crm.schemas.timeline import ActivityResponse
from crm.timeutils import UTCDateTime


class LeadCreate(BaseModel):
    """Schema for creating a lead together with its contact"""

    contact: ContactCreate
    source: Optional[str] = Field(None, max_length=100, description="website, referral, cold_call, ...")
    stage: Optional[str] = Field(None, max_length=100, description="Pipeline stage, defaults to new")
    verticals: Optional[str] = Field(None, max_length=255, description="Industry / vertical")

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v: Optional[str]) -> Optional[str]:
        v = blank_to_none(v)
        if v is None:
            return None
        v = v.lower()
        if v not in LEAD_STAGES:
            raise ValueError(f"Stage must be one of: {', '.join(LEAD_STAGES)}")
        return v

    @field_validator("source", "verticals")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)


class LeadResponse(BaseModel):
    """Lead joined with its contact"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_id: Optional[int] = None
    source: Optional[str] = None
    stage: Optional[str] = None
    status: Optional[str] = None
    verticals: Optional[str] = None
    notes: Optional[str] = None
    created_by_email: Optional[str] = None
    creator_name: Optional[str] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None
    contact: Optional[ContactResponse] = None


class LeadDetailResponse(LeadResponse):
    activities: list[ActivityResponse] = []
