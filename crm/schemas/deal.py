"""Deal schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.timeutils import UTCDateTime


class DealCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lead_id: int = Field(..., alias="leadId", gt=0, description="Lead the deal is created from")
    title: Optional[str] = Field(None, max_length=255)
    deal_value: Optional[float] = Field(None, alias="dealValue", gt=0)
    notes: Optional[str] = Field(None, max_length=1000)


class DealStageUpdate(BaseModel):
    """Stage is validated by the service so a bad value never reaches the row"""

    stage: str = Field(..., min_length=1, max_length=50)


class DealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lead_id: int
    title: str
    deal_value: Optional[float] = None
    stage: str
    notes: Optional[str] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None

    # Pipeline listing extras
    lead_name: Optional[str] = None
    contact_name: Optional[str] = None
    company: Optional[str] = None


class DealPipelineResponse(BaseModel):
    """Deals grouped by stage; every stage key is always present"""

    new: list[DealResponse] = []
    qualified: list[DealResponse] = []
    proposal: list[DealResponse] = []
    negotiation: list[DealResponse] = []
    closed: list[DealResponse] = []

    @field_validator("*", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v


