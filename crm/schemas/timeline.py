"""Schemas for the three timeline logs and the per-lead timeline"""

from datetime import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from crm.timeutils import UTCDateTime


class ActivityCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_type: str = Field(..., alias="activityType", min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)


class StandaloneActivityCreate(ActivityCreate):
    lead_id: Optional[int] = Field(None, alias="leadId", gt=0)
    contact_id: Optional[int] = Field(None, alias="contactId", gt=0)


class ActivityUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_type: Optional[str] = Field(None, alias="activityType", min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    lead_id: Optional[int] = Field(None, alias="leadId")
    contact_id: Optional[int] = Field(None, alias="contactId")


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: Optional[int] = None
    contact_id: Optional[int] = None
    activity_type: str
    description: Optional[str] = None
    created_at: UTCDateTime

    lead_name: Optional[str] = None
    lead_email: Optional[str] = None
    lead_company: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_company: Optional[str] = None


class ColdCallCreate(BaseModel):
    outcome: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)


class StandaloneColdCallCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lead_id: int = Field(..., alias="leadId", gt=0)
    call_date: Optional[UTCDateTime] = Field(None, alias="callDate")
    duration: Optional[int] = Field(None, ge=0)
    outcome: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)


class ColdCallUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lead_id: Optional[int] = Field(None, alias="leadId", gt=0)
    call_date: Optional[UTCDateTime] = Field(None, alias="callDate")
    duration: Optional[int] = Field(None, ge=0)
    outcome: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)


class ColdCallResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: Optional[int] = None
    call_date: UTCDateTime
    duration: Optional[int] = None
    outcome: Optional[str] = None
    notes: Optional[str] = None
    created_at: UTCDateTime

    lead_name: Optional[str] = None
    lead_email: Optional[str] = None
    lead_company: Optional[str] = None


class OnsiteVisitCreate(BaseModel):
    """Visit logged against a lead; location and outcome map to address and status"""

    location: str = Field(..., min_length=1, max_length=255)
    outcome: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)
    in_time: Optional[time] = None
    out_time: Optional[time] = None
    rescheduled_date: Optional[str] = Field(None, max_length=50)  # date or "dont_know"


class StandaloneVisitCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lead_id: int = Field(..., alias="leadId", gt=0)
    visit_date: Optional[UTCDateTime] = Field(None, alias="visitDate")
    address: Optional[str] = None
    visit_type: Optional[str] = Field(None, alias="visitType", max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)
    in_time: Optional[time] = Field(None, alias="inTime")
    out_time: Optional[time] = Field(None, alias="outTime")
    rescheduled_date: Optional[str] = Field(None, alias="rescheduledDate", max_length=50)


class VisitUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lead_id: Optional[int] = Field(None, alias="leadId", gt=0)
    visit_date: Optional[UTCDateTime] = Field(None, alias="visitDate")
    address: Optional[str] = None
    visit_type: Optional[str] = Field(None, alias="visitType", max_length=100)
    status: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)
    in_time: Optional[time] = Field(None, alias="inTime")
    out_time: Optional[time] = Field(None, alias="outTime")
    rescheduled_date: Optional[str] = Field(None, alias="rescheduledDate", max_length=50)


def _time_str(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value is not None else None


class OnsiteVisitResponse(BaseModel):
    """Visit row as stored (address/status column names)"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: Optional[int] = None
    visit_date: UTCDateTime
    address: Optional[str] = None
    visit_type: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    in_time: Optional[time] = None
    out_time: Optional[time] = None
    rescheduled_date: Optional[str] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None

    lead_name: Optional[str] = None
    lead_email: Optional[str] = None
    lead_company: Optional[str] = None

    @field_serializer("in_time", "out_time")
    def serialize_times(self, value: Optional[time]) -> Optional[str]:
        return _time_str(value)


class TimelineVisit(BaseModel):
    """Visit as shown on a lead timeline (location/outcome naming)"""

    id: int
    lead_id: Optional[int] = None
    visit_date: UTCDateTime
    location: Optional[str] = None
    outcome: Optional[str] = None
    visit_type: Optional[str] = None
    notes: Optional[str] = None
    in_time: Optional[str] = None
    out_time: Optional[str] = None
    rescheduled_date: Optional[str] = None
    created_at: UTCDateTime

    @classmethod
    def from_row(cls, visit) -> "TimelineVisit":
        return cls(
            id=visit.id,
            lead_id=visit.lead_id,
            visit_date=visit.visit_date,
            location=visit.address,
            outcome=visit.status,
            visit_type=visit.visit_type,
            notes=visit.notes,
            in_time=_time_str(visit.in_time),
            out_time=_time_str(visit.out_time),
            rescheduled_date=visit.rescheduled_date,
            created_at=visit.created_at,
        )


class LeadTimelineResponse(BaseModel):
    """Per-lead timeline: three independently ordered arrays, not merged"""

    model_config = ConfigDict(populate_by_name=True)

    activities: list[ActivityResponse] = []
    cold_calls: list[ColdCallResponse] = Field(default_factory=list, alias="coldCalls")
    onsite_visits: list[TimelineVisit] = Field(default_factory=list, alias="onsiteVisits")
