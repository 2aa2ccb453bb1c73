"""Team task schemas"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.models.task import TASK_PRIORITIES, TASK_STATUSES
from crm.schemas.common import check_email
from crm.timeutils import UTCDateTime

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_due_date(v):
    """Accept ISO datetimes (with offset) or plain YYYY-MM-DD dates"""
    if v is None or isinstance(v, datetime):
        return v
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
        if DATE_ONLY.match(v):
            return datetime.fromisoformat(v)
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("dueDate must be an ISO datetime or YYYY-MM-DD")
    return v


class TaskCreate(BaseModel):
    """Task for a lead or a client; exactly one of leadId/clientId is enforced by the service"""

    model_config = ConfigDict(populate_by_name=True)

    assigned_to_email: str = Field(..., alias="assignedToEmail")
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[UTCDateTime] = Field(None, alias="dueDate")
    priority: Optional[str] = None
    lead_id: Optional[int] = Field(None, alias="leadId")
    client_id: Optional[int] = Field(None, alias="clientId")

    @field_validator("assigned_to_email")
    @classmethod
    def validate_assignee(cls, v: str) -> str:
        try:
            return check_email(v, required=True)
        except ValueError:
            raise ValueError("assignedToEmail must be a valid email")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return _parse_due_date(v)


class TaskStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in TASK_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(TASK_STATUSES)}")
        return v


class TaskUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    assigned_to_email: Optional[str] = Field(None, alias="assignedToEmail")
    description: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[UTCDateTime] = Field(None, alias="dueDate")
    status: Optional[str] = None
    priority: Optional[str] = None

    @field_validator("assigned_to_email")
    @classmethod
    def validate_assignee(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        try:
            return check_email(v, required=True)
        except ValueError:
            raise ValueError("assignedToEmail must be a valid email")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return _parse_due_date(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TASK_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(TASK_STATUSES)}")
        return v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TASK_PRIORITIES:
            raise ValueError(f"Priority must be one of: {', '.join(TASK_PRIORITIES)}")
        return v


class SideEffectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    ok: bool
    error: Optional[str] = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: Optional[int] = None
    client_id: Optional[int] = None
    assigned_to_email: str
    title: str
    description: Optional[str] = None
    due_date: Optional[UTCDateTime] = None
    status: str
    priority: str
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class TaskWriteResponse(TaskResponse):
    side_effects: list[SideEffectResponse] = []
