"""Notification schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from crm.timeutils import UTCDateTime


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_email: str
    type: str
    title: str
    message: Optional[str] = None
    related_task_id: Optional[int] = None
    related_lead_id: Optional[int] = None
    is_read: bool
    created_at: UTCDateTime
    read_at: Optional[UTCDateTime] = None


class UnreadCountResponse(BaseModel):
    count: int
