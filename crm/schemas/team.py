"""Team member schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.schemas.common import check_email
from crm.timeutils import UTCDateTime

TEAM_ROLES = ("admin", "manager", "user")


class TeamMemberCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    role: str = "user"
    is_active: bool = Field(True, alias="isActive")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v, required=True).lower()

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        if v not in TEAM_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(TEAM_ROLES)}")
        return v


class TeamMemberUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TEAM_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(TEAM_ROLES)}")
        return v


class TeamMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str
    is_active: bool
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None
