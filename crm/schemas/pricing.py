"""Subscription plan schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.timeutils import UTCDateTime


class PlanCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    currency: str = Field("INR", max_length=10)
    billing_period: str = Field("monthly", alias="billingPeriod", max_length=50)
    features: list[str] = []
    is_active: bool = Field(True, alias="isActive")
    is_custom: bool = Field(False, alias="isCustom")
    display_order: int = Field(0, alias="displayOrder")


class PlanUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    billing_period: Optional[str] = Field(None, alias="billingPeriod", max_length=50)
    features: Optional[list[str]] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    is_custom: Optional[bool] = Field(None, alias="isCustom")
    display_order: Optional[int] = Field(None, alias="displayOrder")


class PlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    billing_period: str
    features: list[str] = []
    is_active: bool
    is_custom: bool
    display_order: int
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None

    @field_validator("features", mode="before")
    @classmethod
    def null_features(cls, v):
        return v or []
