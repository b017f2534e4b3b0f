"""
Pydantic schemas for owners
"""

from pydantic import Field, field_validator
from typing import Optional

from parking_qr.models import Plan
from parking_qr.schemas.common import ApiResponse, CamelModel, clean_text


class UpgradeRequest(CamelModel):
    """Tier upgrade request"""
    email: str = Field(default="", validate_default=True)
    payment_token: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def email_required(cls, value) -> str:
        value = clean_text(value)
        if not value:
            raise ValueError("Email is required")
        return value.lower()


class OwnerSummary(CamelModel):
    email: str
    name: str
    plan: Plan
    qr_count: int


class UserInfoResponse(ApiResponse):
    exists: bool
    plan: Plan
    qr_count: int
    email: Optional[str] = None
    name: Optional[str] = None


class UpgradeResponse(ApiResponse):
    email: str
    plan: Plan
