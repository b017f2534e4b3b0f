"""
Pydantic schemas for the masked call flow
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional

from parking_qr.schemas.common import ApiResponse, CamelModel, clean_text


class CallInitiateRequest(CamelModel):
    qr_id: str = Field(default="", validate_default=True)
    caller_phone: Optional[str] = None

    @field_validator("qr_id", mode="before")
    @classmethod
    def qr_id_required(cls, value) -> str:
        value = clean_text(value)
        if not value:
            raise ValueError("QR ID is required")
        return value

    @field_validator("caller_phone", mode="before")
    @classmethod
    def blank_caller_phone(cls, value) -> Optional[str]:
        # Format is checked only when a call is actually placed
        return clean_text(value) or None


class CallInitiateResponse(ApiResponse):
    requires_phone_number: Optional[bool] = None
    owner_phone: Optional[str] = None
    masked_number: Optional[str] = None
    call_sid: Optional[str] = None
    status: Optional[str] = None
    note: Optional[str] = None


class CallDetailsResponse(ApiResponse):
    sid: str
    status: str
    duration: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
