"""
Pydantic schemas for QR code records
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional

from parking_qr.core.phone import is_valid_email, is_valid_phone
from parking_qr.schemas.common import ApiResponse, CamelModel, clean_text
from parking_qr.schemas.owner import OwnerSummary


class QRGenerateRequest(CamelModel):
    """QR generation form. Missing fields fall through to the same messages as bad ones."""
    name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    address: str = Field(default="", validate_default=True)
    phone: str = Field(default="", validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value) -> str:
        value = clean_text(value)
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value) -> str:
        value = clean_text(value)
        if not is_valid_email(value):
            raise ValueError("Valid email is required")
        return value.lower()

    @field_validator("address", mode="before")
    @classmethod
    def check_address(cls, value) -> str:
        value = clean_text(value)
        if len(value) < 5:
            raise ValueError("Address must be at least 5 characters")
        return value

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, value) -> str:
        value = clean_text(value)
        if not is_valid_phone(value):
            raise ValueError("Valid phone number is required")
        return value


class CodeRecordRead(CamelModel):
    """Full record, returned only to the owner who generated it"""
    id: str
    qr_value: str
    name: str
    email: str
    address: str
    phone: str
    created_at: datetime


class QRGenerateResponse(ApiResponse):
    qr_code: CodeRecordRead
    user: OwnerSummary


class QRListResponse(ApiResponse):
    qr_codes: list[CodeRecordRead]


class QRInfoResponse(ApiResponse):
    """What a scanner sees. Phone is only present when explicitly enabled."""
    id: str
    name: str
    email: str
    address: str
    created_at: datetime
    phone: Optional[str] = None
