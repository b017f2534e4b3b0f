"""
CodeRecord model - the target behind a printed QR code
"""

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel
from datetime import datetime

from parking_qr.models.owner import new_id, utc_now


def scan_url(base_url: str, record_id: str) -> str:
    """Public URL encoded into the QR image"""
    return f"{base_url.rstrip('/')}/scan/{record_id}"


class CodeRecord(SQLModel, table=True):
    """QR target binding a public URL to an owner's contact details"""

    __tablename__ = "code_records"

    # Assigned here, before the record is written, so qr_value never needs patching
    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    owner_id: str = Field(foreign_key="owners.id", index=True, nullable=False)

    qr_value: str = Field(nullable=False, max_length=1000, description="Literal string encoded into the QR image")

    # Contact details, copied from the request at creation time
    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    address: str = Field(max_length=1000)
    phone: str = Field(max_length=50, description="Owner's real number, never sent to callers")

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)

    @classmethod
    def build(cls, owner_id: str, name: str, email: str, address: str, phone: str, base_url: str) -> "CodeRecord":
        record_id = new_id()
        return cls(
            id=record_id,
            owner_id=owner_id,
            qr_value=scan_url(base_url, record_id),
            name=name.strip(),
            email=email.strip().lower(),
            address=address.strip(),
            phone=phone.strip(),
        )
