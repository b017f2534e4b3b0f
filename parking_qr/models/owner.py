"""
Owner model - the person whose real phone number is protected
"""

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone
from typing import Optional
from enum import Enum
import uuid


class Plan(str, Enum):
    """Subscription tiers"""
    FREE = "free"
    PREMIUM = "premium"


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops the offset on read; stored values are always UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Owner(SQLModel, table=True):
    """Vehicle owner, created lazily on the first QR request for an email"""

    __tablename__ = "owners"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)

    # Email is stored lowercased; the unique index guards concurrent first contact
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    name: str = Field(default="", max_length=255)

    plan: Plan = Field(default=Plan.FREE, nullable=False, description="Subscription plan: free, premium")

    # Timestamps (UTC, timezone-aware)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), nullable=False)
    upgraded_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), nullable=True)

    @property
    def is_premium(self) -> bool:
        return self.plan == Plan.PREMIUM
