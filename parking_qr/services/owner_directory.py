"""
Owner directory: email -> Owner resolution, plans and plan limits
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from parking_qr.core.errors import NotFoundError
from parking_qr.models import Owner, Plan, utc_now
from parking_qr.store import DuplicateRecordError, RecordStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TierCheck:
    allowed: bool
    limit: Optional[int]  # None means unbounded
    current: int


@dataclass(frozen=True)
class OwnerInfo:
    exists: bool
    plan: Plan
    qr_count: int
    email: Optional[str] = None
    name: Optional[str] = None


class OwnerDirectory:
    """Resolves owners by email and applies plan rules"""

    def __init__(self, store: RecordStore, free_tier_limit: int = 3, enforce_limits: bool = True):
        self.store = store
        self.free_tier_limit = free_tier_limit
        self.enforce_limits = enforce_limits

    def resolve_or_create(self, email: str, name: str) -> Owner:
        """Return the owner for this email, creating a free-tier one on first contact"""
        email = email.strip().lower()
        owner = self.store.find_owner_by_email(email)
        if owner is not None:
            return owner

        try:
            owner = self.store.create_owner(Owner(email=email, name=name.strip(), plan=Plan.FREE))
        except DuplicateRecordError:
            # Lost a first-contact race with a concurrent request
            logger.info(f"Owner created concurrently, re-reading: {email}")
            owner = self.store.find_owner_by_email(email)
            if owner is None:
                raise
            return owner

        logger.info(f"Owner created: {owner.id}")
        return owner

    def find(self, email: str) -> Optional[Owner]:
        return self.store.find_owner_by_email(email.strip().lower())

    def get_tier_limit(self, owner: Owner) -> Optional[int]:
        if not self.enforce_limits or owner.is_premium:
            return None
        return self.free_tier_limit

    def can_create(self, owner: Owner, count: int) -> TierCheck:
        limit = self.get_tier_limit(owner)
        return TierCheck(allowed=limit is None or count < limit, limit=limit, current=count)

    def upgrade(self, email: str) -> Owner:
        """Move the owner to premium. No payment verification happens here."""
        owner = self.store.update_owner_plan(email.strip().lower(), Plan.PREMIUM, utc_now())
        if owner is None:
            raise NotFoundError("User")
        logger.info(f"Owner upgraded to premium: {owner.id}")
        return owner

    def get_info(self, email: str) -> OwnerInfo:
        owner = self.find(email)
        if owner is None:
            return OwnerInfo(exists=False, plan=Plan.FREE, qr_count=0)
        return OwnerInfo(
            exists=True,
            email=owner.email,
            name=owner.name,
            plan=owner.plan,
            qr_count=self.store.count_code_records(owner.id),
        )
