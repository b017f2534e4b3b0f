"""
Tests for owner resolution and plan limits
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from parking_qr.core.errors import NotFoundError
from parking_qr.models import Plan
from parking_qr.services import OwnerDirectory
from parking_qr.store import JsonRecordStore, SqlRecordStore


@pytest.fixture
def directory(store):
    return OwnerDirectory(store, free_tier_limit=3)


def test_resolve_or_create_is_idempotent(directory):
    first = directory.resolve_or_create("a@b.com", "Alice")
    second = directory.resolve_or_create("A@B.com", "Someone Else")

    assert first.id == second.id
    assert second.name == "Alice"
    assert second.plan == Plan.FREE


def test_find_is_case_insensitive(directory):
    owner = directory.resolve_or_create("Driver@Example.com", "Driver")

    assert directory.find("driver@example.com").id == owner.id
    assert directory.find("unknown@example.com") is None


class TestTierLimits:
    """Free owners are capped, premium owners are not"""

    def test_free_owner_limit(self, directory):
        owner = directory.resolve_or_create("a@b.com", "Alice")

        assert directory.get_tier_limit(owner) == 3
        assert directory.can_create(owner, 2).allowed
        check = directory.can_create(owner, 3)
        assert not check.allowed
        assert check.limit == 3
        assert check.current == 3

    def test_premium_owner_unbounded(self, directory):
        directory.resolve_or_create("a@b.com", "Alice")
        owner = directory.upgrade("a@b.com")

        assert directory.get_tier_limit(owner) is None
        assert directory.can_create(owner, 500).allowed

    def test_enforcement_disabled(self, store):
        directory = OwnerDirectory(store, free_tier_limit=3, enforce_limits=False)
        owner = directory.resolve_or_create("a@b.com", "Alice")

        assert directory.get_tier_limit(owner) is None
        assert directory.can_create(owner, 10).allowed


def test_upgrade_sets_premium_and_timestamp(directory):
    directory.resolve_or_create("a@b.com", "Alice")

    owner = directory.upgrade("A@B.COM")

    assert owner.plan == Plan.PREMIUM
    assert owner.upgraded_at is not None
    assert directory.find("a@b.com").is_premium


def test_upgrade_unknown_owner(directory):
    with pytest.raises(NotFoundError) as exc_info:
        directory.upgrade("nobody@example.com")
    assert exc_info.value.message == "User not found"


def test_get_info(directory):
    unknown = directory.get_info("nobody@example.com")
    assert not unknown.exists
    assert unknown.plan == Plan.FREE
    assert unknown.qr_count == 0

    directory.resolve_or_create("a@b.com", "Alice")
    info = directory.get_info("a@b.com")
    assert info.exists
    assert info.email == "a@b.com"
    assert info.name == "Alice"
    assert info.qr_count == 0


@pytest.mark.parametrize("backend", ["json", "sql"])
def test_concurrent_first_contact_creates_one_owner(tmp_path, backend):
    if backend == "json":
        store = JsonRecordStore(str(tmp_path / "database.json"))
    else:
        store = SqlRecordStore(f"sqlite:///{tmp_path / 'parking_qr.db'}")
    store.open()
    directory = OwnerDirectory(store)

    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            owners = list(pool.map(lambda _: directory.resolve_or_create("race@example.com", "Racer"), range(16)))

        assert len({owner.id for owner in owners}) == 1
        assert store.find_owner_by_email("race@example.com").id == owners[0].id
    finally:
        store.close()


def test_lost_race_rereads_owner(json_store):
    """A duplicate error on create resolves to the owner written by the other request"""
    winner = OwnerDirectory(json_store).resolve_or_create("race@example.com", "Winner")

    class StaleReadStore:
        def __init__(self, inner):
            self.inner = inner
            self.reads = 0

        def find_owner_by_email(self, email):
            self.reads += 1
            if self.reads == 1:
                return None
            return self.inner.find_owner_by_email(email)

        def create_owner(self, owner):
            return self.inner.create_owner(owner)

    stale = StaleReadStore(json_store)
    owner = OwnerDirectory(stale).resolve_or_create("race@example.com", "Loser")

    assert owner.id == winner.id
    assert stale.reads == 2
