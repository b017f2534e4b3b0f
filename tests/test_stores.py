"""
Tests for the record store backends
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from parking_qr.models import CodeRecord, Owner, Plan
from parking_qr.store import (
    DuplicateRecordError, JsonRecordStore, SqlRecordStore, StoreError, create_store
)
from tests.conftest import BASE_URL, make_settings


def add_owner(store, email="owner@example.com", name="Owner"):
    return store.create_owner(Owner(email=email, name=name))


def add_record(store, owner, phone="5551234567"):
    record = CodeRecord.build(
        owner_id=owner.id,
        name=owner.name,
        email=owner.email,
        address="12 Harbour Street",
        phone=phone,
        base_url=BASE_URL,
    )
    return store.create_code_record(record)


class TestOwners:
    """Owner persistence, run against every backend"""

    def test_create_and_find_by_email(self, store):
        owner = add_owner(store, email="Owner@Example.com")

        found = store.find_owner_by_email("owner@example.com")
        assert found is not None
        assert found.id == owner.id
        assert found.email == "owner@example.com"
        assert found.plan == Plan.FREE
        assert found.upgraded_at is None

    def test_find_unknown_email(self, store):
        assert store.find_owner_by_email("nobody@example.com") is None

    def test_duplicate_email_rejected(self, store):
        add_owner(store)
        with pytest.raises(DuplicateRecordError):
            add_owner(store, email="OWNER@example.com")

    def test_update_plan(self, store):
        add_owner(store)
        upgraded_at = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

        owner = store.update_owner_plan("owner@example.com", Plan.PREMIUM, upgraded_at)

        assert owner.plan == Plan.PREMIUM
        assert owner.upgraded_at == upgraded_at
        assert store.find_owner_by_email("owner@example.com").plan == Plan.PREMIUM

    def test_update_plan_unknown_owner(self, store):
        assert store.update_owner_plan("nobody@example.com", Plan.PREMIUM, datetime.now(timezone.utc)) is None

    def test_timestamps_are_utc_aware(self, store):
        owner = add_owner(store)
        store.update_owner_plan(owner.email, Plan.PREMIUM, datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))

        found = store.find_owner_by_email(owner.email)

        assert found.created_at.utcoffset() == timedelta(0)
        assert found.upgraded_at == datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert found.created_at == owner.created_at


class TestCodeRecords:
    """Code record persistence, run against every backend"""

    def test_create_and_find(self, store):
        owner = add_owner(store)
        record = add_record(store, owner)

        found = store.find_code_record(record.id)
        assert found is not None
        assert found.owner_id == owner.id
        assert found.qr_value == f"{BASE_URL}/scan/{record.id}"
        assert found.phone == "5551234567"

    def test_find_unknown_record(self, store):
        assert store.find_code_record("does-not-exist") is None

    def test_created_at_round_trips_with_offset(self, store):
        owner = add_owner(store)
        record = add_record(store, owner)

        found = store.find_code_record(record.id)

        assert found.created_at.tzinfo is not None
        assert found.created_at == record.created_at
        assert store.list_code_records(owner.id)[0].created_at.utcoffset() == timedelta(0)

    def test_list_and_count_per_owner(self, store):
        owner = add_owner(store)
        other = add_owner(store, email="other@example.com")
        first = add_record(store, owner)
        second = add_record(store, owner)
        add_record(store, other)

        records = store.list_code_records(owner.id)

        assert {r.id for r in records} == {first.id, second.id}
        assert store.count_code_records(owner.id) == 2
        assert store.count_code_records(other.id) == 1
        assert store.count_code_records("unknown") == 0


def test_json_store_persists_across_reopen(tmp_path):
    path = tmp_path / "database.json"
    store = JsonRecordStore(str(path))
    store.open()
    owner = add_owner(store)
    add_record(store, owner)
    store.close()

    reopened = JsonRecordStore(str(path))
    reopened.open()
    assert reopened.find_owner_by_email("owner@example.com").id == owner.id
    assert reopened.count_code_records(owner.id) == 1


def test_json_store_document_layout(json_store):
    add_owner(json_store)
    with json_store.path.open() as fh:
        data = json.load(fh)

    assert set(data) == {"users", "qrCodes"}
    assert data["users"][0]["email"] == "owner@example.com"


def test_closed_store_raises(tmp_path):
    json_store = JsonRecordStore(str(tmp_path / "database.json"))
    sql_store = SqlRecordStore("sqlite:///:memory:")

    with pytest.raises(StoreError):
        json_store.find_owner_by_email("owner@example.com")
    with pytest.raises(StoreError):
        sql_store.find_owner_by_email("owner@example.com")


def test_create_store_picks_backend(tmp_path):
    json_settings = make_settings(STORE_BACKEND="json", STORE_PATH=str(tmp_path / "db.json"))
    sql_settings = make_settings(STORE_BACKEND="sql", DATABASE_URL="sqlite:///:memory:")

    assert isinstance(create_store(json_settings), JsonRecordStore)
    assert isinstance(create_store(sql_settings), SqlRecordStore)

    with pytest.raises(ValueError):
        create_store(make_settings(STORE_BACKEND="mongo"))
