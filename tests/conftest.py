"""
Test configuration for pytest
"""

import os
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient

# Test environment variables, set before the application module is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["STORE_BACKEND"] = "json"
os.environ.pop("TWILIO_ACCOUNT_SID", None)
os.environ.pop("TWILIO_AUTH_TOKEN", None)
os.environ.pop("TWILIO_PHONE_NUMBER", None)

from parking_qr.core.config import Settings, get_settings  # noqa: E402
from parking_qr.core.dependencies import get_provider, get_store  # noqa: E402
from parking_qr.main import app  # noqa: E402
from parking_qr.services import CallDetails, PlacedCall, ProviderError, TelephonyProvider  # noqa: E402
from parking_qr.store import JsonRecordStore, RecordStore, SqlRecordStore  # noqa: E402

BASE_URL = "https://qr.example.com"
MASKED_NUMBER = "+15550001111"


class FakeProvider(TelephonyProvider):
    """Telephony double that records every call it is asked to place"""

    def __init__(self, fail: bool = False):
        self.caller_id = MASKED_NUMBER
        self.fail = fail
        self.calls: list[dict] = []
        self.known_calls: dict[str, CallDetails] = {}
        self.lookups: list[str] = []

    def place_call(self, to: str, answer_url: str, status_callback_url: str) -> PlacedCall:
        self.calls.append({"to": to, "answer_url": answer_url, "status_callback_url": status_callback_url})
        if self.fail:
            raise ProviderError("Twilio error 21211: Invalid 'To' Phone Number")
        sid = f"CA{len(self.calls):032d}"
        self.known_calls[sid] = CallDetails(sid=sid, status="queued")
        return PlacedCall(sid=sid, status="queued")

    def fetch_call(self, call_sid: str) -> Optional[CallDetails]:
        self.lookups.append(call_sid)
        if self.fail:
            raise ProviderError("Twilio unreachable")
        return self.known_calls.get(call_sid)


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "BASE_URL": BASE_URL,
        "FREE_TIER_QR_LIMIT": 3,
        "ENFORCE_TIER_LIMITS": True,
        "PUBLIC_QR_INCLUDES_PHONE": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def json_store(tmp_path) -> Generator[JsonRecordStore, None, None]:
    """JSON store backed by a file in the test's temp dir"""
    store = JsonRecordStore(str(tmp_path / "database.json"))
    store.open()
    yield store
    store.close()


@pytest.fixture
def sql_store() -> Generator[SqlRecordStore, None, None]:
    """SQL store on in-memory SQLite"""
    store = SqlRecordStore("sqlite:///:memory:")
    store.open()
    yield store
    store.close()


@pytest.fixture(params=["json", "sql"])
def store(request) -> RecordStore:
    """Runs the test once per backend"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_client(json_store):
    """Build a TestClient with the given provider and settings overrides"""

    def _make(provider: Optional[TelephonyProvider] = None, store: RecordStore = None, **settings_overrides):
        settings = make_settings(**settings_overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_store] = lambda: store or json_store
        app.dependency_overrides[get_provider] = lambda: provider
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client) -> TestClient:
    """Client without telephony credentials (demo mode)"""
    return make_client()


def generate_payload(**overrides) -> dict:
    payload = {
        "name": "Alice",
        "email": "a@b.com",
        "address": "12 Harbour Street",
        "phone": "5551234567",
    }
    payload.update(overrides)
    return payload
