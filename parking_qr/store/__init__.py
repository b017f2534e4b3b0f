"""
Record store backends and the startup-time factory that picks one
"""

from parking_qr.core.config import Settings
from parking_qr.store.base import DuplicateRecordError, RecordStore, StoreError
from parking_qr.store.json_store import JsonRecordStore
from parking_qr.store.sql_store import SqlRecordStore


def create_store(settings: Settings) -> RecordStore:
    """Build the configured backend. The caller owns open() and close()."""
    backend = settings.STORE_BACKEND.lower()
    if backend == "json":
        return JsonRecordStore(settings.STORE_PATH)
    if backend == "sql":
        return SqlRecordStore(settings.DATABASE_URL, echo=False)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r} (expected 'json' or 'sql')")


__all__ = [
    "DuplicateRecordError",
    "JsonRecordStore",
    "RecordStore",
    "SqlRecordStore",
    "StoreError",
    "create_store",
]
