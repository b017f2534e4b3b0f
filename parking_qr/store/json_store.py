"""
Flat-file JSON record store
"""

import json
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog

from parking_qr.models import CodeRecord, Owner, Plan, as_utc
from parking_qr.store.base import DuplicateRecordError, RecordStore, StoreError

logger = structlog.get_logger(__name__)

EMPTY_DOCUMENT = {"users": [], "qrCodes": []}


def _load_owner(row: dict) -> Owner:
    owner = Owner.model_validate(row)
    owner.created_at = as_utc(owner.created_at)
    owner.upgraded_at = as_utc(owner.upgraded_at)
    return owner


def _load_record(row: dict) -> CodeRecord:
    record = CodeRecord.model_validate(row)
    record.created_at = as_utc(record.created_at)
    return record


class JsonRecordStore(RecordStore):
    """Keeps everything in one JSON document on disk.

    Reads and writes go through a single lock so that check-then-write
    sequences inside one process cannot interleave. Writes replace the
    file atomically.
    """

    backend_name = "json"

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._opened = False

    def open(self) -> None:
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._write(EMPTY_DOCUMENT)
                logger.info(f"JSON store initialized at {self.path}")
            self._opened = True

    def close(self) -> None:
        self._opened = False

    def _read(self) -> dict:
        if not self._opened:
            raise StoreError("JSON store is not open")
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading JSON store: {e}")
            raise StoreError(f"Could not read {self.path}") from e
        data.setdefault("users", [])
        data.setdefault("qrCodes", [])
        return data

    def _write(self, data: dict) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error writing JSON store: {e}")
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StoreError(f"Could not write {self.path}") from e

    # Owners

    def find_owner_by_email(self, email: str) -> Optional[Owner]:
        email = email.lower()
        with self._lock:
            for row in self._read()["users"]:
                if row["email"] == email:
                    return _load_owner(row)
        return None

    def create_owner(self, owner: Owner) -> Owner:
        owner.email = owner.email.lower()
        with self._lock:
            data = self._read()
            if any(row["email"] == owner.email for row in data["users"]):
                raise DuplicateRecordError(f"Owner already exists: {owner.email}")
            data["users"].append(owner.model_dump(mode="json"))
            self._write(data)
        return owner

    def update_owner_plan(self, email: str, plan: Plan, upgraded_at: datetime) -> Optional[Owner]:
        email = email.lower()
        with self._lock:
            data = self._read()
            for row in data["users"]:
                if row["email"] == email:
                    row["plan"] = plan.value
                    row["upgraded_at"] = upgraded_at.isoformat()
                    self._write(data)
                    return _load_owner(row)
        return None

    # Code records

    def create_code_record(self, record: CodeRecord) -> CodeRecord:
        with self._lock:
            data = self._read()
            if any(row["id"] == record.id for row in data["qrCodes"]):
                raise DuplicateRecordError(f"Code record already exists: {record.id}")
            data["qrCodes"].append(record.model_dump(mode="json"))
            self._write(data)
        return record

    def find_code_record(self, record_id: str) -> Optional[CodeRecord]:
        with self._lock:
            for row in self._read()["qrCodes"]:
                if row["id"] == record_id:
                    return _load_record(row)
        return None

    def list_code_records(self, owner_id: str) -> list[CodeRecord]:
        with self._lock:
            rows = [row for row in self._read()["qrCodes"] if row["owner_id"] == owner_id]
        return [_load_record(row) for row in rows]
