"""
Record store interface

Every backend persists the same two entities, Owner and CodeRecord, and
owns its own connection handle. The application opens the store once at
startup and closes it on shutdown.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from parking_qr.models import CodeRecord, Owner, Plan


class StoreError(Exception):
    """The backend could not complete an operation"""


class DuplicateRecordError(StoreError):
    """A uniqueness constraint (owner email, record id) was violated"""


class RecordStore(ABC):
    """Persistence contract shared by the JSON and SQL backends"""

    backend_name: str = "abstract"

    def open(self) -> None:
        """Acquire the underlying connection or file"""

    def close(self) -> None:
        """Release the underlying connection or file"""

    # Owners

    @abstractmethod
    def find_owner_by_email(self, email: str) -> Optional[Owner]:
        ...

    @abstractmethod
    def create_owner(self, owner: Owner) -> Owner:
        """Persist a new owner. Raises DuplicateRecordError when the email is taken."""

    @abstractmethod
    def update_owner_plan(self, email: str, plan: Plan, upgraded_at: datetime) -> Optional[Owner]:
        """Returns the updated owner, or None when no owner has that email"""

    # Code records

    @abstractmethod
    def create_code_record(self, record: CodeRecord) -> CodeRecord:
        ...

    @abstractmethod
    def find_code_record(self, record_id: str) -> Optional[CodeRecord]:
        ...

    @abstractmethod
    def list_code_records(self, owner_id: str) -> list[CodeRecord]:
        """Records of one owner, oldest first"""

    def count_code_records(self, owner_id: str) -> int:
        return len(self.list_code_records(owner_id))
