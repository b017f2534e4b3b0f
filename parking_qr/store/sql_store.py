"""
SQL record store backed by SQLModel / SQLAlchemy
"""

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from parking_qr.models import CodeRecord, Owner, Plan, as_utc
from parking_qr.store.base import DuplicateRecordError, RecordStore, StoreError

logger = structlog.get_logger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a sync engine; sqlite URLs get thread-safe connection settings"""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # One shared connection, otherwise each session sees its own empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, **kwargs)


def _owner_out(owner: Optional[Owner]) -> Optional[Owner]:
    if owner is not None:
        owner.created_at = as_utc(owner.created_at)
        owner.upgraded_at = as_utc(owner.upgraded_at)
    return owner


def _record_out(record: Optional[CodeRecord]) -> Optional[CodeRecord]:
    if record is not None:
        record.created_at = as_utc(record.created_at)
    return record


class SqlRecordStore(RecordStore):
    """Owners and code records in two tables"""

    backend_name = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self.engine: Optional[Engine] = None

    def open(self) -> None:
        self.engine = build_engine(self.database_url, echo=self.echo)
        SQLModel.metadata.create_all(self.engine, tables=[Owner.__table__, CodeRecord.__table__])
        logger.info(f"SQL store connected ({self.engine.url.get_backend_name()})")

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info("SQL store disconnected")

    def _session(self) -> Session:
        if self.engine is None:
            raise StoreError("SQL store is not open")
        return Session(self.engine, expire_on_commit=False)

    # Owners

    def find_owner_by_email(self, email: str) -> Optional[Owner]:
        with self._session() as session:
            owner = session.exec(select(Owner).where(Owner.email == email.lower())).first()
            session.expunge_all()
        return _owner_out(owner)

    def create_owner(self, owner: Owner) -> Owner:
        owner.email = owner.email.lower()
        with self._session() as session:
            session.add(owner)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateRecordError(f"Owner already exists: {owner.email}") from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to create owner: {e}")
                raise StoreError("Could not create owner") from e
            session.refresh(owner)
            session.expunge(owner)
        return _owner_out(owner)

    def update_owner_plan(self, email: str, plan: Plan, upgraded_at: datetime) -> Optional[Owner]:
        with self._session() as session:
            owner = session.exec(select(Owner).where(Owner.email == email.lower())).first()
            if owner is None:
                return None
            owner.plan = plan
            owner.upgraded_at = upgraded_at
            session.add(owner)
            try:
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to update owner plan: {e}")
                raise StoreError("Could not update owner") from e
            session.refresh(owner)
            session.expunge(owner)
        return _owner_out(owner)

    # Code records

    def create_code_record(self, record: CodeRecord) -> CodeRecord:
        with self._session() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateRecordError(f"Code record already exists: {record.id}") from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Failed to create code record: {e}")
                raise StoreError("Could not create code record") from e
            session.refresh(record)
            session.expunge(record)
        return _record_out(record)

    def find_code_record(self, record_id: str) -> Optional[CodeRecord]:
        with self._session() as session:
            record = session.get(CodeRecord, record_id)
            session.expunge_all()
        return _record_out(record)

    def list_code_records(self, owner_id: str) -> list[CodeRecord]:
        with self._session() as session:
            statement = (
                select(CodeRecord)
                .where(CodeRecord.owner_id == owner_id)
                .order_by(CodeRecord.created_at)
            )
            records = list(session.exec(statement).all())
            session.expunge_all()
        return [_record_out(r) for r in records]

    def count_code_records(self, owner_id: str) -> int:
        with self._session() as session:
            statement = select(func.count()).select_from(CodeRecord).where(CodeRecord.owner_id == owner_id)
            return session.exec(statement).one()
