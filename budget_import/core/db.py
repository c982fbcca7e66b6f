"""DB models and the SQLAlchemy-backed transaction store."""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from budget_import.core.models import BatchInsertOutcome, TransactionRecord
from budget_import.core.utils import as_utc, get_logger

logger = get_logger("budget-import.db")

Base = declarative_base()


class TransactionRow(Base):
    """A stored transaction owned by a user and optionally a wallet."""

    __tablename__ = "transactions"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    wallet_id = Column(String, nullable=True, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(String(16), nullable=False)
    category = Column(String(40), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)


class TransactionStore(Protocol):
    """Persistence operations consumed by the import pipeline."""

    def insert_transactions_batch(self, records: Sequence[TransactionRecord]) -> BatchInsertOutcome:
        """Insert one chunk of transactions atomically."""

    def create_transaction(self, record: TransactionRecord) -> BatchInsertOutcome:
        """Insert a single transaction."""

    def query_newest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        """Return the most recent stored transaction date for a wallet."""

    def query_oldest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        """Return the earliest stored transaction date for a wallet."""


def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    from budget_import.core.settings import get_settings

    return create_engine(url or get_settings().database_url)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db(engine: Engine) -> None:
    """Create the transactions table if it does not exist."""
    Base.metadata.create_all(engine)


class SqlTransactionStore:
    """TransactionStore implementation on top of a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        """Initialize the store with a session factory."""
        self.session_factory = session_factory

    def insert_transactions_batch(self, records: Sequence[TransactionRecord]) -> BatchInsertOutcome:
        """Insert all records in one session; the whole chunk is rolled back on failure."""
        return self._insert(list(records))

    def create_transaction(self, record: TransactionRecord) -> BatchInsertOutcome:
        """Insert a single record."""
        return self._insert([record])

    def query_newest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        """Return the newest stored date for the wallet, as an aware UTC datetime."""
        return self._query_date(func.max(TransactionRow.date), wallet_id, user_id)

    def query_oldest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        """Return the oldest stored date for the wallet, as an aware UTC datetime."""
        return self._query_date(func.min(TransactionRow.date), wallet_id, user_id)

    def _insert(self, records: list[TransactionRecord]) -> BatchInsertOutcome:
        session: Session = self.session_factory()
        try:
            session.add_all([TransactionRow(**record.model_dump()) for record in records])
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(f"Insert of {len(records)} transaction(s) failed")
            return BatchInsertOutcome(ok=False, error_message=str(exc))
        finally:
            session.close()
        return BatchInsertOutcome(ok=True)

    def _query_date(self, aggregate: object, wallet_id: str, user_id: str) -> datetime | None:
        session: Session = self.session_factory()
        try:
            stmt = select(aggregate).where(TransactionRow.wallet_id == wallet_id, TransactionRow.user_id == user_id)
            value = session.execute(stmt).scalar()
        finally:
            session.close()
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        return as_utc(value)
