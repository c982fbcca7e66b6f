"""Shared fixtures: in-memory stores and spreadsheet builders."""

import io
from collections.abc import Sequence
from datetime import datetime

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from budget_import.core.db import SqlTransactionStore, init_db
from budget_import.core.models import BatchInsertOutcome, TransactionRecord


class FakeStore:
    """In-memory TransactionStore that records every call and can be told to fail."""

    def __init__(
        self,
        newest: datetime | None = None,
        oldest: datetime | None = None,
        fail_on_batch: int | None = None,
        fail_create: bool = False,
    ) -> None:
        self.newest = newest
        self.oldest = oldest
        self.fail_on_batch = fail_on_batch
        self.fail_create = fail_create
        self.batch_calls = 0
        self.batches: list[list[TransactionRecord]] = []
        self.created: list[TransactionRecord] = []

    def insert_transactions_batch(self, records: Sequence[TransactionRecord]) -> BatchInsertOutcome:
        self.batch_calls += 1
        if self.fail_on_batch == self.batch_calls:
            return BatchInsertOutcome(ok=False, error_message="connection reset")
        self.batches.append(list(records))
        return BatchInsertOutcome(ok=True)

    def create_transaction(self, record: TransactionRecord) -> BatchInsertOutcome:
        if self.fail_create:
            return BatchInsertOutcome(ok=False, error_message="duplicate key")
        self.created.append(record)
        return BatchInsertOutcome(ok=True)

    def query_newest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        return self.newest

    def query_oldest_date(self, wallet_id: str, user_id: str) -> datetime | None:
        return self.oldest

    @property
    def inserted(self) -> list[TransactionRecord]:
        return [record for batch in self.batches for record in batch]


def make_workbook(rows: list[list[object]]) -> bytes:
    """Write rows (no header inference) to the first sheet of an .xlsx workbook."""
    width = max(len(row) for row in rows)
    frame = pd.DataFrame([list(row) + [None] * (width - len(row)) for row in rows])
    buffer = io.BytesIO()
    frame.to_excel(buffer, header=False, index=False, engine="openpyxl")
    return buffer.getvalue()


def is_bank_statement(data_rows: list[list[object]]) -> bytes:
    """İş Bankası layout: title, ``Tarih/Saat`` header, then rows with 9 columns."""
    header = ["Tarih/Saat", "İşlem", "Kanal", "Tutar", "Bakiye", "Ref", "Şube", "Tip", "Açıklama"]
    return make_workbook([["İŞ BANKASI HESAP HAREKETLERİ"], header, *data_rows])


def ziraat_statement(data_rows: list[list[object]]) -> bytes:
    """Ziraat Bankası layout: title, ``Hesap Hareketleri`` marker, header, then rows."""
    header = ["Tarih", "Fiş No", "Açıklama", "Tutar", "Bakiye"]
    return make_workbook([["T.C. ZİRAAT BANKASI A.Ş."], ["Hesap Hareketleri"], header, *data_rows])


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def sql_store() -> SqlTransactionStore:
    """SQLAlchemy store on a private in-memory SQLite database."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    return SqlTransactionStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
