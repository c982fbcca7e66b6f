"""Pydantic models for the bank statement importer.

This module defines the models that flow through the import pipeline: parsed
tables and column mappings from uploaded files, processed candidate rows shown
for review, the canonical transaction schema enforced on commit, bank-statement
transactions, and the result shapes returned by the import actions.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .categories import ALL_CATEGORIES, TransactionType, categories_for

ParsedRow = dict[str, str | int | float | None]

ISO_DAY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ParsedFile(BaseModel):
    """Uniform table produced from a CSV or Excel upload."""

    rows: list[ParsedRow]
    headers: list[str]


class ColumnMapping(BaseModel):
    """Which columns of a parsed row supply the date, amount and description."""

    date: str | None = None
    amount: str | None = None
    description: str | None = None

    @property
    def is_usable(self) -> bool:
        """A mapping can drive row processing once date and amount are both chosen."""
        return bool(self.date) and bool(self.amount)

    def override(self, **columns: str | None) -> "ColumnMapping":
        """Return a copy with the given fields replaced by user-chosen columns."""
        unknown = set(columns) - set(type(self).model_fields)
        if unknown:
            msg = f"Unknown mapping fields: {sorted(unknown)}"
            raise ValueError(msg)
        return self.model_copy(update=columns)


class ProcessedRow(BaseModel):
    """Candidate transaction derived from one parsed row, editable during review."""

    date: dt.date | None = None
    amount: Decimal | None = None
    description: str = ""
    type: TransactionType = "expense"
    category: str = ""
    errors: list[str] = Field(default_factory=list)

    @property
    def is_importable(self) -> bool:
        """Only rows without errors are submitted on commit."""
        return not self.errors

    def to_payload(self) -> dict[str, Any]:
        """Build the transaction payload submitted to the bulk importer."""
        return {
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
            "date": self.date.isoformat() if self.date else None,
            "description": self.description or None,
        }


class TransactionRecord(BaseModel):
    """Row handed to the persistence layer."""

    user_id: str
    wallet_id: str | None = None
    amount: Decimal
    type: TransactionType
    category: str
    date: dt.datetime
    description: str | None = None
    sort_order: int = 0


class TransactionCreate(BaseModel):
    """Canonical transaction schema, enforced server-side on every commit."""

    amount: Decimal
    type: TransactionType
    category: str = Field(min_length=1, max_length=40)
    date: str = Field(pattern=ISO_DAY_PATTERN)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("amount", mode="before")
    @classmethod
    def _normalize_decimal_comma(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().replace(",", ".", 1)
        return value

    @field_validator("amount")
    @classmethod
    def _check_positive(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value <= 0:
            msg = "Amount must be greater than 0."
            raise ValueError(msg)
        return value

    @field_validator("category", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("date")
    @classmethod
    def _check_calendar_day(cls, value: str) -> str:
        try:
            dt.date.fromisoformat(value)
        except ValueError:
            msg = "Enter a valid date."
            raise ValueError(msg) from None
        return value

    @model_validator(mode="after")
    def _check_category(self) -> "TransactionCreate":
        if self.category not in ALL_CATEGORIES:
            msg = f"Unknown category: {self.category}"
            raise ValueError(msg)
        if self.category not in categories_for(self.type):
            msg = f"Category '{self.category}' cannot be used for {self.type} transactions."
            raise ValueError(msg)
        return self

    def to_record(self, user_id: str, wallet_id: str | None = None, sort_order: int = 0) -> TransactionRecord:
        """Convert to a storage record; calendar days are stored as UTC midnight."""
        day = dt.date.fromisoformat(self.date)
        return TransactionRecord(
            user_id=user_id,
            wallet_id=wallet_id,
            amount=self.amount,
            type=self.type,
            category=self.category,
            date=dt.datetime(day.year, day.month, day.day, tzinfo=dt.UTC),
            description=self.description or None,
            sort_order=sort_order,
        )


def validation_messages(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into human-readable messages."""
    messages = []
    for error in exc.errors():
        text = error["msg"].removeprefix("Value error, ")
        field = ".".join(str(part) for part in error["loc"])
        messages.append(f"{field}: {text}" if field else text)
    return messages


class BankParserOptions(BaseModel):
    """Wallet and owner a bank statement is being imported into."""

    wallet_id: str
    user_id: str


class ParsedTransaction(BaseModel):
    """Transaction extracted from a bank-specific statement."""

    date: dt.datetime
    amount: Decimal = Field(ge=0)
    description: str
    balance: Decimal
    order: int = Field(default=0, ge=0)


class ParseResult(BaseModel):
    """Outcome of a bank statement parse; ``skipped`` counts deduplicated rows.

    ``failed`` marks a statement that could not be read at all, as opposed to
    a statement whose rows carry errors.
    """

    transactions: list[ParsedTransaction] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    skipped: int = 0
    failed: bool = False


class BatchInsertOutcome(BaseModel):
    """Result of one storage batch insert."""

    ok: bool
    error_message: str | None = None


class FailedTransaction(BaseModel):
    """A submitted row that did not pass server-side validation."""

    index: int
    transaction: dict[str, Any]
    errors: list[str]


class BulkImportResult(BaseModel):
    """Outcome of a successful bulk import call."""

    ok: Literal[True] = True
    success_count: int
    failed_count: int
    failed_transactions: list[FailedTransaction] = Field(default_factory=list)


class BankStatementUploadResult(BaseModel):
    """Outcome of importing a bank-specific statement."""

    ok: Literal[True] = True
    success_count: int
    failed_count: int
    skipped_count: int
    errors: list[str] = Field(default_factory=list)


class ActionSuccess(BaseModel):
    """Success shape of the single-row create and retry actions."""

    ok: Literal[True] = True
    message: str | None = None


class ActionFailure(BaseModel):
    """Failure shape shared by every import action."""

    ok: Literal[False] = False
    message: str
    field_errors: dict[str, list[str]] | None = None
