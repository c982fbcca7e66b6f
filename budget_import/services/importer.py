"""Commit validated transactions to storage.

Two paths lead into the store. The generic path (``bulk_import``) revalidates
every submitted row and inserts the valid ones in sequential chunks. The
bank-statement path (``upload_bank_statement``) parses a bank export,
classifies each transaction and creates them one at a time.
"""

import time
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from budget_import.banks.base import StatementSource
from budget_import.banks.registry import parse_bank_file
from budget_import.classification.classifier import Classifier, default_classifier
from budget_import.classification.iban import enhance_description_with_iban
from budget_import.core.db import TransactionStore
from budget_import.core.errors import BulkImportError
from budget_import.core.models import (
    ActionFailure,
    ActionSuccess,
    BankParserOptions,
    BankStatementUploadResult,
    BulkImportResult,
    FailedTransaction,
    TransactionCreate,
    TransactionRecord,
    validation_messages,
)
from budget_import.core.settings import Settings, get_settings
from budget_import.core.utils import get_logger

logger = get_logger("budget-import.importer")

GENERIC_FAILURE = "Transactions could not be imported. Please try again."


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(field, []).append(error["msg"].removeprefix("Value error, "))
    return errors


def _chunks(records: list[TransactionRecord], size: int) -> list[list[TransactionRecord]]:
    return [records[start : start + size] for start in range(0, len(records), size)]


def bulk_import(
    rows: Sequence[dict[str, Any]],
    store: TransactionStore,
    *,
    user_id: str,
    wallet_id: str | None = None,
    settings: Settings | None = None,
) -> BulkImportResult:
    """Revalidate and insert a batch of transaction payloads.

    Rows failing validation are reported by their index in ``rows`` and never
    inserted. Valid rows are written in sequential chunks; the first chunk that
    fails aborts the call with ``BulkImportError``. Chunks already committed at
    that point stay in storage.
    """
    settings = settings or get_settings()
    if not rows:
        msg = "No transactions to import."
        raise BulkImportError(msg)
    if len(rows) > settings.bulk_import_max_rows:
        msg = f"At most {settings.bulk_import_max_rows} transactions can be imported at once."
        raise BulkImportError(msg)

    records: list[TransactionRecord] = []
    failed: list[FailedTransaction] = []
    for index, payload in enumerate(rows):
        try:
            transaction = TransactionCreate.model_validate(payload)
        except ValidationError as exc:
            failed.append(FailedTransaction(index=index, transaction=dict(payload), errors=validation_messages(exc)))
            continue
        records.append(transaction.to_record(user_id, wallet_id))

    deadline = time.monotonic() + settings.bulk_import_timeout_seconds
    committed = 0
    chunks = _chunks(records, settings.bulk_import_chunk_size)
    for number, chunk in enumerate(chunks, start=1):
        if time.monotonic() > deadline:
            logger.error(f"Bulk import timed out before chunk {number}/{len(chunks)}; {committed} row(s) committed")
            msg = "Import took too long and was stopped."
            raise BulkImportError(msg, committed_count=committed)
        outcome = store.insert_transactions_batch(chunk)
        if not outcome.ok:
            logger.error(
                f"Chunk {number}/{len(chunks)} failed: {outcome.error_message}; "
                f"{committed} row(s) from earlier chunks remain committed"
            )
            raise BulkImportError(GENERIC_FAILURE, committed_count=committed)
        committed += len(chunk)

    logger.info(f"Bulk import for user {user_id}: {committed} inserted, {len(failed)} rejected")
    return BulkImportResult(success_count=committed, failed_count=len(failed), failed_transactions=failed)


def bulk_import_transactions_action(
    rows: Sequence[dict[str, Any]],
    store: TransactionStore,
    *,
    user_id: str,
    wallet_id: str | None = None,
    settings: Settings | None = None,
) -> BulkImportResult | ActionFailure:
    """Entry point for the review UI: expected failures come back as ``ActionFailure``."""
    try:
        return bulk_import(rows, store, user_id=user_id, wallet_id=wallet_id, settings=settings)
    except BulkImportError as exc:
        return ActionFailure(message=exc.message)


def create_transaction_action(
    transaction: dict[str, Any] | TransactionCreate,
    store: TransactionStore,
    *,
    user_id: str,
    wallet_id: str | None = None,
    sort_order: int = 0,
) -> ActionSuccess | ActionFailure:
    """Validate and insert a single transaction."""
    if isinstance(transaction, TransactionCreate):
        validated = transaction
    else:
        try:
            validated = TransactionCreate.model_validate(transaction)
        except ValidationError as exc:
            return ActionFailure(message="Please check the form.", field_errors=_field_errors(exc))

    outcome = store.create_transaction(validated.to_record(user_id, wallet_id, sort_order))
    if not outcome.ok:
        logger.error(f"Transaction could not be created: {outcome.error_message}")
        return ActionFailure(message="Transaction could not be saved.")
    return ActionSuccess(message="Transaction added.")


def upload_bank_statement(
    source: StatementSource,
    bank: str,
    store: TransactionStore,
    *,
    user_id: str,
    wallet_id: str,
    classifier: Classifier | None = None,
) -> BankStatementUploadResult | ActionFailure:
    """Import a bank-specific statement into a wallet.

    Already imported dates are skipped by the parser. Each remaining
    transaction is classified from its description and created individually,
    keeping the parser's same-instant order as ``sort_order``.
    """
    classifier = classifier or default_classifier
    result = parse_bank_file(source, bank, BankParserOptions(wallet_id=wallet_id, user_id=user_id), store)
    if result.failed:
        return ActionFailure(message=result.errors[0])

    errors = list(result.errors)
    success_count = 0
    failed_count = 0
    for parsed in result.transactions:
        description = enhance_description_with_iban(parsed.description)
        transaction_type = classifier.detect_transaction_type(None, description)
        try:
            transaction = TransactionCreate(
                amount=parsed.amount,
                type=transaction_type,
                category=classifier.category_for(transaction_type, description),
                date=parsed.date.date().isoformat(),
                description=description or None,
            )
        except ValidationError as exc:
            failed_count += 1
            errors.append(f"{parsed.date.isoformat()}: {'; '.join(validation_messages(exc))}")
            continue
        record = transaction.to_record(user_id, wallet_id, parsed.order).model_copy(update={"date": parsed.date})
        outcome = store.create_transaction(record)
        if outcome.ok:
            success_count += 1
        else:
            failed_count += 1
            errors.append(f"{parsed.date.isoformat()}: {outcome.error_message}")

    logger.info(
        f"{bank} statement for wallet {wallet_id}: {success_count} created, "
        f"{failed_count} failed, {result.skipped} skipped"
    )
    return BankStatementUploadResult(
        success_count=success_count,
        failed_count=failed_count,
        skipped_count=result.skipped,
        errors=errors,
    )
