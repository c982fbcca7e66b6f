"""Tests for the upload -> mapping -> preview -> importing -> results session."""

import pytest

from budget_import.core.errors import InvalidTransitionError, ParseError
from budget_import.core.models import ActionFailure, ActionSuccess, BulkImportResult, FailedTransaction
from budget_import.services.import_session import ImportSession, ImportStep

CSV_CONTENT = (
    "Tarih,Açıklama,Tutar\n15.03.2024,MIGROS,-150\n,eksik tarih,-20\n16.03.2024,KYK BURS,1500\n"
).encode()


def _preview_session() -> ImportSession:
    session = ImportSession()
    session.upload("ekstre.csv", CSV_CONTENT)
    session.build_preview()
    return session


def test_upload_moves_to_mapping_with_detected_columns() -> None:
    session = ImportSession()
    session.upload("ekstre.csv", CSV_CONTENT)
    if session.step is not ImportStep.MAPPING:
        msg = f"Expected mapping step, got {session.step}"
        raise AssertionError(msg)
    if (session.mapping.date, session.mapping.amount) != ("Tarih", "Tutar"):
        msg = f"Unexpected mapping: {session.mapping}"
        raise AssertionError(msg)


def test_failed_upload_stays_on_upload() -> None:
    session = ImportSession()
    with pytest.raises(ParseError):
        session.upload("ekstre.pdf", b"%PDF")
    if session.step is not ImportStep.UPLOAD or not session.last_error:
        msg = f"Expected to stay on upload with an error, got {session.step}"
        raise AssertionError(msg)


def test_preview_requires_date_and_amount() -> None:
    session = ImportSession()
    session.upload("ekstre.csv", CSV_CONTENT)
    session.set_mapping(amount=None)
    with pytest.raises(InvalidTransitionError):
        session.build_preview()
    if session.step is not ImportStep.MAPPING:
        msg = "A rejected preview must not leave the mapping step"
        raise AssertionError(msg)


def test_preview_keeps_invalid_rows() -> None:
    session = _preview_session()
    if len(session.rows) != 3 or len(session.importable_rows) != 2:
        msg = f"Expected 3 rows with 2 importable, got {session.rows}"
        raise AssertionError(msg)


def test_commit_sends_only_error_free_rows() -> None:
    session = _preview_session()
    submitted: list[list[dict]] = []

    def importer(payloads: list[dict]) -> BulkImportResult:
        submitted.append(payloads)
        return BulkImportResult(success_count=len(payloads), failed_count=0)

    session.commit(importer)
    if len(submitted[0]) != 2 or session.step is not ImportStep.RESULTS or session.succeeded_count != 2:
        msg = f"Unexpected commit: {submitted}, step={session.step}"
        raise AssertionError(msg)


def test_edit_and_delete_rows_in_preview() -> None:
    session = _preview_session()
    session.edit_row(1, date="17.03.2024")
    if session.rows[1].errors:
        msg = f"Edited row should be valid, got {session.rows[1].errors}"
        raise AssertionError(msg)
    session.delete_row(0)
    if len(session.rows) != 2 or session.rows[0].description != "eksik tarih":
        msg = f"Unexpected rows after delete: {session.rows}"
        raise AssertionError(msg)


def test_commit_without_valid_rows_is_rejected() -> None:
    session = _preview_session()
    for index in (2, 0):
        session.delete_row(index)
    with pytest.raises(InvalidTransitionError):
        session.commit(lambda payloads: BulkImportResult(success_count=0, failed_count=0))
    if session.step is not ImportStep.PREVIEW:
        msg = "A rejected commit must stay in preview"
        raise AssertionError(msg)


def test_second_commit_while_importing_is_rejected() -> None:
    session = _preview_session()
    nested: list[Exception] = []

    def importer(payloads: list[dict]) -> BulkImportResult:
        try:
            session.commit(importer)
        except InvalidTransitionError as exc:
            nested.append(exc)
        return BulkImportResult(success_count=len(payloads), failed_count=0)

    session.commit(importer)
    if len(nested) != 1:
        msg = "A commit issued while importing must be rejected"
        raise AssertionError(msg)


def test_failed_commit_still_reaches_results() -> None:
    session = _preview_session()
    outcome = session.commit(lambda payloads: ActionFailure(message="Transactions could not be imported."))
    if session.step is not ImportStep.RESULTS or session.last_error != outcome.message:
        msg = f"Expected results with the failure message, got {session.step}/{session.last_error}"
        raise AssertionError(msg)


def test_retry_moves_row_from_failed_to_succeeded() -> None:
    session = _preview_session()
    failed = FailedTransaction(index=1, transaction={"amount": "1500"}, errors=["category: bad"])
    session.commit(lambda payloads: BulkImportResult(success_count=1, failed_count=1, failed_transactions=[failed]))

    outcome = session.retry_failed(1, lambda transaction: ActionFailure(message="still bad"))
    if outcome.ok or len(session.failed) != 1:
        msg = "A failed retry must keep the row in the failed set"
        raise AssertionError(msg)
    session.retry_failed(1, lambda transaction: ActionSuccess())
    if session.failed or session.succeeded_count != 2:
        msg = f"Expected the row to move to succeeded, got failed={session.failed}"
        raise AssertionError(msg)


def test_close_is_idempotent() -> None:
    session = ImportSession()
    if session.close() is not True or session.close() is not False:
        msg = "Only the first close should return True"
        raise AssertionError(msg)
