"""Server-side model of one generic import, from upload to results.

An ``ImportSession`` walks through ``upload -> mapping -> preview -> importing
-> results``. Each method checks that it is called in the right step and
raises ``InvalidTransitionError`` otherwise, so a review UI can drive the
session without keeping its own copy of the rules.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from budget_import.classification.classifier import Classifier
from budget_import.core.errors import ImportPipelineError, InvalidTransitionError, ParseError
from budget_import.core.models import (
    ActionFailure,
    ActionSuccess,
    BulkImportResult,
    ColumnMapping,
    FailedTransaction,
    ParsedFile,
    ProcessedRow,
)
from budget_import.core.utils import get_logger
from budget_import.services.column_mapping import detect_column_mapping
from budget_import.services.file_service import parse_file
from budget_import.services.row_processor import apply_edits, process_rows

logger = get_logger("budget-import.session")

BulkImporter = Callable[[list[dict[str, Any]]], BulkImportResult | ActionFailure]
SingleCreate = Callable[[dict[str, Any]], ActionSuccess | ActionFailure]


class ImportStep(str, Enum):
    """Steps of an import session, in the order they are visited."""

    UPLOAD = "upload"
    MAPPING = "mapping"
    PREVIEW = "preview"
    IMPORTING = "importing"
    RESULTS = "results"


class ImportSession:
    """State of a single user-driven import."""

    def __init__(self, classifier: Classifier | None = None) -> None:
        self.classifier = classifier
        self.step = ImportStep.UPLOAD
        self.parsed: ParsedFile | None = None
        self.mapping = ColumnMapping()
        self.rows: list[ProcessedRow] = []
        self.last_error: str | None = None
        self.result: BulkImportResult | None = None
        self.failed: list[FailedTransaction] = []
        self.succeeded_count = 0
        self.closed = False

    def _require(self, *steps: ImportStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(step.value for step in steps)
            msg = f"Not allowed in step '{self.step.value}' (expected {allowed})."
            raise InvalidTransitionError(msg)

    def upload(self, filename: str, content: bytes) -> ParsedFile:
        """Parse the uploaded file and propose a column mapping."""
        self._require(ImportStep.UPLOAD)
        try:
            parsed = parse_file(filename, content)
        except ParseError as exc:
            self.last_error = str(exc)
            logger.warning(f"Upload of {filename} rejected: {exc}")
            raise
        self.parsed = parsed
        self.mapping = detect_column_mapping(parsed.headers)
        self.last_error = None
        self.step = ImportStep.MAPPING
        return parsed

    def set_mapping(self, **columns: str | None) -> ColumnMapping:
        """Override detected columns with the user's choice."""
        self._require(ImportStep.MAPPING)
        self.mapping = self.mapping.override(**columns)
        return self.mapping

    def build_preview(self) -> list[ProcessedRow]:
        """Materialize candidate rows; date and amount columns must be mapped."""
        self._require(ImportStep.MAPPING)
        if not self.mapping.is_usable:
            msg = "Select the date and amount columns to continue."
            raise InvalidTransitionError(msg)
        self.rows = process_rows(self.parsed.rows, self.mapping, self.classifier)
        self.step = ImportStep.PREVIEW
        return self.rows

    def edit_row(self, index: int, **changes: object) -> ProcessedRow:
        """Apply an inline edit to a preview row and revalidate it."""
        self._require(ImportStep.PREVIEW)
        self.rows[index] = apply_edits(self.rows[index], **changes)
        return self.rows[index]

    def delete_row(self, index: int) -> None:
        """Drop a preview row so it is never submitted."""
        self._require(ImportStep.PREVIEW)
        del self.rows[index]

    @property
    def importable_rows(self) -> list[ProcessedRow]:
        """Preview rows that currently carry no errors."""
        return [row for row in self.rows if row.is_importable]

    def commit(self, importer: BulkImporter) -> BulkImportResult | ActionFailure:
        """Submit every error-free row through ``importer``.

        Rows that still carry errors are never sent. The session always ends
        in ``results``, holding either the import result or the failure message.
        """
        if self.step is ImportStep.IMPORTING:
            msg = "An import is already in progress."
            raise InvalidTransitionError(msg)
        self._require(ImportStep.PREVIEW)
        payloads = [row.to_payload() for row in self.importable_rows]
        if not payloads:
            msg = "There are no valid rows to import."
            raise InvalidTransitionError(msg)

        self.step = ImportStep.IMPORTING
        try:
            outcome = importer(payloads)
        except ImportPipelineError as exc:
            outcome = ActionFailure(message=str(exc))
        finally:
            self.step = ImportStep.RESULTS

        if isinstance(outcome, BulkImportResult):
            self.result = outcome
            self.failed = list(outcome.failed_transactions)
            self.succeeded_count = outcome.success_count
            self.last_error = None
        else:
            self.last_error = outcome.message
            logger.warning(f"Import failed: {outcome.message}")
        return outcome

    def retry_failed(self, index: int, create: SingleCreate) -> ActionSuccess | ActionFailure:
        """Resubmit one failed row through the single-row create path."""
        self._require(ImportStep.RESULTS)
        failed = next((entry for entry in self.failed if entry.index == index), None)
        if failed is None:
            msg = f"No failed row with index {index}."
            raise KeyError(msg)
        outcome = create(failed.transaction)
        if outcome.ok:
            self.failed.remove(failed)
            self.succeeded_count += 1
        return outcome

    def close(self) -> bool:
        """Close the session; only the first call returns True."""
        if self.closed:
            return False
        self.closed = True
        return True
