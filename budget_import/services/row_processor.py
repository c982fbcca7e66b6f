"""Turn parsed rows into reviewable candidate transactions.

Rows are never dropped here: a row with a missing or unreadable field is still
returned, carrying human-readable messages in ``errors`` so the review step can
show them inline and let the user fix the value.
"""

import numbers
import re
import warnings
from datetime import date, datetime

import pandas as pd
from pydantic import ValidationError

from budget_import.classification.classifier import Classifier, default_classifier
from budget_import.classification.iban import enhance_description_with_iban
from budget_import.core.models import ColumnMapping, ParsedRow, ProcessedRow, TransactionCreate, validation_messages
from budget_import.core.utils import cell_text, is_blank, parse_amount

ISO_DAY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
DAY_FIRST = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{4})")

# Excel serial day numbers count from this date (the 1900 leap-year bug included).
EXCEL_EPOCH = "1899-12-30"

MISSING_DATE = "Date is missing."
MISSING_AMOUNT = "Amount is missing."
ZERO_AMOUNT = "Amount must be greater than 0."

EDITABLE_FIELDS = frozenset({"date", "amount", "description", "type", "category"})


def _calendar_day(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_calendar_date(value: object) -> date | None:
    """Parse a cell into a calendar day.

    Accepts ``YYYY-MM-DD`` (as a prefix), day-first ``DD/MM/YYYY`` with ``.``,
    ``/`` or ``-`` separators, Excel serial day numbers, date objects, and
    finally anything pandas can read with ``dayfirst=True``.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        try:
            return pd.to_datetime(float(value), unit="D", origin=EXCEL_EPOCH).date()
        except (ValueError, OverflowError):
            return None

    text = str(value).strip()
    match = ISO_DAY.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _calendar_day(year, month, day)
    match = DAY_FIRST.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _calendar_day(year, month, day)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        try:
            parsed = pd.to_datetime(text, dayfirst=True)
        except (ValueError, OverflowError, TypeError):
            return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def process_row(row: ParsedRow, mapping: ColumnMapping, classifier: Classifier | None = None) -> ProcessedRow:
    """Extract, normalize and classify one parsed row."""
    classifier = classifier or default_classifier
    errors: list[str] = []

    raw_date = row.get(mapping.date) if mapping.date else None
    raw_amount = row.get(mapping.amount) if mapping.amount else None
    raw_description = row.get(mapping.description) if mapping.description else None

    day = None
    if is_blank(raw_date):
        errors.append(MISSING_DATE)
    else:
        day = parse_calendar_date(raw_date)
        if day is None:
            errors.append(f"Invalid date: {raw_date}")

    signed = None
    if is_blank(raw_amount):
        errors.append(MISSING_AMOUNT)
    else:
        signed = parse_amount(raw_amount)
        if signed is None:
            errors.append(f"Invalid amount: {raw_amount}")
        elif signed == 0:
            errors.append(ZERO_AMOUNT)

    description = enhance_description_with_iban(cell_text(raw_description))
    transaction_type = classifier.detect_transaction_type(signed, description)
    processed = ProcessedRow(
        date=day,
        amount=abs(signed) if signed is not None else None,
        description=description,
        type=transaction_type,
        category=classifier.category_for(transaction_type, description),
        errors=errors,
    )
    # Cleanly parsed rows can still break schema limits such as the description length.
    return processed if errors else revalidate_row(processed)


def process_rows(
    rows: list[ParsedRow], mapping: ColumnMapping, classifier: Classifier | None = None
) -> list[ProcessedRow]:
    """Process every row of a parsed file; the mapping must name date and amount columns."""
    if not mapping.is_usable:
        msg = "Select the date and amount columns before processing rows."
        raise ValueError(msg)
    return [process_row(row, mapping, classifier) for row in rows]


def revalidate_row(row: ProcessedRow) -> ProcessedRow:
    """Recompute ``errors`` for a row against the canonical transaction schema."""
    errors = []
    if row.date is None:
        errors.append(MISSING_DATE)
    if row.amount is None:
        errors.append(MISSING_AMOUNT)
    if not errors:
        try:
            TransactionCreate.model_validate(row.to_payload())
        except ValidationError as exc:
            errors = validation_messages(exc)
    return row.model_copy(update={"errors": errors})


def apply_edits(row: ProcessedRow, **changes: object) -> ProcessedRow:
    """Apply inline edits from the review table and revalidate the row.

    ``date`` and ``amount`` accept raw text, parsed the same way as imported
    cells; amounts are stored as magnitudes.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        msg = f"Fields cannot be edited: {sorted(unknown)}"
        raise ValueError(msg)

    update: dict[str, object] = {}
    input_errors: dict[str, str] = {}
    if "date" in changes:
        update["date"] = parse_calendar_date(changes["date"])
        if update["date"] is None and not is_blank(changes["date"]):
            input_errors[MISSING_DATE] = f"Invalid date: {changes['date']}"
    if "amount" in changes:
        amount = parse_amount(changes["amount"])
        update["amount"] = abs(amount) if amount is not None else None
        if amount is None and not is_blank(changes["amount"]):
            input_errors[MISSING_AMOUNT] = f"Invalid amount: {changes['amount']}"
    if "description" in changes:
        update["description"] = cell_text(changes["description"])
    for field in ("type", "category"):
        if field in changes:
            update[field] = changes[field]

    revalidated = revalidate_row(row.model_copy(update=update))
    if input_errors:
        errors = [input_errors.get(message, message) for message in revalidated.errors]
        revalidated = revalidated.model_copy(update={"errors": errors})
    return revalidated
