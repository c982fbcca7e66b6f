"""Base class for bank-specific statement parsers.

Each supported bank exports its account history as an Excel sheet with a fixed
layout: a marker cell announces the transaction table, transactions start a
fixed number of rows below it and continue until the first row without a date.
The shared algorithm lives here; subclasses supply the layout constants and
the bank's date encoding.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import ClassVar

from budget_import.core.db import TransactionStore
from budget_import.core.errors import ParseError
from budget_import.core.models import BankParserOptions, ParsedTransaction, ParseResult
from budget_import.core.utils import cell_text, get_logger, is_blank, parse_amount
from budget_import.services.file_service import load_first_sheet

logger = get_logger("budget-import.banks")

# Statement times are Turkey local time. Turkey has stayed on UTC+3 without DST
# since 2016, so this is a fixed offset and not a timezone database lookup.
TURKEY_UTC_OFFSET_HOURS = 3
TURKEY_UTC_OFFSET = timedelta(hours=TURKEY_UTC_OFFSET_HOURS)

StatementSource = bytes | str | Path


def turkey_local_to_utc(local: datetime) -> datetime:
    """Convert a naive Turkey local time to an aware UTC datetime."""
    return (local - TURKEY_UTC_OFFSET).replace(tzinfo=UTC)


def _cell(record: tuple, column: int) -> object:
    return record[column] if column < len(record) else None


class BankStatementParser(ABC):
    """Abstract base class for all bank statement parsers."""

    bank_id: ClassVar[str]
    label: ClassVar[str]
    marker: ClassVar[str]
    start_offset: ClassVar[int]
    marker_column: ClassVar[int] = 0
    date_column: ClassVar[int] = 0
    amount_column: ClassVar[int]
    balance_column: ClassVar[int]
    description_column: ClassVar[int]

    def __init__(self, store: TransactionStore) -> None:
        """Initialize the parser with the store used for date-range deduplication."""
        self.store = store

    @abstractmethod
    def matches_marker(self, cell: str) -> bool:
        """Return True when the cell is the bank's transaction table marker."""

    @abstractmethod
    def parse_local_datetime(self, cell: object) -> datetime | None:
        """Parse the bank's date cell into a naive Turkey local datetime."""

    def not_found_message(self) -> str:
        """Message returned when the marker row is missing from the sheet."""
        return f'"{self.marker}" header not found. Please upload a valid {self.label} statement.'

    def find_marker_row(self, records: list[tuple]) -> int | None:
        """Index of the first row whose marker column holds the marker."""
        for index, record in enumerate(records):
            if self.matches_marker(cell_text(_cell(record, self.marker_column))):
                return index
        return None

    def parse(self, source: StatementSource, options: BankParserOptions) -> ParseResult:
        """Extract transactions from a statement.

        Malformed rows are skipped with a message in ``errors``; rows whose date
        falls inside the wallet's already imported range are skipped silently
        and counted in ``skipped``. Only structural problems (unreadable file,
        no sheet, missing marker) return an empty result.
        """
        try:
            content = source if isinstance(source, bytes) else Path(source).read_bytes()
            grid = load_first_sheet(content)
        except (ParseError, OSError) as exc:
            logger.error(f"{self.bank_id} statement could not be read: {exc} (wallet={options.wallet_id})")
            return ParseResult(errors=[f"File could not be parsed: {exc}"], failed=True)

        records = list(grid.itertuples(index=False, name=None))
        marker_row = self.find_marker_row(records)
        if marker_row is None:
            return ParseResult(errors=[self.not_found_message()], failed=True)

        newest = self.store.query_newest_date(options.wallet_id, options.user_id)
        oldest = self.store.query_oldest_date(options.wallet_id, options.user_id)

        result = ParseResult()
        order = 0
        previous: datetime | None = None
        for index in range(marker_row + self.start_offset, len(records)):
            record = records[index]
            line = index + 1
            date_cell = _cell(record, self.date_column)
            if is_blank(date_cell):
                break

            local = self.parse_local_datetime(date_cell)
            if local is None:
                result.errors.append(f"Row {line}: invalid date format: {cell_text(date_cell)}")
                continue
            instant = turkey_local_to_utc(local)

            if newest is not None and oldest is not None and oldest <= instant <= newest:
                result.skipped += 1
                continue

            if previous is not None and instant == previous:
                order += 1
            else:
                order = 0
                previous = instant

            amount = parse_amount(_cell(record, self.amount_column))
            if amount is None or amount == 0:
                result.errors.append(f"Row {line}: invalid amount: {cell_text(_cell(record, self.amount_column))}")
                continue
            balance = parse_amount(_cell(record, self.balance_column))
            if balance is None:
                result.errors.append(f"Row {line}: invalid balance: {cell_text(_cell(record, self.balance_column))}")
                continue

            result.transactions.append(
                ParsedTransaction(
                    date=instant,
                    amount=abs(amount),
                    description=cell_text(_cell(record, self.description_column)),
                    balance=balance,
                    order=order,
                )
            )

        for message in result.errors:
            logger.warning(f"{self.bank_id}: {message}")
        logger.info(
            f"{self.bank_id}: parsed {len(result.transactions)} transaction(s), "
            f"{result.skipped} skipped as already imported, {len(result.errors)} rejected"
        )
        return result
