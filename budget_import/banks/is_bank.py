"""İş Bankası statement format.

Layout: the table starts one row below a ``Tarih/Saat`` marker in column A.
Columns: date/time (0), amount (3), balance (4), description (8). Dates look
like ``15/03/2024-14:30:00``.
"""

import re
from datetime import datetime

from budget_import.banks.base import BankStatementParser
from budget_import.banks.registry import BankParserRegistry
from budget_import.core.utils import cell_text

DATE_TIME_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})-(\d{2}):(\d{2}):(\d{2})$")


class IsBankParser(BankStatementParser):
    """Parser for İş Bankası account history exports."""

    bank_id = "is-bank"
    label = "İş Bankası"
    marker = "Tarih/Saat"
    start_offset = 1
    date_column = 0
    amount_column = 3
    balance_column = 4
    description_column = 8

    def matches_marker(self, cell: str) -> bool:
        """The header cell must read exactly ``Tarih/Saat``."""
        return cell == self.marker

    def parse_local_datetime(self, cell: object) -> datetime | None:
        """Read ``DD/MM/YYYY-HH:MM:SS`` cells, or datetime cells, to the second."""
        if isinstance(cell, datetime):
            return datetime(cell.year, cell.month, cell.day, cell.hour, cell.minute, cell.second)
        match = DATE_TIME_PATTERN.match(cell_text(cell))
        if not match:
            return None
        day, month, year, hour, minute, second = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError:
            return None


BankParserRegistry.register(IsBankParser.bank_id, IsBankParser)
