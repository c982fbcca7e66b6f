"""Ziraat Bankası statement format.

Layout: the table starts two rows below a cell containing ``Hesap Hareketleri``
in column A. Columns: date (0), description (2), amount (3), balance (4).
Dates are ``dd.MM.yyyy`` without a time; they are pinned to local noon so the
UTC shift never moves them to another day.
"""

import re
from datetime import datetime

from budget_import.banks.base import BankStatementParser
from budget_import.banks.registry import BankParserRegistry
from budget_import.core.utils import cell_text

DATE_PATTERN = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
LOCAL_NOON = 12


class ZiraatBankParser(BankStatementParser):
    """Parser for Ziraat Bankası account history exports."""

    bank_id = "ziraat"
    label = "Ziraat Bankası"
    marker = "Hesap Hareketleri"
    start_offset = 2
    date_column = 0
    description_column = 2
    amount_column = 3
    balance_column = 4

    def matches_marker(self, cell: str) -> bool:
        """The marker may appear inside a longer title cell."""
        return self.marker in cell

    def parse_local_datetime(self, cell: object) -> datetime | None:
        """Ziraat rows carry no time, so every day is pinned to local noon."""
        if isinstance(cell, datetime):
            return datetime(cell.year, cell.month, cell.day, LOCAL_NOON)
        match = DATE_PATTERN.match(cell_text(cell))
        if not match:
            return None
        day, month, year = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day, LOCAL_NOON)
        except ValueError:
            return None


BankParserRegistry.register(ZiraatBankParser.bank_id, ZiraatBankParser)
