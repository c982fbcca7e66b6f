"""Header-name heuristics that guess which columns hold date, amount and description.

The guess is best-effort; the review step lets a person override any field.
Patterns use ``[ıi]`` style classes so upper-case Turkish headers, which lower
to a dotted ``i``, match as well.
"""

import re

from budget_import.core.models import ColumnMapping
from budget_import.core.utils import normalize_text

DATE_COLUMN_PATTERNS = (
    r"tarih",
    r"date",
    r"tarih.*saat",
    r"datetime",
    r"[iı][şs]lem.*tarih",
    r"[iı][şs]lem.*tarihi",
)

AMOUNT_COLUMN_PATTERNS = (
    r"tutar",
    r"amount",
    r"miktar",
    r"fiyat",
    r"price",
    r"bakiye",
    r"balance",
    r"bor[çc]",
    r"alacak",
    r"debit",
    r"credit",
)

DESCRIPTION_COLUMN_PATTERNS = (
    r"a[çc][ıi]klama",
    r"description",
    r"desc",
    r"detay",
    r"detail",
    r"[iı][şs]lem",
    r"transaction",
    r"not",
    r"note",
    r"memo",
)

FIELD_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (field, tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns))
    for field, patterns in (
        ("date", DATE_COLUMN_PATTERNS),
        ("amount", AMOUNT_COLUMN_PATTERNS),
        ("description", DESCRIPTION_COLUMN_PATTERNS),
    )
)


def detect_column_mapping(headers: list[str]) -> ColumnMapping:
    """Assign each field the first header matching one of its patterns.

    Headers are scanned once, left to right. A header is given to at most one
    field; fields nobody matched stay ``None``.
    """
    found: dict[str, str] = {}
    for header in headers:
        normalized = normalize_text(str(header))
        for field, patterns in FIELD_PATTERNS:
            if field in found:
                continue
            if any(pattern.search(normalized) for pattern in patterns):
                found[field] = header
                break
    return ColumnMapping(**found)
