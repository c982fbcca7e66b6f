"""Tabular parsing of uploaded CSV and Excel files.

Both paths produce a ``ParsedFile``: the header names and one ``ParsedRow``
per data row, keyed by header. Parsing is pure, it only reads the bytes it is
given.
"""

import io
import numbers
from datetime import date, datetime, time
from pathlib import Path

import pandas as pd

from budget_import.core.errors import ParseError
from budget_import.core.models import ParsedFile, ParsedRow
from budget_import.core.utils import get_logger, is_blank

logger = get_logger("budget-import.files")

CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}
CSV_DELIMITERS = (",", ";", "\t", "|")


def parse_file(filename: str, content: bytes) -> ParsedFile:
    """Parse an upload based on its file extension."""
    extension = Path(filename or "").suffix.lower()
    if extension in CSV_EXTENSIONS:
        return parse_csv(content)
    if extension in EXCEL_EXTENSIONS:
        return parse_excel(content)
    msg = "Unsupported file format. Please upload a CSV, XLSX or XLS file."
    raise ParseError(msg)


def detect_delimiter(text: str) -> str:
    """Pick the separator that occurs most often in the header line; ``,`` wins ties."""
    header = next((line for line in text.splitlines() if line.strip()), "")
    counts = {candidate: header.count(candidate) for candidate in CSV_DELIMITERS}
    best = max(CSV_DELIMITERS, key=lambda candidate: counts[candidate])
    return best if counts[best] else ","


def parse_csv(content: bytes | str) -> ParsedFile:
    """Parse UTF-8 CSV content; the first line holds the headers, every cell stays text.

    The separator (``,``, ``;``, tab or ``|``) is detected from the header line.
    """
    try:
        text = content.decode("utf-8-sig") if isinstance(content, bytes) else content
    except UnicodeDecodeError as exc:
        msg = "CSV file could not be read. Please make sure it is UTF-8 encoded."
        raise ParseError(msg) from exc

    bad_lines: list[list[str]] = []

    def collect_bad_line(line: list[str]) -> None:
        bad_lines.append(line)

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=detect_delimiter(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=collect_bad_line,
        )
    except pd.errors.EmptyDataError as exc:
        msg = "No header row found in the CSV file."
        raise ParseError(msg) from exc
    except pd.errors.ParserError as exc:
        msg = f"Error while reading the CSV file: {exc}"
        raise ParseError(msg) from exc

    records = list(frame.itertuples(index=False, name=None))
    columns = _header_columns(records[0]) if records else []
    if not columns:
        msg = "No header row found in the CSV file."
        raise ParseError(msg)

    rows = [{header: _csv_cell(record[pos]) for pos, header in columns} for record in records[1:]]
    if bad_lines:
        logger.warning(f"Skipped {len(bad_lines)} malformed CSV line(s)")
        if not rows:
            msg = "CSV file could not be read. Please upload a valid CSV file."
            raise ParseError(msg)
    return ParsedFile(rows=rows, headers=[header for _, header in columns])


def load_first_sheet(content: bytes) -> pd.DataFrame:
    """Read the first worksheet of an .xlsx/.xls workbook as a raw grid (no header inference)."""
    try:
        with pd.ExcelFile(io.BytesIO(content)) as workbook:
            if not workbook.sheet_names:
                msg = "No sheet found in the Excel file."
                raise ParseError(msg)
            frame = workbook.parse(workbook.sheet_names[0], header=None, dtype=object)
    except ParseError:
        raise
    except Exception as exc:
        logger.exception("Excel workbook could not be read")
        msg = f"Excel file could not be read: {exc}"
        raise ParseError(msg) from exc
    if frame.empty or frame.isna().all().all():
        msg = "The Excel file is empty."
        raise ParseError(msg)
    return frame


def parse_excel(content: bytes) -> ParsedFile:
    """Parse the first sheet; the first non-empty row holds the headers."""
    frame = load_first_sheet(content)
    records = [record for record in frame.itertuples(index=False, name=None) if not all(map(is_blank, record))]
    columns = _header_columns(records[0]) if records else []
    if not columns:
        msg = "No header row found in the Excel file."
        raise ParseError(msg)

    rows: list[ParsedRow] = []
    for record in records[1:]:
        rows.append({header: _excel_cell(record[pos]) if pos < len(record) else None for pos, header in columns})
    return ParsedFile(rows=rows, headers=[header for _, header in columns])


def _header_columns(record: tuple) -> list[tuple[int, str]]:
    # Empty header cells are dropped; the remaining headers keep their own column positions.
    return [(pos, str(cell)) for pos, cell in enumerate(record) if not is_blank(cell)]


def _csv_cell(value: object) -> str | None:
    # Fields missing from a short line come back as NaN rather than "".
    return value if isinstance(value, str) else None


def _excel_cell(value: object) -> str | int | float | None:
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, datetime):
        if value.time() == time(0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
