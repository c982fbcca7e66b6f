"""Shared utility functions for the bank statement importer."""

import logging
import math
import numbers
import re
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import colorlog
import pandas as pd

AMOUNT_NOISE = re.compile(r"[^\d,.\-]")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def is_blank(value: object) -> bool:
    """Return True for cells that carry no data (None, NaN/NaT, whitespace-only strings)."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def cell_text(value: object) -> str:
    """Render a spreadsheet cell as stripped text, blank cells as an empty string."""
    if is_blank(value):
        return ""
    return str(value).strip()


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def normalize_text(text: str) -> str:
    """Lowercase and trim text for keyword matching."""
    # "İ".lower() yields "i" plus a combining dot, which would never match a keyword.
    return text.replace("İ", "i").lower().strip()


def normalize_decimal_text(text: str) -> str:
    """Strip everything but digits, separators and minus, then make ``.`` the decimal point.

    ``1.234,56`` and ``1,234.56`` both become ``1234.56``; a lone comma is a
    decimal comma; a trailing minus (``150,00-``) moves to the front.
    """
    cleaned = AMOUNT_NOISE.sub("", text)
    if cleaned.endswith("-") and not cleaned.startswith("-"):
        cleaned = "-" + cleaned[:-1]
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif cleaned.count(",") == 1:
        cleaned = cleaned.replace(",", ".")
    elif cleaned.count(",") > 1:
        cleaned = cleaned.replace(",", "")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    return cleaned


def parse_amount(value: object) -> Decimal | None:
    """Parse a signed amount; returns None unless the result is a finite number."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, numbers.Real):
        number = Decimal(str(value))
    else:
        try:
            number = Decimal(normalize_decimal_text(str(value)))
        except InvalidOperation:
            return None
    return number if number.is_finite() else None
