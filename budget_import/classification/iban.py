"""Turkish IBAN detection and formatting for transaction descriptions.

A Turkish IBAN is ``TR`` followed by 24 digits (2 check digits, 4 bank code
digits and 18 account digits), 26 characters in total. Statements print them
either contiguously or in groups of four, so the pattern accepts a single
optional whitespace before every digit.
"""

import re

IBAN_PATTERN = re.compile(r"TR\d{2}(?:\s?\d){22}", re.IGNORECASE)
IBAN_ANNOTATION = "IBAN'ına gönderildi"

_WHITESPACE = re.compile(r"\s")


def format_iban(iban: str) -> str:
    """Group an IBAN into blocks of four characters, e.g. ``TR33 0006 1005 ...``."""
    cleaned = _WHITESPACE.sub("", iban).upper()
    if not cleaned.startswith("TR"):
        return iban
    return " ".join(cleaned[i : i + 4] for i in range(0, len(cleaned), 4))


def extract_iban(text: str | None) -> str | None:
    """Return the first IBAN in the text, upper-cased and without spaces."""
    if not text or not isinstance(text, str):
        return None
    match = IBAN_PATTERN.search(text)
    if not match:
        return None
    return _WHITESPACE.sub("", match.group(0)).upper()


def validate_iban(iban: str | None) -> bool:
    """Check that the value is a 26 character Turkish IBAN (spaces ignored)."""
    if not iban or not isinstance(iban, str):
        return False
    return re.fullmatch(r"TR\d{24}", _WHITESPACE.sub("", iban).upper()) is not None


def enhance_description_with_iban(description: str | None) -> str:
    """Replace a raw IBAN in the description with its formatted form and a "sent to IBAN" note.

    Descriptions that already mention "IBAN" or already contain the formatted
    IBAN are returned unchanged (trimmed).
    """
    if not description or not isinstance(description, str):
        return ""
    iban = extract_iban(description)
    if not iban:
        return description.strip()
    formatted = format_iban(iban)
    if "IBAN" in description or formatted in description:
        return description.strip()
    return IBAN_PATTERN.sub(lambda m: f"{format_iban(m.group(0))} {IBAN_ANNOTATION}", description).strip()
