"""Classification package: keyword category/type detection and IBAN helpers."""

from .classifier import (  # noqa: F401
    DEFAULT_REGISTRY,
    Classifier,
    KeywordRegistry,
    detect_category,
    detect_transaction_type,
)
from .iban import enhance_description_with_iban, extract_iban, format_iban, validate_iban  # noqa: F401
