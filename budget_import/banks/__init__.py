"""Banks package: provides the parser registry, base class, and bank-specific statement parsers."""

from .base import TURKEY_UTC_OFFSET_HOURS, BankStatementParser  # noqa: F401
from .registry import BankParserRegistry, parse_bank_file, supported_banks  # noqa: F401
from .ziraat import ZiraatBankParser  # noqa: F401
from .is_bank import IsBankParser  # noqa: F401
