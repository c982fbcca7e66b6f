"""Bank parser registry for managing supported statement formats.

This module maps bank identifiers to parser classes so new banks can be added
by registering a class, without touching the dispatcher.
"""

from typing import ClassVar

from budget_import.banks.base import BankStatementParser, StatementSource
from budget_import.core.db import TransactionStore
from budget_import.core.models import BankParserOptions, ParseResult


class BankParserRegistry:
    """Registry for bank statement parser classes."""

    _registry: ClassVar[dict[str, type[BankStatementParser]]] = {}

    @classmethod
    def register(cls, name: str, parser_cls: type[BankStatementParser]) -> None:
        """Register a parser class with a given bank identifier."""
        cls._registry[name] = parser_cls

    @classmethod
    def get(cls, name: str) -> type[BankStatementParser]:
        """Retrieve a parser class by bank identifier."""
        return cls._registry[name]

    @classmethod
    def available(cls) -> list[str]:
        """List all registered bank identifiers."""
        return list(cls._registry.keys())


def supported_banks() -> list[dict[str, str]]:
    """Return ``{"value", "label"}`` pairs for every registered bank."""
    return [{"value": name, "label": BankParserRegistry.get(name).label} for name in BankParserRegistry.available()]


def parse_bank_file(
    source: StatementSource, bank: str, options: BankParserOptions, store: TransactionStore
) -> ParseResult:
    """Parse a statement with the parser registered for ``bank``."""
    try:
        parser_cls = BankParserRegistry.get(bank)
    except KeyError:
        return ParseResult(errors=[f"Unsupported bank: {bank}"], failed=True)
    return parser_cls(store).parse(source, options)
