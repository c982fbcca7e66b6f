"""Keyword-based category and transaction type detection.

The keyword tables live in an immutable ``KeywordRegistry`` that is injected
into a ``Classifier``. The module-level ``detect_category`` and
``detect_transaction_type`` functions use the default registry built from
``keywords.py``.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

from budget_import.classification import keywords
from budget_import.core.categories import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    TransactionType,
    categories_for,
)
from budget_import.core.utils import normalize_text, parse_amount

KeywordTable = tuple[tuple[str, tuple[str, ...]], ...]


class KeywordRegistry(BaseModel):
    """Ordered keyword tables for expense and income categories."""

    model_config = ConfigDict(frozen=True)

    expense: KeywordTable
    income: KeywordTable
    fallback_income: str
    fallback_expense: str

    @model_validator(mode="after")
    def _check_categories(self) -> "KeywordRegistry":
        for category, _ in self.expense:
            if category not in EXPENSE_CATEGORIES:
                msg = f"Not an expense category: {category}"
                raise ValueError(msg)
        for category, _ in self.income:
            if category not in INCOME_CATEGORIES:
                msg = f"Not an income category: {category}"
                raise ValueError(msg)
        if self.fallback_income not in INCOME_CATEGORIES or self.fallback_expense not in EXPENSE_CATEGORIES:
            msg = "Fallback categories must belong to their transaction type"
            raise ValueError(msg)
        return self


DEFAULT_REGISTRY = KeywordRegistry(
    expense=keywords.EXPENSE_KEYWORDS,
    income=keywords.INCOME_KEYWORDS,
    fallback_income=keywords.FALLBACK_INCOME_CATEGORY,
    fallback_expense=keywords.FALLBACK_EXPENSE_CATEGORY,
)


class Classifier:
    """Derives category and income/expense type from a free-text description."""

    def __init__(self, registry: KeywordRegistry = DEFAULT_REGISTRY) -> None:
        """Initialize the classifier with a keyword registry."""
        self.registry = registry

    def detect_category(self, description: str | None) -> str | None:
        """Return the first category with a keyword contained in the description.

        Expense categories are checked before income categories.
        """
        if not description or not isinstance(description, str):
            return None
        normalized = normalize_text(description)
        for table in (self.registry.expense, self.registry.income):
            for category, words in table:
                if any(word.lower() in normalized for word in words):
                    return category
        return None

    def detect_transaction_type(
        self, amount: Decimal | float | int | str | None, description: str | None
    ) -> TransactionType:
        """Negative amounts are expenses; otherwise income only when an income keyword matches."""
        number = parse_amount(amount)
        if number is not None and number < 0:
            return "expense"
        if self.detect_category(description) in INCOME_CATEGORIES:
            return "income"
        return "expense"

    def category_for(self, transaction_type: TransactionType, description: str | None) -> str:
        """Detected category when it fits the transaction type, else the type's fallback."""
        detected = self.detect_category(description)
        if detected in categories_for(transaction_type):
            return detected
        if transaction_type == "income":
            return self.registry.fallback_income
        return self.registry.fallback_expense


default_classifier = Classifier()


def detect_category(description: str | None) -> str | None:
    """Detect a category with the default keyword registry."""
    return default_classifier.detect_category(description)


def detect_transaction_type(amount: Decimal | float | int | str | None, description: str | None) -> TransactionType:
    """Detect income/expense with the default keyword registry."""
    return default_classifier.detect_transaction_type(amount, description)
