"""Closed set of transaction categories, split by transaction type."""

from typing import Literal

TransactionType = Literal["income", "expense"]

INCOME_CATEGORIES: tuple[str, ...] = ("KYK/Burs", "Aile Harçlığı", "Freelance/Ek İş")

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Sosyal/Keyif",
    "Beslenme",
    "Ulaşım",
    "Sabitler",
    "Okul",
)

ALL_CATEGORIES: tuple[str, ...] = INCOME_CATEGORIES + EXPENSE_CATEGORIES


def categories_for(transaction_type: TransactionType) -> tuple[str, ...]:
    """Return the categories that may be used with the given transaction type."""
    return INCOME_CATEGORIES if transaction_type == "income" else EXPENSE_CATEGORIES
