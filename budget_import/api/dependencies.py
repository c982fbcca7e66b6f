"""FastAPI dependencies for DI (settings, transaction store, caller identity).

Tests swap the store through ``app.dependency_overrides[get_store]``.
"""

from fastapi import Header, HTTPException

from budget_import.core.db import SqlTransactionStore, TransactionStore
from budget_import.core.settings import get_settings

__all__ = ["get_current_user_id", "get_settings", "get_store"]


def get_store() -> TransactionStore:
    """Provide the SQLAlchemy-backed transaction store."""
    return SqlTransactionStore()


def get_current_user_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """Identify the caller; authentication itself happens upstream of this service."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(401, "Missing X-User-Id header")
    return x_user_id.strip()
