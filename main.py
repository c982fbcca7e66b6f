"""Main entrypoint and application factory for the bank statement import API.

This module initializes the FastAPI application, configures logging, creates the
transactions table, and exposes the Scalar API reference endpoint for
interactive OpenAPI documentation. It also includes the main entrypoint for
running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from budget_import import __version__
from budget_import.api.routes import router
from budget_import.core.db import get_engine, init_db
from budget_import.core.settings import get_settings
from budget_import.core.utils import ensure_dir, get_logger

LOGGER_NAMES = (
    "budget-import",
    "budget-import.api",
    "budget-import.banks",
    "budget-import.db",
    "budget-import.files",
    "budget-import.importer",
    "budget-import.session",
)


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure colored console logging plus a plain-text log file for every project logger."""
    log_file = Path(get_settings().log_file)
    ensure_dir(log_file.parent)
    file_formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    for name in LOGGER_NAMES:
        logger = get_logger(name)
        logger.setLevel(logging.INFO)
        # File handler for persistent logs (not colorized)
        if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler that creates the transactions table."""
    _ = app  # Silence unused argument warning
    try:
        init_db(get_engine())
    except SQLAlchemyError:
        get_logger("budget-import").exception("Failed to create the transactions table")
        raise
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Bank Statement Import API",
    description="""
    Imports bank statements into a personal budget: parses CSV and Excel uploads, maps columns,
    classifies transactions by keyword, and commits reviewed rows in bounded batches.

    **Endpoints:**
    - `GET /health`: Health check endpoint.
    - `GET /banks`: Supported bank statement formats.
    - `POST /imports/parse`: Parse a CSV/XLSX/XLS file and detect its column mapping.
    - `POST /imports/preview`: Turn parsed rows into classified, validated review rows.
    - `POST /transactions`: Create a single transaction (retry path).
    - `POST /transactions/bulk`: Commit up to 1000 reviewed transactions.
    - `POST /imports/bank-statement`: Import an İş Bankası or Ziraat Bankası statement.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version=__version__,
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> JSONResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
