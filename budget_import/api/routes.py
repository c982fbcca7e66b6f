"""FastAPI endpoints for the bank statement import API.

This module exposes the import pipeline over HTTP: parsing uploads and
proposing a column mapping, building the review preview, committing single
transactions or bulk batches, and importing bank-specific statements.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from budget_import.api.dependencies import get_current_user_id, get_settings, get_store
from budget_import.banks.registry import supported_banks
from budget_import.core.db import TransactionStore
from budget_import.core.errors import ParseError
from budget_import.core.models import ActionFailure, ColumnMapping, ParsedRow
from budget_import.core.settings import Settings
from budget_import.core.utils import get_logger
from budget_import.services.column_mapping import detect_column_mapping
from budget_import.services.file_service import parse_file
from budget_import.services.importer import (
    bulk_import_transactions_action,
    create_transaction_action,
    upload_bank_statement,
)
from budget_import.services.row_processor import process_rows

router = APIRouter()
logger = get_logger("budget-import.api")


class PreviewRequest(BaseModel):
    """Parsed rows plus the column mapping chosen during review."""

    rows: list[ParsedRow]
    mapping: ColumnMapping


class BulkImportRequest(BaseModel):
    """Transactions submitted from the review table."""

    transactions: list[dict[str, Any]] = Field(default_factory=list)
    wallet_id: str | None = None


def _action_response(outcome: BaseModel) -> JSONResponse:
    status_code = 400 if isinstance(outcome, ActionFailure) else 200
    return JSONResponse(outcome.model_dump(mode="json"), status_code=status_code)


async def _read_upload(file: UploadFile, settings: Settings) -> bytes:
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        logger.warning(f"Rejected upload {file.filename}: {len(content)} bytes")
        raise HTTPException(413, f"File is larger than {settings.max_upload_bytes} bytes")
    return content


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get(
    "/banks",
    summary="List supported banks",
    description="Banks whose statement exports can be imported through `POST /imports/bank-statement`.",
    responses={
        200: {
            "description": "Supported banks.",
            "content": {"application/json": {"example": [{"value": "ziraat", "label": "Ziraat Bankası"}]}},
        }
    },
)
async def list_banks() -> list[dict[str, str]]:
    """Return the registered bank parsers."""
    return supported_banks()


@router.post(
    "/imports/parse",
    summary="Parse an uploaded CSV or Excel file",
    description=(
        "Parse a CSV (UTF-8, header row required) or the first sheet of an XLSX/XLS file.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `file`\n\n"
        "**Response:**\n"
        "- 200 OK: headers, rows keyed by header, and the detected column mapping.\n"
        "- 400 Bad Request: the file could not be parsed.\n"
        "- 413 Payload Too Large: the file exceeds the upload limit."
    ),
    responses={
        200: {
            "description": "Parsed table.",
            "content": {
                "application/json": {
                    "example": {
                        "headers": ["Tarih", "Açıklama", "Tutar"],
                        "rows": [{"Tarih": "15.03.2024", "Açıklama": "MIGROS", "Tutar": "-150,00"}],
                        "mapping": {"date": "Tarih", "amount": "Tutar", "description": "Açıklama"},
                    }
                }
            },
        },
        400: {
            "description": "Unreadable file.",
            "content": {"application/json": {"example": {"detail": "No header row found in the CSV file."}}},
        },
    },
)
async def parse_upload(
    file: UploadFile,
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Parse an uploaded file and propose a column mapping."""
    logger.info(f"Parse request from {user_id}: filename={file.filename}")
    content = await _read_upload(file, settings)
    try:
        parsed = parse_file(file.filename, content)
    except ParseError as exc:
        logger.warning(f"Rejected file {file.filename}: {exc}")
        raise HTTPException(400, str(exc)) from exc
    mapping = detect_column_mapping(parsed.headers)
    return {"headers": parsed.headers, "rows": parsed.rows, "mapping": mapping.model_dump()}


@router.post(
    "/imports/preview",
    summary="Build review rows from parsed rows and a column mapping",
    description=(
        "Extract, normalize and classify every row. Rows are never dropped; each row carries an "
        "`errors` list that is empty when the row can be imported.\n\n"
        "- 422 Unprocessable Entity: the mapping does not name both a date and an amount column."
    ),
)
async def preview(request: PreviewRequest, user_id: str = Depends(get_current_user_id)) -> dict:
    """Return processed candidate rows for review."""
    try:
        rows = process_rows(request.rows, request.mapping)
    except ValueError as exc:
        raise HTTPException(422, str(exc)) from exc
    logger.info(f"Preview for {user_id}: {len(rows)} row(s)")
    return {"rows": [row.model_dump(mode="json") for row in rows]}


@router.post(
    "/transactions",
    summary="Create a single transaction",
    description=(
        "Single-row create, used to retry failed rows after a bulk import.\n\n"
        "- 200 OK: `{ 'ok': true }`\n"
        "- 400 Bad Request: `{ 'ok': false, 'message': ..., 'field_errors': {...} }`"
    ),
)
async def create_transaction(
    transaction: dict[str, Any] = Body(...),
    wallet_id: str | None = None,
    user_id: str = Depends(get_current_user_id),
    store: TransactionStore = Depends(get_store),
) -> JSONResponse:
    """Validate and store one transaction."""
    return _action_response(create_transaction_action(transaction, store, user_id=user_id, wallet_id=wallet_id))


@router.post(
    "/transactions/bulk",
    summary="Bulk import reviewed transactions",
    description=(
        "Revalidate and insert up to 1000 transactions in sequential chunks of 500.\n\n"
        "**Response:**\n"
        "- 200 OK: `success_count`, `failed_count` and `failed_transactions` (index, payload, errors).\n"
        "- 400 Bad Request: `{ 'ok': false, 'message': ... }` when the batch is empty, too large, "
        "or a storage chunk failed."
    ),
    responses={
        200: {
            "description": "Import finished.",
            "content": {
                "application/json": {
                    "example": {"ok": True, "success_count": 2, "failed_count": 0, "failed_transactions": []}
                }
            },
        },
        400: {
            "description": "Import failed.",
            "content": {"application/json": {"example": {"ok": False, "message": "No transactions to import."}}},
        },
    },
)
async def bulk_import(
    request: BulkImportRequest,
    user_id: str = Depends(get_current_user_id),
    store: TransactionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Commit a reviewed batch."""
    logger.info(f"Bulk import request from {user_id}: {len(request.transactions)} row(s)")
    outcome = bulk_import_transactions_action(
        request.transactions, store, user_id=user_id, wallet_id=request.wallet_id, settings=settings
    )
    return _action_response(outcome)


@router.post(
    "/imports/bank-statement",
    summary="Import a bank-specific statement into a wallet",
    description=(
        "Parse an İş Bankası or Ziraat Bankası Excel export, skip dates already imported into the "
        "wallet, classify each transaction and store it.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form fields: `file`, `bank` (see `GET /banks`), `wallet_id`\n\n"
        "**Response:**\n"
        "- 200 OK: `success_count`, `failed_count`, `skipped_count` and row `errors`.\n"
        "- 400 Bad Request: unsupported bank or unreadable statement."
    ),
)
async def import_bank_statement(
    file: UploadFile,
    bank: str = Form(...),
    wallet_id: str = Form(...),
    user_id: str = Depends(get_current_user_id),
    store: TransactionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Import a bank statement."""
    logger.info(f"Bank statement upload from {user_id}: bank={bank}, wallet={wallet_id}, filename={file.filename}")
    content = await _read_upload(file, settings)
    outcome = upload_bank_statement(content, bank, store, user_id=user_id, wallet_id=wallet_id)
    return _action_response(outcome)
