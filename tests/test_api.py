"""API integration tests for the bank statement import service."""

from conftest import FakeStore, ziraat_statement
from fastapi.testclient import TestClient

from budget_import.api.dependencies import get_store
from main import app

client = TestClient(app)
store = FakeStore()
app.dependency_overrides[get_store] = lambda: store

HEADERS = {"X-User-Id": "user-1"}
HTTP_200_OK = 200
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_422_UNPROCESSABLE_ENTITY = 422

CSV_CONTENT = 'Tarih,Açıklama,Tutar\n15.03.2024,MIGROS MARKET,"-150,00"\n'


def test_health() -> None:
    """Test the /health endpoint returns status ok."""
    response = client.get("/health")
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    if response.json() != {"status": "ok"}:
        msg = f"Expected response {{'status': 'ok'}}, got {response.json()}"
        raise AssertionError(msg)


def test_scalar_docs() -> None:
    """Test the /scalar endpoint returns OpenAPI or Swagger docs."""
    response = client.get("/scalar")
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    if not ("openapi" in response.text or "swagger" in response.text):
        msg = "Expected 'openapi' or 'swagger' in response text"
        raise AssertionError(msg)


def test_banks() -> None:
    response = client.get("/banks")
    values = [bank["value"] for bank in response.json()]
    if response.status_code != HTTP_200_OK or values != ["ziraat", "is-bank"]:
        msg = f"Unexpected banks response: {response.status_code} {response.text}"
        raise AssertionError(msg)


def test_missing_user_header_is_unauthorized() -> None:
    files = {"file": ("ekstre.csv", CSV_CONTENT, "text/csv")}
    response = client.post("/imports/parse", files=files)
    if response.status_code != HTTP_401_UNAUTHORIZED:
        msg = f"Expected status {HTTP_401_UNAUTHORIZED}, got {response.status_code}"
        raise AssertionError(msg)


def test_parse_then_preview() -> None:
    files = {"file": ("ekstre.csv", CSV_CONTENT.encode(), "text/csv")}
    response = client.post("/imports/parse", files=files, headers=HEADERS)
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}: {response.text}"
        raise AssertionError(msg)
    parsed = response.json()
    if parsed["mapping"] != {"date": "Tarih", "amount": "Tutar", "description": "Açıklama"}:
        msg = f"Unexpected mapping: {parsed['mapping']}"
        raise AssertionError(msg)

    preview = client.post(
        "/imports/preview", json={"rows": parsed["rows"], "mapping": parsed["mapping"]}, headers=HEADERS
    )
    row = preview.json()["rows"][0]
    if (row["date"], row["amount"], row["category"], row["errors"]) != ("2024-03-15", "150.00", "Beslenme", []):
        msg = f"Unexpected preview row: {row}"
        raise AssertionError(msg)


def test_parse_rejects_unsupported_file() -> None:
    files = {"file": ("ekstre.pdf", b"%PDF-1.7", "application/pdf")}
    response = client.post("/imports/parse", files=files, headers=HEADERS)
    if response.status_code != HTTP_400_BAD_REQUEST:
        msg = f"Expected status {HTTP_400_BAD_REQUEST}, got {response.status_code}"
        raise AssertionError(msg)


def test_preview_with_unusable_mapping() -> None:
    response = client.post("/imports/preview", json={"rows": [], "mapping": {"date": "Tarih"}}, headers=HEADERS)
    if response.status_code != HTTP_422_UNPROCESSABLE_ENTITY:
        msg = f"Expected status {HTTP_422_UNPROCESSABLE_ENTITY}, got {response.status_code}"
        raise AssertionError(msg)


def test_bulk_import() -> None:
    transaction = {"amount": "150.00", "type": "expense", "category": "Beslenme", "date": "2024-03-15"}
    response = client.post(
        "/transactions/bulk", json={"transactions": [transaction, {**transaction, "amount": "0"}]}, headers=HEADERS
    )
    body = response.json()
    if response.status_code != HTTP_200_OK or (body["success_count"], body["failed_count"]) != (1, 1):
        msg = f"Unexpected bulk response: {response.status_code} {body}"
        raise AssertionError(msg)


def test_bulk_import_empty_batch_fails() -> None:
    response = client.post("/transactions/bulk", json={"transactions": []}, headers=HEADERS)
    if response.status_code != HTTP_400_BAD_REQUEST or response.json()["ok"] is not False:
        msg = f"Unexpected response: {response.status_code} {response.text}"
        raise AssertionError(msg)


def test_create_transaction_validation_error() -> None:
    response = client.post("/transactions", json={"amount": "-5", "type": "expense"}, headers=HEADERS)
    body = response.json()
    if response.status_code != HTTP_400_BAD_REQUEST or "amount" not in body["field_errors"]:
        msg = f"Unexpected response: {response.status_code} {body}"
        raise AssertionError(msg)


def test_bank_statement_upload() -> None:
    content = ziraat_statement([["15.03.2024", "1", "MIGROS", "-150,00", "850,00"]])
    files = {"file": ("ekstre.xlsx", content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")}
    response = client.post(
        "/imports/bank-statement",
        files=files,
        data={"bank": "ziraat", "wallet_id": "wallet-1"},
        headers=HEADERS,
    )
    body = response.json()
    if response.status_code != HTTP_200_OK or body["success_count"] != 1:
        msg = f"Unexpected response: {response.status_code} {body}"
        raise AssertionError(msg)


def test_bank_statement_unsupported_bank() -> None:
    files = {"file": ("ekstre.xlsx", b"", "application/octet-stream")}
    response = client.post(
        "/imports/bank-statement", files=files, data={"bank": "garanti", "wallet_id": "wallet-1"}, headers=HEADERS
    )
    if response.status_code != HTTP_400_BAD_REQUEST or "garanti" not in response.json()["message"]:
        msg = f"Unexpected response: {response.status_code} {response.text}"
        raise AssertionError(msg)
