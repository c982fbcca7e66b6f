"""Tests for header-based column detection."""

from budget_import.core.models import ColumnMapping
from budget_import.services.column_mapping import detect_column_mapping


def test_detects_turkish_headers() -> None:
    mapping = detect_column_mapping(["İşlem Tarihi", "Açıklama", "Tutar", "Bakiye"])
    expected = ColumnMapping(date="İşlem Tarihi", amount="Tutar", description="Açıklama")
    if mapping != expected:
        msg = f"Expected {expected}, got {mapping}"
        raise AssertionError(msg)


def test_detects_upper_case_turkish_headers() -> None:
    mapping = detect_column_mapping(["TARİH", "AÇIKLAMA", "TUTAR"])
    if (mapping.date, mapping.amount, mapping.description) != ("TARİH", "TUTAR", "AÇIKLAMA"):
        msg = f"Upper-case headers were not detected: {mapping}"
        raise AssertionError(msg)


def test_detects_english_headers() -> None:
    mapping = detect_column_mapping(["Date", "Description", "Amount"])
    if (mapping.date, mapping.amount, mapping.description) != ("Date", "Amount", "Description"):
        msg = f"English headers were not detected: {mapping}"
        raise AssertionError(msg)


def test_first_matching_header_wins() -> None:
    mapping = detect_column_mapping(["Tarih", "Tutar", "Bakiye", "Açıklama"])
    if mapping.amount != "Tutar":
        msg = f"Expected the first amount-like header, got {mapping.amount}"
        raise AssertionError(msg)


def test_header_is_assigned_to_one_field_only() -> None:
    """'İşlem Tarihi' matches both date and description patterns; it only becomes the date."""
    mapping = detect_column_mapping(["İşlem Tarihi", "Tutar"])
    if mapping.date != "İşlem Tarihi" or mapping.description is not None:
        msg = f"Header was assigned to more than one field: {mapping}"
        raise AssertionError(msg)


def test_unmatched_fields_stay_empty() -> None:
    mapping = detect_column_mapping(["foo", "bar"])
    if mapping != ColumnMapping():
        msg = f"Expected an empty mapping, got {mapping}"
        raise AssertionError(msg)
    if mapping.is_usable:
        msg = "An empty mapping must not be usable"
        raise AssertionError(msg)


def test_override_replaces_detected_columns() -> None:
    mapping = detect_column_mapping(["Tarih", "Tutar", "Kolon"]).override(description="Kolon")
    if mapping.description != "Kolon" or mapping.date != "Tarih":
        msg = f"Override did not apply: {mapping}"
        raise AssertionError(msg)
