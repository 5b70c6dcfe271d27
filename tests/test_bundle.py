"""Tests for Airplane Manager bundles and receipt filename matching."""

import io
import zipfile

import pytest

from hangarledger.domain.errors import ArchiveError
from hangarledger.domain.parsers import parse_receipt_filename, read_bundle
from hangarledger.domain.parsers.bundle import content_type_for


def _zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def test_receipt_filename_parses_positional_fields():
    key = parse_receipt_filename("2025-01-05 N491JL 322077 KAUS UploadID-1187369.pdf")

    assert key is not None
    assert key.date == "2025-01-05"
    assert key.tail_number == "N491JL"
    assert key.trip_number == "322077"
    assert key.icao == "KAUS"
    assert key.match_key == "2025-01-05|322077|KAUS"
    assert key.fallback_key == "2025-01-05|322077|"


def test_receipt_filename_ignores_directories():
    key = parse_receipt_filename("receipts/2025-01-05 N491JL 322077 KAUS x.pdf")

    assert key is not None
    assert key.trip_number == "322077"


@pytest.mark.parametrize(
    "filename",
    ["invoice.pdf", "2025-01-05.pdf", "2025-01-05 N491JL ABC KAUS.pdf", "N491JL 2025-01-05 1 KAUS"],
)
def test_receipt_filename_not_matching(filename):
    assert parse_receipt_filename(filename) is None


def test_receipt_filename_fields_are_ascii_only():
    # Arabic-Indic digits in the trip number, accented letter in the tail number
    assert parse_receipt_filename("2025-01-05 N491JL \u0663\u0662\u0662 KAUS x.pdf") is None
    assert parse_receipt_filename("2025-01-05 N49\u00c9 322077 KAUS x.pdf") is None


def test_read_bundle_keeps_last_csv():
    data = _zip(
        {
            "old/expenses.csv": "ExpenseID,Amount\nOLD,1\n",
            "new/expenses.csv": "ExpenseID,Amount\nNEW,2\n",
        }
    )

    assert "NEW" in read_bundle(data).csv_text


def test_read_bundle_splits_csv_and_receipts():
    data = _zip(
        {
            "export/expenses.csv": "ExpenseID,Amount\nE1,10\n",
            "export/2025-01-05 N1 1 KAUS a.pdf": b"%PDF",
            "export/photo.JPG": b"\xff\xd8",
            "export/readme.txt": "ignored",
        }
    )

    bundle = read_bundle(data)

    assert bundle.csv_text.startswith("ExpenseID")
    assert [r.filename for r in bundle.receipts] == [
        "export/2025-01-05 N1 1 KAUS a.pdf",
        "export/photo.JPG",
    ]
    assert bundle.receipts[0].content_type == "application/pdf"
    assert bundle.receipts[1].content_type == "image/jpeg"


def test_read_bundle_without_csv_fails():
    with pytest.raises(ArchiveError, match="missing CSV file"):
        read_bundle(_zip({"a.pdf": b"%PDF"}))


def test_read_bundle_rejects_non_zip():
    with pytest.raises(ArchiveError):
        read_bundle(b"not a zip")


def test_content_type_defaults_to_octet_stream():
    assert content_type_for("scan.webp") == "image/webp"
    assert content_type_for("scan.tiff") == "application/octet-stream"
