"""Shared pytest fixtures for hangarledger tests."""

import csv
import io
import os
import tempfile
from pathlib import Path
import pytest

from hangarledger.database.factories import create_sqlite_database
from hangarledger.domain.backup import BackupService
from hangarledger.domain.import_executor import ImportExecutor
from hangarledger.domain.parsers.airplane_manager import COLUMNS as AIRPLANE_MANAGER_COLUMNS
from hangarledger.domain.parsers.template_csv import COLUMNS as TEMPLATE_COLUMNS
from hangarledger.storage.local import LocalBlobStore


def write_csv(columns, rows) -> str:
    """Render rows (dicts) as CSV text; missing columns are left empty."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(columns), lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({column: row.get(column, "") for column in columns})
    return output.getvalue()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def blob_store(tmp_path):
    """Create a blob store rooted in a temporary directory."""
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def executor(temp_db, blob_store):
    """Create an ImportExecutor over the temporary database and blob store."""
    return ImportExecutor(temp_db, blob_store)


@pytest.fixture
def backup_service(temp_db, blob_store):
    """Create a BackupService over the temporary database and blob store."""
    return BackupService(temp_db, blob_store, app_version="0.1.0")


@pytest.fixture
def airplane_manager_csv():
    """Build Airplane Manager export text from partial rows."""

    def build(*rows):
        return write_csv(AIRPLANE_MANAGER_COLUMNS, rows)

    return build


@pytest.fixture
def template_csv():
    """Build CSV template text from partial rows."""

    def build(*rows):
        return write_csv(TEMPLATE_COLUMNS, rows)

    return build


@pytest.fixture
def sample_expense_rows():
    """Two line items of one Airplane Manager expense on trip T1."""
    return (
        {
            "ExpenseID": "E1",
            "ExpenseItemID": "I1",
            "DateOccurred": "2024-06-01",
            "TripNumber": "T1",
            "TailNumber": "N1",
            "VendorName": "Signature Flight Support",
            "Category": "Fuel",
            "PaymentMethod": "Corporate Card",
            "ICAO": "KAUS",
            "Gallons": "100",
            "Amount": "500",
        },
        {
            "ExpenseID": "E1",
            "ExpenseItemID": "I2",
            "DateOccurred": "2024-06-01",
            "TripNumber": "T1",
            "TailNumber": "N1",
            "VendorName": "Signature Flight Support",
            "Category": "Landing Fees",
            "PaymentMethod": "Corporate Card",
            "ICAO": "KAUS",
            "Amount": "50",
        },
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
