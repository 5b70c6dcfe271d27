"""Tests for the Airplane Manager export parser."""

from decimal import Decimal

from hangarledger.domain.import_models import ImportSource, Severity
from hangarledger.domain.parsers import (
    parse_airplane_manager_csv,
    transform_airplane_manager_data,
)
from hangarledger.domain.preview import ExistingEntities


def _transform(text):
    result = parse_airplane_manager_csv(text)
    assert not result.has_blocking_errors
    return transform_airplane_manager_data(result.rows, ExistingEntities())


def test_two_line_items_group_into_one_expense(airplane_manager_csv, sample_expense_rows):
    """Rows sharing an ExpenseID become one expense inside one trip."""
    preview = _transform(airplane_manager_csv(*sample_expense_rows))

    assert preview.source == ImportSource.AIRPLANE_MANAGER
    assert len(preview.trips) == 1
    trip = preview.trips[0]
    assert trip.trip_number == "T1"
    assert trip.name == "Trip T1"
    assert trip.tail_number == "N1"
    assert len(trip.expenses) == 1

    expense = trip.expenses[0]
    assert expense.source_expense_id == "E1"
    assert len(expense.line_items) == 2
    fuel, landing = expense.line_items
    assert fuel.category == "Fuel"
    assert fuel.amount == Decimal("500")
    assert fuel.gallons == Decimal("100")
    assert fuel.icao == "KAUS"
    assert landing.category == "Landing Fees"
    assert landing.gallons is None
    assert expense.total_amount == Decimal("550")
    assert preview.total_expenses == 1
    assert preview.total_line_items == 2


def test_missing_date_and_amount_are_blocking(airplane_manager_csv):
    text = airplane_manager_csv(
        {"ExpenseID": "E1", "TripNumber": "T1", "Amount": "10"},
        {"ExpenseID": "E2", "TripNumber": "T1", "DateOccurred": "2024-01-01"},
    )

    result = parse_airplane_manager_csv(text)

    assert result.has_blocking_errors
    assert [(e.row, e.message) for e in result.errors] == [
        (2, "Missing date"),
        (3, "Missing amount"),
    ]
    assert all(e.severity == Severity.ERROR for e in result.errors)


def test_numeric_category_warns_and_becomes_unknown(airplane_manager_csv):
    text = airplane_manager_csv(
        {
            "ExpenseID": "E1",
            "DateOccurred": "2024-01-01",
            "TripNumber": "T1",
            "TailNumber": "N1",
            "Category": " 42 ",
            "Amount": "10",
        }
    )

    result = parse_airplane_manager_csv(text)
    preview = transform_airplane_manager_data(result.rows, ExistingEntities())

    assert not result.has_blocking_errors
    assert len(result.warnings) == 1
    assert "appears to be an ID" in result.warnings[0].message
    assert preview.trips[0].expenses[0].line_items[0].category == "Unknown"


def test_empty_category_becomes_other_and_vendor_defaults(airplane_manager_csv):
    preview = _transform(
        airplane_manager_csv(
            {"ExpenseID": "E1", "DateOccurred": "2024-01-01", "TripNumber": "T1", "Amount": "5"}
        )
    )

    expense = preview.trips[0].expenses[0]
    assert expense.vendor_name == "Unknown Vendor"
    assert expense.line_items[0].category == "Other"


def test_garbage_amount_is_zero(airplane_manager_csv):
    """Non-numeric amounts are not blocking and coerce to zero."""
    text = airplane_manager_csv(
        {"ExpenseID": "E1", "DateOccurred": "2024-01-01", "TripNumber": "T1", "Amount": "n/a"}
    )

    result = parse_airplane_manager_csv(text)
    preview = transform_airplane_manager_data(result.rows, ExistingEntities())

    assert not result.has_blocking_errors
    amount = preview.trips[0].expenses[0].line_items[0].amount
    assert amount == Decimal("0")
    assert amount.is_finite()


def test_trip_date_range_uses_min_and_max(airplane_manager_csv):
    rows = [
        {"ExpenseID": f"E{i}", "DateOccurred": date, "TripNumber": "T9", "Amount": "1"}
        for i, date in enumerate(["2024-03-05", "2024-01-20", "2024-02-14"])
    ]

    trip = _transform(airplane_manager_csv(*rows)).trips[0]

    assert trip.start_date == "2024-01-20"
    assert trip.end_date == "2024-03-05"


def test_flight_ids_are_distinct_in_order(airplane_manager_csv):
    rows = [
        {"ExpenseID": "E1", "DateOccurred": "2024-01-01", "TripNumber": "T1", "FlightID": "F2", "Amount": "1"},
        {"ExpenseID": "E2", "DateOccurred": "2024-01-02", "TripNumber": "T1", "FlightID": "F1", "Amount": "1"},
        {"ExpenseID": "E3", "DateOccurred": "2024-01-03", "TripNumber": "T1", "FlightID": "F2", "Amount": "1"},
    ]

    trip = _transform(airplane_manager_csv(*rows)).trips[0]

    assert trip.flight_ids == ("F2", "F1")


def test_rows_without_trip_are_standalone(airplane_manager_csv):
    text = airplane_manager_csv(
        {"DateOccurred": "2024-01-01", "VendorName": "Hangar Co", "Amount": "300"},
        {"DateOccurred": "2024-01-01", "VendorName": "Hangar Co", "Amount": "20"},
    )

    result = parse_airplane_manager_csv(text)
    preview = transform_airplane_manager_data(result.rows, ExistingEntities())

    # Both rows fall back to the same standalone key and form one expense
    assert len(result.warnings) == 2
    assert preview.trips == ()
    assert len(preview.standalone_expenses) == 1
    assert preview.standalone_expenses[0].source_expense_id == "standalone-2024-01-01-Hangar Co"
    assert preview.warnings == (
        "1 expense has no trip information and will be imported without a trip association",
    )


def test_too_many_fields_is_a_codec_error():
    text = "ExpenseID,DateOccurred,Amount\nE1,2024-01-01,10,extra\n"

    result = parse_airplane_manager_csv(text)

    assert result.has_blocking_errors
    assert result.errors[0].field == "csv"
    assert result.errors[0].row == 2


def test_headers_are_stripped_and_bom_removed():
    text = "\ufeff ExpenseID , DateOccurred ,Amount,TripNumber\nE1,2024-01-01,10,T1\n"

    preview = _transform(text)

    assert preview.trips[0].expenses[0].source_expense_id == "E1"
