"""Tests for expense CSV export."""

import csv
import io
from decimal import Decimal

from hangarledger.domain.entities import EntityKind, NewLineItem
from hangarledger.domain.export import EXPORT_COLUMNS, export_expenses_to_csv
from hangarledger.domain.parsers import parse_template_csv


def _rows(text):
    return list(csv.DictReader(io.StringIO(text)))


def _seed(db):
    aircraft_id = db.create_aircraft(tail_number="N1")
    trip_id = db.create_trip(
        name="Trip 100",
        start_date="2024-06-01",
        end_date="2024-06-03",
        aircraft_id=aircraft_id,
        aircraft="N1",
        trip_number="100",
    )
    fuel_expense = db.create_expense(
        date="2024-06-02",
        vendor="Signature",
        amount=Decimal("612.50"),
        category="Fuel",
        trip_id=trip_id,
        payment_method="Corporate Card",
        notes="Quick turn",
    )
    db.create_line_items(
        fuel_expense,
        [
            NewLineItem(
                category="Fuel",
                amount=Decimal("562.50"),
                quantity_gallons=Decimal("90.5"),
                description="Jet A",
                sort_order=0,
            ),
            NewLineItem(category="Ramp Fees", amount=Decimal("50"), sort_order=1),
        ],
    )
    db.create_expense(
        date="2024-05-15",
        vendor="Hangar Co",
        amount=Decimal("300"),
        category="Hangar",
    )
    return fuel_expense


def test_header_only_for_empty_ledger(temp_db):
    assert export_expenses_to_csv(temp_db) == ",".join(EXPORT_COLUMNS) + "\n"


def test_one_row_per_line_item(temp_db):
    _seed(temp_db)

    rows = _rows(export_expenses_to_csv(temp_db))

    assert [(r["date"], r["category_name"], r["amount"]) for r in rows] == [
        ("2024-06-02", "Fuel", "562.5"),
        ("2024-06-02", "Ramp Fees", "50"),
        ("2024-05-15", "Hangar", "300"),
    ]

    fuel, ramp, hangar = rows
    assert fuel["trip_name"] == "Trip 100"
    assert fuel["trip_start_date"] == "2024-06-01"
    assert fuel["trip_end_date"] == "2024-06-03"
    assert fuel["aircraft_tail_number"] == "N1"
    assert fuel["vendor_name"] == "Signature"
    assert fuel["gallons"] == "90.5"
    assert fuel["payment_method"] == "Corporate Card"
    assert fuel["notes"] == "Jet A"
    assert ramp["notes"] == "Quick turn"
    assert ramp["gallons"] == ""


def test_expense_without_trip_or_line_items(temp_db):
    _seed(temp_db)

    hangar = _rows(export_expenses_to_csv(temp_db))[-1]

    assert hangar["trip_name"] == ""
    assert hangar["trip_start_date"] == ""
    assert hangar["aircraft_tail_number"] == ""
    assert hangar["vendor_name"] == "Hangar Co"
    assert hangar["payment_method"] == ""


def test_deleted_expenses_are_not_exported(temp_db):
    fuel_expense = _seed(temp_db)
    temp_db.soft_delete(EntityKind.EXPENSE, fuel_expense)

    rows = _rows(export_expenses_to_csv(temp_db))

    assert [r["vendor_name"] for r in rows] == ["Hangar Co"]


def test_export_can_be_imported_as_template(temp_db):
    _seed(temp_db)

    result = parse_template_csv(export_expenses_to_csv(temp_db))

    assert not result.has_blocking_errors
    assert len(result.rows) == 3
