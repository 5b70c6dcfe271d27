"""Tests for Database interface returning domain models."""

import pytest
from datetime import datetime
from decimal import Decimal

from hangarledger.domain import entities
from hangarledger.domain.entities import EntityKind, NewLineItem
from hangarledger.domain.errors import ConflictError, NotFoundError, ValidationError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_create_aircraft_returns_domain_model(self, temp_db):
        """Test that aircraft lookups return domain Aircraft entities."""
        aircraft_id = temp_db.create_aircraft(tail_number="N491JL", name="Citation CJ3")

        aircraft = temp_db.find_aircraft_by_tail_number("n491jl")

        assert isinstance(aircraft, entities.Aircraft)
        assert aircraft.id == aircraft_id
        assert aircraft.tail_number == "N491JL"
        assert aircraft.is_active is True
        assert isinstance(aircraft.created_at, datetime)

    def test_generated_ids_are_strings(self, temp_db):
        """Test that ids are generated when none is given."""
        first = temp_db.create_vendor(name="Vendor 1")
        second = temp_db.create_vendor(name="Vendor 2")

        assert isinstance(first, str)
        assert first != second

    def test_name_lookups_ignore_case(self, temp_db):
        """Test that vendor, category and payment method lookups ignore case."""
        vendor_id = temp_db.create_vendor(name="Signature Flight Support")
        category_id = temp_db.create_category(name="Fuel", is_fuel_category=True)
        method_id = temp_db.create_payment_method(name="Corporate Card")

        assert temp_db.find_vendor_by_name("SIGNATURE flight support").id == vendor_id
        assert temp_db.find_category_by_name("fuel").id == category_id
        assert temp_db.find_category_by_name("fuel").is_fuel_category is True
        assert temp_db.find_payment_method_by_name("corporate card").id == method_id
        assert temp_db.find_vendor_by_name("Signature") is None

    def test_explicit_id_and_created_at_are_kept(self, temp_db):
        """Test that restore-style inserts keep their identity."""
        created_at = datetime(2023, 4, 5, 6, 7, 8)
        temp_db.create_vendor(name="Old Vendor", id="vendor-1", created_at=created_at)

        vendor = temp_db.find_vendor_by_name("old vendor")

        assert vendor.id == "vendor-1"
        assert vendor.created_at == created_at

    def test_duplicate_id_is_a_conflict(self, temp_db):
        """Test that inserting an existing id raises ConflictError."""
        temp_db.create_vendor(name="A", id="vendor-1")

        with pytest.raises(ConflictError):
            temp_db.create_vendor(name="B", id="vendor-1")

        # Session is still usable after the rollback
        assert [v.name for v in temp_db.list_vendors()] == ["A"]

    def test_unknown_parent_id_is_a_conflict(self, temp_db):
        """Test that a reference to a missing row is rejected by the database."""
        with pytest.raises(ConflictError, match="FOREIGN KEY"):
            temp_db.create_trip(name="Ferry", start_date="2024-06-01", aircraft_id="missing")

        assert temp_db.list_trips() == []

    def test_trip_returns_domain_model(self, temp_db):
        """Test that get_trip returns a domain Trip with ISO dates."""
        aircraft_id = temp_db.create_aircraft(tail_number="N1")
        trip_id = temp_db.create_trip(
            name="Trip 100",
            start_date="2024-06-01",
            end_date="2024-06-03",
            aircraft_id=aircraft_id,
            aircraft="N1",
            trip_number="100",
        )

        trip = temp_db.get_trip(trip_id)

        assert isinstance(trip, entities.Trip)
        assert trip.start_date == "2024-06-01"
        assert trip.end_date == "2024-06-03"
        assert trip.aircraft == "N1"
        assert trip.trip_number == "100"
        assert temp_db.get_trip("missing") is None

    def test_invalid_date_is_rejected(self, temp_db):
        """Test that non-ISO dates raise ValidationError."""
        with pytest.raises(ValidationError, match="Invalid date"):
            temp_db.create_expense(
                date="06/01/2024", vendor="FBO", amount=Decimal("1"), category="Fuel"
            )

    def test_expenses_are_listed_newest_first(self, temp_db):
        """Test that list_expenses orders by date descending."""
        temp_db.create_expense(date="2024-01-01", vendor="A", amount=Decimal("1"), category="Fuel")
        temp_db.create_expense(date="2024-03-01", vendor="B", amount=Decimal("2"), category="Fuel")
        temp_db.create_expense(date="2024-02-01", vendor="C", amount=Decimal("3"), category="Fuel")

        expenses = temp_db.list_expenses()

        assert [e.vendor for e in expenses] == ["B", "C", "A"]
        for expense in expenses:
            assert isinstance(expense, entities.Expense)
            assert isinstance(expense.amount, Decimal)

    def test_line_items_keep_sort_order(self, temp_db):
        """Test that line items come back ordered by sort order."""
        expense_id = temp_db.create_expense(
            date="2024-01-01", vendor="A", amount=Decimal("30"), category="Fuel"
        )
        ids = temp_db.create_line_items(
            expense_id,
            [
                NewLineItem(category="Ramp", amount=Decimal("10"), sort_order=1),
                NewLineItem(
                    category="Fuel",
                    amount=Decimal("20"),
                    quantity_gallons=Decimal("4.5"),
                    sort_order=0,
                ),
            ],
        )

        items = temp_db.list_line_items(expense_id)

        assert len(ids) == 2
        assert [i.category for i in items] == ["Fuel", "Ramp"]
        assert items[0].quantity_gallons == Decimal("4.5")
        assert all(isinstance(i, entities.LineItem) for i in items)

    def test_receipts_are_listed_per_expense(self, temp_db):
        """Test that list_receipts filters by expense."""
        first = temp_db.create_expense(date="2024-01-01", vendor="A", amount=Decimal("1"), category="Fuel")
        second = temp_db.create_expense(date="2024-01-02", vendor="B", amount=Decimal("1"), category="Fuel")
        receipt_id = temp_db.create_receipt(
            expense_id=first, storage_path="receipts/a/1-a.pdf", original_filename="a.pdf"
        )
        temp_db.create_receipt(expense_id=second, storage_path="receipts/b/1-b.pdf")

        receipts = temp_db.list_receipts(first)

        assert [r.id for r in receipts] == [receipt_id]
        assert isinstance(receipts[0], entities.Receipt)
        assert receipts[0].original_filename == "a.pdf"
        assert len(temp_db.list_receipts()) == 2


class TestSoftDelete:
    """Tests for soft deletion and existing id lookups."""

    def test_soft_deleted_rows_are_hidden(self, temp_db):
        """Test that deleted rows disappear from lists and lookups."""
        vendor_id = temp_db.create_vendor(name="Gone")

        temp_db.soft_delete(EntityKind.VENDOR, vendor_id)

        assert temp_db.list_vendors() == []
        assert temp_db.find_vendor_by_name("Gone") is None

    def test_existing_ids_include_deleted_rows(self, temp_db):
        """Test that get_existing_ids still reports deleted rows."""
        kept = temp_db.create_vendor(name="Kept")
        deleted = temp_db.create_vendor(name="Deleted")
        temp_db.soft_delete(EntityKind.VENDOR, deleted)

        assert temp_db.get_existing_ids(EntityKind.VENDOR) == {kept, deleted}
        assert temp_db.get_existing_ids(EntityKind.TRIP) == set()

    def test_missing_row_raises_not_found(self, temp_db):
        """Test that deleting an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            temp_db.soft_delete(EntityKind.TRIP, "missing")

    def test_line_items_cannot_be_soft_deleted(self, temp_db):
        """Test that kinds without a deleted marker are rejected."""
        with pytest.raises(ValidationError):
            temp_db.soft_delete(EntityKind.LINE_ITEM, "anything")
