"""Mapper functions to convert between domain models and SQLAlchemy models.

Dates leave the ORM as ISO strings; the import pipeline compares them
lexicographically.
"""

from datetime import date
from typing import Optional

from hangarledger.domain import entities as domain
from hangarledger.database.models import (
    Aircraft as ORMAircraft,
    Vendor as ORMVendor,
    ExpenseCategory as ORMCategory,
    PaymentMethod as ORMPaymentMethod,
    Trip as ORMTrip,
    Expense as ORMExpense,
    ExpenseLineItem as ORMLineItem,
    Receipt as ORMReceipt,
)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def aircraft_to_domain(orm_aircraft: ORMAircraft) -> domain.Aircraft:
    """Convert SQLAlchemy Aircraft model to domain Aircraft entity."""
    return domain.Aircraft(
        id=orm_aircraft.id,
        tail_number=orm_aircraft.tail_number,
        name=orm_aircraft.name,
        notes=orm_aircraft.notes,
        is_active=orm_aircraft.is_active,
        created_at=orm_aircraft.created_at,
    )


def vendor_to_domain(orm_vendor: ORMVendor) -> domain.Vendor:
    """Convert SQLAlchemy Vendor model to domain Vendor entity."""
    return domain.Vendor(
        id=orm_vendor.id,
        name=orm_vendor.name,
        notes=orm_vendor.notes,
        is_active=orm_vendor.is_active,
        created_at=orm_vendor.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy ExpenseCategory model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        is_fuel_category=orm_category.is_fuel_category,
        is_system=orm_category.is_system,
        is_active=orm_category.is_active,
        is_default=orm_category.is_default,
        notes=orm_category.notes,
        created_at=orm_category.created_at,
    )


def payment_method_to_domain(orm_method: ORMPaymentMethod) -> domain.PaymentMethod:
    """Convert SQLAlchemy PaymentMethod model to domain PaymentMethod entity."""
    return domain.PaymentMethod(
        id=orm_method.id,
        name=orm_method.name,
        notes=orm_method.notes,
        is_active=orm_method.is_active,
        created_at=orm_method.created_at,
    )


def trip_to_domain(orm_trip: ORMTrip) -> domain.Trip:
    """Convert SQLAlchemy Trip model to domain Trip entity."""
    return domain.Trip(
        id=orm_trip.id,
        aircraft_id=orm_trip.aircraft_id,
        trip_number=orm_trip.trip_number,
        name=orm_trip.name,
        start_date=_iso(orm_trip.start_date),
        end_date=_iso(orm_trip.end_date),
        aircraft=orm_trip.aircraft,
        notes=orm_trip.notes,
        created_at=orm_trip.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        trip_id=orm_expense.trip_id,
        vendor_id=orm_expense.vendor_id,
        payment_method_id=orm_expense.payment_method_id,
        category_id=orm_expense.category_id,
        date=_iso(orm_expense.date),
        vendor=orm_expense.vendor,
        amount=orm_expense.amount,
        category=orm_expense.category,
        payment_method=orm_expense.payment_method,
        notes=orm_expense.notes,
        created_at=orm_expense.created_at,
    )


def line_item_to_domain(orm_item: ORMLineItem) -> domain.LineItem:
    """Convert SQLAlchemy ExpenseLineItem model to domain LineItem entity."""
    return domain.LineItem(
        id=orm_item.id,
        expense_id=orm_item.expense_id,
        category_id=orm_item.category_id,
        description=orm_item.description,
        category=orm_item.category,
        amount=orm_item.amount,
        quantity_gallons=orm_item.quantity_gallons,
        sort_order=orm_item.sort_order,
        created_at=orm_item.created_at,
    )


def receipt_to_domain(orm_receipt: ORMReceipt) -> domain.Receipt:
    """Convert SQLAlchemy Receipt model to domain Receipt entity."""
    return domain.Receipt(
        id=orm_receipt.id,
        expense_id=orm_receipt.expense_id,
        storage_path=orm_receipt.storage_path,
        original_filename=orm_receipt.original_filename,
        uploaded_at=orm_receipt.uploaded_at,
    )
