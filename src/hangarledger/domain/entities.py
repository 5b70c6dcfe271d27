"""Domain model entities for hangarledger.

These are pure data classes representing persisted ledger records, independent
of the database schema. Dates are ISO ``YYYY-MM-DD`` strings so that ordering
and comparison stay lexicographic throughout the import pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntityKind(str, Enum):
    """Kinds of persisted records, in dependency order (parents first)."""

    AIRCRAFT = "aircraft"
    VENDOR = "vendors"
    CATEGORY = "categories"
    PAYMENT_METHOD = "payment_methods"
    TRIP = "trips"
    EXPENSE = "expenses"
    LINE_ITEM = "line_items"
    RECEIPT = "receipts"


@dataclass(frozen=True)
class Aircraft:
    """Aircraft domain entity."""

    id: str
    tail_number: str
    name: Optional[str]
    notes: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Vendor:
    """Vendor domain entity."""

    id: str
    name: str
    notes: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Expense category domain entity."""

    id: str
    name: str
    is_fuel_category: bool
    is_system: bool
    is_active: bool
    is_default: bool
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class PaymentMethod:
    """Payment method domain entity."""

    id: str
    name: str
    notes: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Trip:
    """Trip domain entity.

    ``aircraft`` is the denormalized tail number of the trip's aircraft.
    """

    id: str
    aircraft_id: Optional[str]
    trip_number: Optional[str]
    name: str
    start_date: str
    end_date: Optional[str]
    aircraft: str
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Expense:
    """Expense domain entity.

    ``vendor``, ``category`` and ``payment_method`` are denormalized labels;
    ``category`` is the primary category (largest line item).
    """

    id: str
    trip_id: Optional[str]
    vendor_id: Optional[str]
    payment_method_id: Optional[str]
    category_id: Optional[str]
    date: str
    vendor: str
    amount: Decimal
    category: str
    payment_method: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class LineItem:
    """Expense line item domain entity."""

    id: str
    expense_id: str
    category_id: Optional[str]
    description: Optional[str]
    category: str
    amount: Decimal
    quantity_gallons: Optional[Decimal]
    sort_order: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Receipt:
    """Receipt metadata; the file itself lives in the blob store."""

    id: str
    expense_id: str
    storage_path: str
    original_filename: Optional[str]
    uploaded_at: datetime


@dataclass(frozen=True)
class NewLineItem:
    """Values for a line item that has not been inserted yet."""

    category: str
    amount: Decimal
    category_id: Optional[str] = None
    description: Optional[str] = None
    quantity_gallons: Optional[Decimal] = None
    sort_order: Optional[int] = None
