"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from hangarledger.domain.entities import (
    Aircraft,
    Category,
    EntityKind,
    Expense,
    LineItem,
    NewLineItem,
    PaymentMethod,
    Receipt,
    Trip,
    Vendor,
)


class Database(ABC):
    """Abstract database interface for hangarledger.

    ``create_*`` methods accept an explicit ``id`` and ``created_at`` so that
    backups can be restored with their original identities. Name lookups are
    case-insensitive exact matches and ignore soft-deleted rows.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Aircraft operations
    @abstractmethod
    def create_aircraft(
        self,
        tail_number: str,
        name: Optional[str] = None,
        notes: Optional[str] = None,
        is_active: bool = True,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create an aircraft. Returns aircraft ID."""
        pass

    @abstractmethod
    def find_aircraft_by_tail_number(self, tail_number: str) -> Optional[Aircraft]:
        """Get a non-deleted aircraft by tail number, ignoring case."""
        pass

    @abstractmethod
    def list_aircraft(self) -> list[Aircraft]:
        """List non-deleted aircraft."""
        pass

    # Vendor operations
    @abstractmethod
    def create_vendor(
        self,
        name: str,
        notes: Optional[str] = None,
        is_active: bool = True,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a vendor. Returns vendor ID."""
        pass

    @abstractmethod
    def find_vendor_by_name(self, name: str) -> Optional[Vendor]:
        """Get a non-deleted vendor by name, ignoring case."""
        pass

    @abstractmethod
    def list_vendors(self) -> list[Vendor]:
        """List non-deleted vendors."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        is_fuel_category: bool = False,
        is_system: bool = False,
        is_active: bool = True,
        is_default: bool = False,
        notes: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create an expense category. Returns category ID."""
        pass

    @abstractmethod
    def find_category_by_name(self, name: str) -> Optional[Category]:
        """Get a non-deleted category by name, ignoring case."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List non-deleted categories."""
        pass

    # Payment method operations
    @abstractmethod
    def create_payment_method(
        self,
        name: str,
        notes: Optional[str] = None,
        is_active: bool = True,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a payment method. Returns payment method ID."""
        pass

    @abstractmethod
    def find_payment_method_by_name(self, name: str) -> Optional[PaymentMethod]:
        """Get a non-deleted payment method by name, ignoring case."""
        pass

    @abstractmethod
    def list_payment_methods(self) -> list[PaymentMethod]:
        """List non-deleted payment methods."""
        pass

    # Trip operations
    @abstractmethod
    def create_trip(
        self,
        name: str,
        start_date: str,
        end_date: Optional[str] = None,
        aircraft_id: Optional[str] = None,
        aircraft: str = "",
        trip_number: Optional[str] = None,
        notes: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a trip. Dates are ISO strings. Returns trip ID."""
        pass

    @abstractmethod
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        """Get trip by ID."""
        pass

    @abstractmethod
    def list_trips(self) -> list[Trip]:
        """List non-deleted trips."""
        pass

    # Expense operations
    @abstractmethod
    def create_expense(
        self,
        date: str,
        vendor: str,
        amount: Decimal,
        category: str,
        trip_id: Optional[str] = None,
        vendor_id: Optional[str] = None,
        payment_method_id: Optional[str] = None,
        category_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create an expense. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        """List non-deleted expenses, newest date first."""
        pass

    # Line item operations
    @abstractmethod
    def create_line_items(self, expense_id: str, items: Sequence[NewLineItem]) -> list[str]:
        """Create all line items of an expense in one commit. Returns their IDs."""
        pass

    @abstractmethod
    def create_line_item(
        self,
        expense_id: str,
        item: NewLineItem,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Create a single line item. Returns line item ID."""
        pass

    @abstractmethod
    def list_line_items(self, expense_id: Optional[str] = None) -> list[LineItem]:
        """List line items ordered by sort order, optionally for one expense."""
        pass

    # Receipt operations
    @abstractmethod
    def create_receipt(
        self,
        expense_id: str,
        storage_path: str,
        original_filename: Optional[str] = None,
        id: Optional[str] = None,
        uploaded_at: Optional[datetime] = None,
    ) -> str:
        """Create receipt metadata. Returns receipt ID."""
        pass

    @abstractmethod
    def list_receipts(self, expense_id: Optional[str] = None) -> list[Receipt]:
        """List receipts, optionally for one expense."""
        pass

    # Cross-entity operations
    @abstractmethod
    def get_existing_ids(self, kind: EntityKind) -> set[str]:
        """Get every ID of a kind, soft-deleted rows included."""
        pass

    @abstractmethod
    def soft_delete(self, kind: EntityKind, entity_id: str) -> None:
        """Mark a row as deleted without removing it."""
        pass
