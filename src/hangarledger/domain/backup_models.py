"""Backup archive records.

Each record mirrors one table and converts to and from the camelCase JSON
stored under ``data/`` in a backup archive. Timestamps stay ISO strings until
they are written back to the database.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from hangarledger.domain import entities
from hangarledger.domain.import_models import EntityCounts

BACKUP_VERSION = 1


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp from a backup, accepting a trailing ``Z``."""
    if not value:
        return None
    return datetime.fromisoformat(value)


def file_extension(filename: str) -> str:
    """Return the extension including the dot, or an empty string."""
    dot = filename.rfind(".")
    return filename[dot:] if dot != -1 else ""


@dataclass(frozen=True)
class BackupAircraft:
    id: str
    tail_number: str
    name: Optional[str]
    notes: Optional[str]
    is_active: bool
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, aircraft: entities.Aircraft) -> "BackupAircraft":
        return cls(
            id=aircraft.id,
            tail_number=aircraft.tail_number,
            name=aircraft.name,
            notes=aircraft.notes,
            is_active=aircraft.is_active,
            created_at=_iso(aircraft.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tailNumber": self.tail_number,
            "name": self.name,
            "notes": self.notes,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupAircraft":
        return cls(
            id=data["id"],
            tail_number=data["tailNumber"],
            name=data.get("name"),
            notes=data.get("notes"),
            is_active=data.get("isActive", True),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class BackupVendor:
    id: str
    name: str
    notes: Optional[str]
    is_active: bool
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, vendor: entities.Vendor) -> "BackupVendor":
        return cls(
            id=vendor.id,
            name=vendor.name,
            notes=vendor.notes,
            is_active=vendor.is_active,
            created_at=_iso(vendor.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "notes": self.notes,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupVendor":
        return cls(
            id=data["id"],
            name=data["name"],
            notes=data.get("notes"),
            is_active=data.get("isActive", True),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class BackupCategory:
    id: str
    name: str
    is_system: bool
    is_active: bool
    is_fuel_category: bool
    is_default: bool
    notes: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, category: entities.Category) -> "BackupCategory":
        return cls(
            id=category.id,
            name=category.name,
            is_system=category.is_system,
            is_active=category.is_active,
            is_fuel_category=category.is_fuel_category,
            is_default=category.is_default,
            notes=category.notes,
            created_at=_iso(category.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "isSystem": self.is_system,
            "isActive": self.is_active,
            "isFuelCategory": self.is_fuel_category,
            "isDefault": self.is_default,
            "notes": self.notes,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupCategory":
        return cls(
            id=data["id"],
            name=data["name"],
            is_system=data.get("isSystem", False),
            is_active=data.get("isActive", True),
            is_fuel_category=data.get("isFuelCategory", False),
            is_default=data.get("isDefault") or False,
            notes=data.get("notes"),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class BackupPaymentMethod:
    id: str
    name: str
    notes: Optional[str]
    is_active: bool
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, method: entities.PaymentMethod) -> "BackupPaymentMethod":
        return cls(
            id=method.id,
            name=method.name,
            notes=method.notes,
            is_active=method.is_active,
            created_at=_iso(method.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "notes": self.notes,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupPaymentMethod":
        return cls(
            id=data["id"],
            name=data["name"],
            notes=data.get("notes"),
            is_active=data.get("isActive", True),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class BackupTrip:
    id: str
    aircraft_id: Optional[str]
    trip_number: Optional[str]
    name: str
    start_date: str
    end_date: Optional[str]
    notes: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, trip: entities.Trip) -> "BackupTrip":
        return cls(
            id=trip.id,
            aircraft_id=trip.aircraft_id,
            trip_number=trip.trip_number,
            name=trip.name,
            start_date=trip.start_date,
            end_date=trip.end_date,
            notes=trip.notes,
            created_at=_iso(trip.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "aircraftId": self.aircraft_id,
            "tripNumber": self.trip_number,
            "name": self.name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "notes": self.notes,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupTrip":
        return cls(
            id=data["id"],
            aircraft_id=data.get("aircraftId"),
            trip_number=data.get("tripNumber"),
            name=data["name"],
            start_date=data["startDate"],
            end_date=data.get("endDate"),
            notes=data.get("notes"),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class BackupReceipt:
    """Receipt metadata; ``filename`` names the file under ``receipts/``."""

    id: str
    filename: str
    original_filename: str
    storage_path: str

    @classmethod
    def from_entity(cls, receipt: entities.Receipt) -> "BackupReceipt":
        ext = file_extension(receipt.storage_path)
        return cls(
            id=receipt.id,
            filename=f"{receipt.id}{ext}",
            original_filename=receipt.original_filename or f"receipt{ext}",
            storage_path=receipt.storage_path,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "originalFilename": self.original_filename,
            "storagePath": self.storage_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupReceipt":
        return cls(
            id=data["id"],
            filename=data["filename"],
            original_filename=data.get("originalFilename") or data["filename"],
            storage_path=data.get("storagePath", ""),
        )


@dataclass(frozen=True)
class BackupExpense:
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
    created_at: Optional[str]
    receipts: tuple[BackupReceipt, ...] = ()

    @classmethod
    def from_entity(
        cls, expense: entities.Expense, receipts: tuple[BackupReceipt, ...] = ()
    ) -> "BackupExpense":
        return cls(
            id=expense.id,
            trip_id=expense.trip_id,
            vendor_id=expense.vendor_id,
            payment_method_id=expense.payment_method_id,
            category_id=expense.category_id,
            date=expense.date,
            vendor=expense.vendor,
            amount=expense.amount,
            category=expense.category,
            payment_method=expense.payment_method,
            notes=expense.notes,
            created_at=_iso(expense.created_at),
            receipts=receipts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tripId": self.trip_id,
            "vendorId": self.vendor_id,
            "paymentMethodId": self.payment_method_id,
            "categoryId": self.category_id,
            "date": self.date,
            "vendor": self.vendor,
            "amount": _number(self.amount),
            "category": self.category,
            "paymentMethod": self.payment_method,
            "notes": self.notes,
            "createdAt": self.created_at,
            "receipts": [receipt.to_dict() for receipt in self.receipts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupExpense":
        return cls(
            id=data["id"],
            trip_id=data.get("tripId"),
            vendor_id=data.get("vendorId"),
            payment_method_id=data.get("paymentMethodId"),
            category_id=data.get("categoryId"),
            date=data["date"],
            vendor=data["vendor"],
            amount=_decimal(data["amount"]),
            category=data["category"],
            payment_method=data.get("paymentMethod"),
            notes=data.get("notes"),
            created_at=data.get("createdAt"),
            receipts=tuple(
                BackupReceipt.from_dict(receipt) for receipt in data.get("receipts") or ()
            ),
        )


@dataclass(frozen=True)
class BackupLineItem:
    id: str
    expense_id: str
    category_id: Optional[str]
    description: Optional[str]
    category: str
    amount: Decimal
    quantity_gallons: Optional[Decimal]
    sort_order: Optional[int]
    created_at: Optional[str]

    @classmethod
    def from_entity(cls, item: entities.LineItem) -> "BackupLineItem":
        return cls(
            id=item.id,
            expense_id=item.expense_id,
            category_id=item.category_id,
            description=item.description,
            category=item.category,
            amount=item.amount,
            quantity_gallons=item.quantity_gallons,
            sort_order=item.sort_order,
            created_at=_iso(item.created_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "expenseId": self.expense_id,
            "categoryId": self.category_id,
            "description": self.description,
            "category": self.category,
            "amount": _number(self.amount),
            "quantityGallons": _number(self.quantity_gallons),
            "sortOrder": self.sort_order,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupLineItem":
        return cls(
            id=data["id"],
            expense_id=data["expenseId"],
            category_id=data.get("categoryId"),
            description=data.get("description"),
            category=data["category"],
            amount=_decimal(data["amount"]),
            quantity_gallons=_decimal(data.get("quantityGallons")),
            sort_order=data.get("sortOrder"),
            created_at=data.get("createdAt"),
        )


_COUNT_KEYS = {
    "aircraft": "aircraft",
    "vendors": "vendors",
    "categories": "categories",
    "paymentMethods": "payment_methods",
    "trips": "trips",
    "expenses": "expenses",
    "lineItems": "line_items",
    "receipts": "receipts",
}


@dataclass(frozen=True)
class BackupManifest:
    version: int
    app_version: str
    created_at: str
    counts: EntityCounts = field(default_factory=EntityCounts)
    user_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "appVersion": self.app_version,
            "createdAt": self.created_at,
        }
        if self.user_id is not None:
            data["userId"] = self.user_id
        data["counts"] = {
            json_key: getattr(self.counts, attr) for json_key, attr in _COUNT_KEYS.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackupManifest":
        raw_counts = data.get("counts") or {}
        counts = EntityCounts(
            **{attr: int(raw_counts.get(key, 0)) for key, attr in _COUNT_KEYS.items()}
        )
        return cls(
            version=int(data["version"]),
            app_version=data.get("appVersion", ""),
            created_at=data.get("createdAt", ""),
            counts=counts,
            user_id=data.get("userId"),
        )


@dataclass
class RestoreResult:
    """Outcome of a restore. Skips are normal; only errors mean failure."""

    created: EntityCounts = field(default_factory=EntityCounts)
    skipped: EntityCounts = field(default_factory=EntityCounts)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "created": self.created.as_dict(),
            "skipped": self.skipped.as_dict(),
            "errors": list(self.errors),
        }
