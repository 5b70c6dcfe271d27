"""Data structures flowing through the import pipeline.

Parse -> Preview -> Map -> Execute. Everything here is immutable; stages
produce new values instead of mutating shared state.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ImportSource(str, Enum):
    """Supported source formats."""

    CSV_TEMPLATE = "csv_template"
    AIRPLANE_MANAGER = "airplane_manager"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class RowIssue:
    """A validation problem tied to one source row.

    ``row`` is 1-indexed and counts the header, so the first data row is 2.
    Codec-level problems without a row use 0.
    """

    row: int
    field: str
    value: str
    message: str
    severity: Severity

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass(frozen=True)
class ParseResult:
    """Raw rows plus the errors and warnings found while validating them."""

    rows: tuple[dict[str, str], ...]
    errors: tuple[RowIssue, ...] = ()
    warnings: tuple[RowIssue, ...] = ()

    @property
    def has_blocking_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass(frozen=True)
class ParsedLineItem:
    source_item_id: str
    category: str
    category_id: str
    amount: Decimal
    gallons: Optional[Decimal]
    description: str
    icao: str = ""


@dataclass(frozen=True)
class ParsedExpense:
    """One source expense record with its line items.

    ``trip_number`` is empty for standalone expenses.
    """

    source_expense_id: str
    date: str
    vendor_name: str
    vendor_id: Optional[str]
    trip_number: str
    trip_flight_id: str
    tail_number: str
    payment_method: str
    notes: str
    line_items: tuple[ParsedLineItem, ...] = ()

    @property
    def total_amount(self) -> Decimal:
        return sum((item.amount for item in self.line_items), Decimal("0"))


@dataclass(frozen=True)
class ParsedTrip:
    trip_number: str
    name: str
    tail_number: str
    start_date: str
    end_date: str
    expenses: tuple[ParsedExpense, ...] = ()
    flight_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class PreviewEntity:
    """A distinct source name the user has to decide about.

    ``key`` is a stable position within its preview list, assigned once so
    later stages do not need to re-compare names.
    """

    key: int
    name: str
    exists: bool
    is_fuel: bool = False


@dataclass(frozen=True)
class AircraftPreview:
    key: int
    tail_number: str
    exists: bool


@dataclass(frozen=True)
class ImportPreviewData:
    source: ImportSource
    aircraft: tuple[AircraftPreview, ...]
    trips: tuple[ParsedTrip, ...]
    standalone_expenses: tuple[ParsedExpense, ...]
    categories: tuple[PreviewEntity, ...]
    vendors: tuple[PreviewEntity, ...]
    payment_methods: tuple[PreviewEntity, ...]
    total_expenses: int
    total_line_items: int
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    raw_data: tuple[dict[str, str], ...] = ()
    receipt_count: int = 0

    def trips_for_import(self) -> tuple[ParsedTrip, ...]:
        """Return parsed trips plus a trip-less bucket for standalone expenses.

        The bucket has an empty trip number, so the executor creates its
        expenses without a trip.
        """
        if not self.standalone_expenses:
            return self.trips
        bucket = ParsedTrip(
            trip_number="",
            name="",
            tail_number="",
            start_date=min(e.date for e in self.standalone_expenses),
            end_date=max(e.date for e in self.standalone_expenses),
            expenses=self.standalone_expenses,
        )
        return self.trips + (bucket,)


@dataclass(frozen=True)
class DuplicateTrip:
    import_trip_name: str
    existing_trip_id: str
    existing_trip_name: str
    start_date: str


@dataclass(frozen=True)
class ReceiptFile:
    """Binary receipt payload supplied alongside an import."""

    filename: str
    data: bytes
    content_type: str


@dataclass(frozen=True)
class ReceiptKey:
    """Matching information recovered from a receipt filename."""

    date: str
    tail_number: str
    trip_number: str
    icao: str

    @property
    def match_key(self) -> str:
        return expense_match_key(self.date, self.trip_number, self.icao)

    @property
    def fallback_key(self) -> str:
        return expense_match_key(self.date, self.trip_number, "")


def expense_match_key(date: str, trip_number: str, icao: str) -> str:
    """Build the ``date|tripNumber|icao`` key used to attach receipts."""
    return f"{date}|{trip_number}|{icao}"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failed:
    reason: str


Outcome = Union[Ok[T], Failed]


@dataclass
class EntityCounts:
    """Per-kind tally of rows created, or skipped during restore."""

    vendors: int = 0
    categories: int = 0
    payment_methods: int = 0
    aircraft: int = 0
    trips: int = 0
    expenses: int = 0
    line_items: int = 0
    receipts: int = 0

    def as_dict(self) -> dict[str, int]:
        return dict(self.__dict__)


@dataclass
class ImportResult:
    """Report accumulated while executing an import.

    ``success`` only reflects record failures; receipt problems are reported
    in ``errors`` without counting as failures.
    """

    created: EntityCounts = field(default_factory=EntityCounts)
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def record_failure(self, outcome: Failed) -> None:
        self.errors.append(outcome.reason)
        self.failed += 1

    def record_warning(self, outcome: Failed) -> None:
        self.errors.append(outcome.reason)

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "created": self.created.as_dict(),
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }
