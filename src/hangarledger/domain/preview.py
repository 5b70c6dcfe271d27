"""Preview/reconciliation: distinct entity names and duplicate trips."""

from dataclasses import dataclass
from typing import Iterable, Sequence

from hangarledger.database.base import Database
from hangarledger.domain.entities import Aircraft, Category, PaymentMethod, Trip, Vendor
from hangarledger.domain.import_models import (
    AircraftPreview,
    DuplicateTrip,
    ImportPreviewData,
    ImportSource,
    ParsedExpense,
    ParsedTrip,
    PreviewEntity,
)

FUEL_CATEGORY_KEYWORDS = ("fuel", "avgas", "jet-a", "jet fuel")


def is_likely_fuel_category(name: str) -> bool:
    """Guess whether a category tracks fuel quantity.

    Only pre-selects the default; the user decides per mapping.
    """
    normalized = name.lower().strip()
    return any(keyword in normalized for keyword in FUEL_CATEGORY_KEYWORDS)


@dataclass(frozen=True)
class ExistingEntities:
    """Snapshot of persisted entities the preview is reconciled against."""

    categories: Sequence[Category] = ()
    vendors: Sequence[Vendor] = ()
    payment_methods: Sequence[PaymentMethod] = ()
    aircraft: Sequence[Aircraft] = ()
    trips: Sequence[Trip] = ()


def load_existing_entities(db: Database) -> ExistingEntities:
    """Read the current non-deleted entities from the database."""
    return ExistingEntities(
        categories=db.list_categories(),
        vendors=db.list_vendors(),
        payment_methods=db.list_payment_methods(),
        aircraft=db.list_aircraft(),
        trips=db.list_trips(),
    )


def distinct_names(names: Iterable[str]) -> list[str]:
    """Collapse names that differ only by case.

    The lexicographically smallest spelling is kept so the result does not
    depend on row order. Output is sorted by the case-folded name.
    """
    by_folded: dict[str, str] = {}
    for name in names:
        if not name:
            continue
        folded = name.lower()
        current = by_folded.get(folded)
        if current is None or name < current:
            by_folded[folded] = name
    return [by_folded[folded] for folded in sorted(by_folded)]


def build_preview(
    source: ImportSource,
    expenses: Sequence[ParsedExpense],
    trips: Sequence[ParsedTrip],
    standalone: Sequence[ParsedExpense],
    rows: Sequence[dict[str, str]],
    existing: ExistingEntities,
    warnings: Sequence[str] = (),
    errors: Sequence[str] = (),
) -> ImportPreviewData:
    """Reduce parsed expenses to the entity decisions the user must make."""
    vendor_names = distinct_names(e.vendor_name for e in expenses)
    payment_names = distinct_names(e.payment_method for e in expenses)
    tail_numbers = distinct_names(e.tail_number for e in expenses)
    category_names = distinct_names(
        item.category for e in expenses for item in e.line_items
    )

    existing_categories = {c.name.lower() for c in existing.categories}
    existing_vendors = {v.name.lower() for v in existing.vendors}
    existing_payment_methods = {p.name.lower() for p in existing.payment_methods}
    existing_tail_numbers = {a.tail_number.lower() for a in existing.aircraft}

    return ImportPreviewData(
        source=source,
        aircraft=tuple(
            AircraftPreview(
                key=key,
                tail_number=tail,
                exists=tail.lower() in existing_tail_numbers,
            )
            for key, tail in enumerate(tail_numbers)
        ),
        trips=tuple(trips),
        standalone_expenses=tuple(standalone),
        categories=tuple(
            PreviewEntity(
                key=key,
                name=name,
                exists=name.lower() in existing_categories,
                is_fuel=is_likely_fuel_category(name),
            )
            for key, name in enumerate(category_names)
        ),
        vendors=tuple(
            PreviewEntity(key=key, name=name, exists=name.lower() in existing_vendors)
            for key, name in enumerate(vendor_names)
        ),
        payment_methods=tuple(
            PreviewEntity(
                key=key, name=name, exists=name.lower() in existing_payment_methods
            )
            for key, name in enumerate(payment_names)
        ),
        total_expenses=len(expenses),
        total_line_items=sum(len(e.line_items) for e in expenses),
        warnings=tuple(warnings),
        errors=tuple(errors),
        raw_data=tuple(rows),
    )


def detect_duplicate_trips(
    trips: Iterable[ParsedTrip], existing_trips: Iterable[Trip]
) -> list[DuplicateTrip]:
    """Find parsed trips whose name matches an existing trip, ignoring case."""
    existing_by_name: dict[str, Trip] = {}
    for existing in existing_trips:
        existing_by_name.setdefault(existing.name.lower(), existing)

    duplicates = []
    for trip in trips:
        match = existing_by_name.get(trip.name.lower())
        if match is not None:
            duplicates.append(
                DuplicateTrip(
                    import_trip_name=trip.name,
                    existing_trip_id=match.id,
                    existing_trip_name=match.name,
                    start_date=match.start_date,
                )
            )
    return duplicates
