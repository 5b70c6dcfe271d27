"""Import execution: write a previewed and mapped import to the database.

Execution is best effort. Entities are resolved first, then trips, expenses
and line items are written, then receipts are attached. A failing record is
reported in the result and the batch carries on.
"""

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from hangarledger.database.base import Database
from hangarledger.domain.entities import NewLineItem
from hangarledger.domain.import_models import (
    Failed,
    ImportResult,
    ImportSource,
    Ok,
    Outcome,
    ParsedExpense,
    ParsedLineItem,
    ParsedTrip,
    ReceiptFile,
    expense_match_key,
)
from hangarledger.domain.mapping import (
    AircraftMapping,
    EntityMapping,
    ImportMappings,
    MappingAction,
)
from hangarledger.domain.parsers.bundle import parse_receipt_filename
from hangarledger.storage.base import BlobStore, generate_storage_path

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"


def primary_line_item(items: Sequence[ParsedLineItem]) -> Optional[ParsedLineItem]:
    """Return the line item with the largest amount; the first one wins ties."""
    if not items:
        return None
    best = items[0]
    for item in items[1:]:
        if item.amount > best.amount:
            best = item
    return best


@dataclass
class ResolvedEntities:
    """Persistence ids for source names, keyed by the lower-cased name.

    Names whose mapping was skipped or could not be resolved are absent.
    """

    vendors: dict[str, str] = field(default_factory=dict)
    categories: dict[str, str] = field(default_factory=dict)
    payment_methods: dict[str, str] = field(default_factory=dict)
    aircraft: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def lookup(table: dict[str, str], name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        return table.get(name.lower())


class EntityResolver:
    """Resolve every mapping to a persistence id exactly once."""

    def __init__(self, db: Database, result: ImportResult):
        self.db = db
        self.result = result

    def resolve(self, mappings: ImportMappings) -> ResolvedEntities:
        resolved = ResolvedEntities()
        created = self.result.created

        for name, mapping in mappings.vendors.items():
            created.vendors += self._resolve_into(
                resolved.vendors,
                name,
                self._resolve_named(
                    "Vendor",
                    name,
                    mapping,
                    self.db.find_vendor_by_name,
                    lambda new_name: self.db.create_vendor(name=new_name),
                ),
            )

        for name, mapping in mappings.categories.items():
            created.categories += self._resolve_into(
                resolved.categories,
                name,
                self._resolve_named(
                    "Category",
                    name,
                    mapping,
                    self.db.find_category_by_name,
                    lambda new_name, m=mapping: self.db.create_category(
                        name=new_name, is_fuel_category=bool(m.is_fuel_category)
                    ),
                ),
            )

        for name, mapping in mappings.payment_methods.items():
            created.payment_methods += self._resolve_into(
                resolved.payment_methods,
                name,
                self._resolve_named(
                    "Payment method",
                    name,
                    mapping,
                    self.db.find_payment_method_by_name,
                    lambda new_name: self.db.create_payment_method(name=new_name),
                ),
            )

        for tail_number, mapping in mappings.aircraft.items():
            created.aircraft += self._resolve_into(
                resolved.aircraft,
                tail_number,
                self._resolve_aircraft(tail_number, mapping),
            )

        return resolved

    def _resolve_into(
        self,
        table: dict[str, str],
        source_name: str,
        outcome: Outcome[tuple[Optional[str], bool]],
    ) -> int:
        """Store a resolved id and return 1 if a row was inserted."""
        if isinstance(outcome, Failed):
            logger.warning(outcome.reason)
            self.result.record_failure(outcome)
            return 0
        entity_id, inserted = outcome.value
        if entity_id is not None:
            table[source_name.lower()] = entity_id
        return 1 if inserted else 0

    def _resolve_named(
        self,
        label: str,
        source_name: str,
        mapping: EntityMapping,
        find: Callable[[str], object],
        create: Callable[[str], str],
    ) -> Outcome[tuple[Optional[str], bool]]:
        try:
            if mapping.action is MappingAction.SKIP:
                return Ok((None, False))

            if mapping.action is MappingAction.MAP:
                if mapping.target_id:
                    return Ok((mapping.target_id, False))
                existing = find(source_name)
                return Ok((existing.id if existing else None, False))

            name = mapping.new_name or source_name
            existing = find(name)
            if existing is not None:
                return Ok((existing.id, False))
            return Ok((create(name), True))
        except Exception as e:
            return Failed(f"{label} {source_name}: {e}")

    def _resolve_aircraft(
        self, tail_number: str, mapping: AircraftMapping
    ) -> Outcome[tuple[Optional[str], bool]]:
        try:
            if mapping.action is MappingAction.SKIP:
                return Ok((None, False))

            if mapping.action is MappingAction.MAP and mapping.target_id:
                return Ok((mapping.target_id, False))

            lookup = mapping.tail_number or tail_number
            existing = self.db.find_aircraft_by_tail_number(lookup)
            if existing is not None:
                return Ok((existing.id, False))
            if mapping.action is MappingAction.MAP:
                return Ok((None, False))

            aircraft_id = self.db.create_aircraft(
                tail_number=lookup.upper(), name=mapping.name
            )
            return Ok((aircraft_id, True))
        except Exception as e:
            return Failed(f"Aircraft {tail_number}: {e}")


class ImportExecutor:
    """Write parsed trips, expenses, line items and receipts."""

    def __init__(self, db: Database, blob_store: BlobStore):
        """Initialize import executor.

        Args:
            db: Database instance
            blob_store: Storage receiving matched receipt files
        """
        self.db = db
        self.blob_store = blob_store

    def execute(
        self,
        source: ImportSource,
        trips: Sequence[ParsedTrip],
        mappings: ImportMappings,
        receipts: Optional[Sequence[ReceiptFile]] = None,
        skip_duplicate_trip_names: Optional[Iterable[str]] = None,
    ) -> ImportResult:
        """Execute an import.

        Args:
            source: Format the data was parsed from
            trips: Parsed trips, including a trip-less bucket for standalone
                expenses if any
            mappings: Create/map/skip decisions per entity name
            receipts: Receipt files to attach to created expenses
            skip_duplicate_trip_names: Exact trip names to leave out

        Returns:
            ImportResult with created counts, failures and error messages.
            ``success`` is true when no record failed; receipt problems are
            reported in ``errors`` only.
        """
        result = ImportResult()
        logger.info(
            "Starting %s import of %d trips", ImportSource(source).value, len(trips)
        )

        resolved = EntityResolver(self.db, result).resolve(mappings)
        logger.debug("Resolved entities: %s", result.created.as_dict())

        skip_names = set(skip_duplicate_trip_names or ())
        expense_keys: dict[str, str] = {}

        for trip in trips:
            if trip.name in skip_names:
                logger.info("Skipping duplicate trip %s", trip.name)
                result.skipped += 1
                continue
            self._import_trip(trip, resolved, result, expense_keys)

        if receipts:
            self._attach_receipts(receipts, expense_keys, result)

        logger.info(
            "Import finished: %d expenses, %d line items, %d receipts created; "
            "%d failed, %d skipped",
            result.created.expenses,
            result.created.line_items,
            result.created.receipts,
            result.failed,
            result.skipped,
        )
        return result

    def _import_trip(
        self,
        trip: ParsedTrip,
        resolved: ResolvedEntities,
        result: ImportResult,
        expense_keys: dict[str, str],
    ) -> None:
        trip_id: Optional[str] = None
        aircraft_id = resolved.lookup(resolved.aircraft, trip.tail_number)

        if trip.trip_number and aircraft_id:
            outcome = self._create_trip(trip, aircraft_id)
            if isinstance(outcome, Failed):
                logger.warning(outcome.reason)
                result.record_failure(outcome)
                return
            trip_id = outcome.value
            result.created.trips += 1

        for expense in trip.expenses:
            outcome = self._create_expense(expense, trip_id, resolved)
            if isinstance(outcome, Failed):
                logger.warning(outcome.reason)
                result.record_failure(outcome)
                continue
            expense_id = outcome.value
            result.created.expenses += 1
            self._register_receipt_keys(expense, expense_id, expense_keys)

            if not expense.line_items:
                continue
            items_outcome = self._create_line_items(expense, expense_id, resolved)
            if isinstance(items_outcome, Failed):
                logger.warning(items_outcome.reason)
                result.record_failure(items_outcome)
            else:
                result.created.line_items += items_outcome.value

    def _create_trip(self, trip: ParsedTrip, aircraft_id: str) -> Outcome[str]:
        try:
            trip_id = self.db.create_trip(
                name=trip.name,
                start_date=trip.start_date,
                end_date=trip.end_date or None,
                aircraft_id=aircraft_id,
                aircraft=trip.tail_number,
                trip_number=trip.trip_number,
            )
            return Ok(trip_id)
        except Exception as e:
            return Failed(f"Trip {trip.name}: {e}")

    def _create_expense(
        self,
        expense: ParsedExpense,
        trip_id: Optional[str],
        resolved: ResolvedEntities,
    ) -> Outcome[str]:
        primary = primary_line_item(expense.line_items)
        try:
            expense_id = self.db.create_expense(
                date=expense.date,
                vendor=expense.vendor_name,
                amount=expense.total_amount,
                category=primary.category if primary else DEFAULT_CATEGORY,
                trip_id=trip_id,
                vendor_id=resolved.lookup(resolved.vendors, expense.vendor_name),
                payment_method_id=resolved.lookup(
                    resolved.payment_methods, expense.payment_method
                ),
                category_id=(
                    resolved.lookup(resolved.categories, primary.category)
                    if primary
                    else None
                ),
                payment_method=expense.payment_method or None,
                notes=expense.notes or None,
            )
            return Ok(expense_id)
        except Exception as e:
            return Failed(f"Expense {expense.date} {expense.vendor_name}: {e}")

    def _create_line_items(
        self,
        expense: ParsedExpense,
        expense_id: str,
        resolved: ResolvedEntities,
    ) -> Outcome[int]:
        items = [
            NewLineItem(
                category=item.category,
                amount=item.amount,
                category_id=resolved.lookup(resolved.categories, item.category),
                description=item.description or None,
                quantity_gallons=item.gallons,
                sort_order=index,
            )
            for index, item in enumerate(expense.line_items)
        ]
        try:
            return Ok(len(self.db.create_line_items(expense_id, items)))
        except Exception as e:
            return Failed(f"Line items for expense {expense.date}: {e}")

    @staticmethod
    def _register_receipt_keys(
        expense: ParsedExpense, expense_id: str, expense_keys: dict[str, str]
    ) -> None:
        for item in expense.line_items:
            if item.icao:
                expense_keys[
                    expense_match_key(expense.date, expense.trip_number, item.icao)
                ] = expense_id
        if expense.trip_number:
            expense_keys[
                expense_match_key(expense.date, expense.trip_number, "")
            ] = expense_id

    def _attach_receipts(
        self,
        receipts: Sequence[ReceiptFile],
        expense_keys: dict[str, str],
        result: ImportResult,
    ) -> None:
        for receipt in receipts:
            key = parse_receipt_filename(receipt.filename)
            if key is None:
                logger.debug("Receipt %s does not follow the naming convention", receipt.filename)
                continue

            expense_id = expense_keys.get(key.match_key) or expense_keys.get(key.fallback_key)
            if expense_id is None:
                # The matching expense may have failed to import
                logger.debug("No expense matches receipt %s", receipt.filename)
                continue

            outcome = self._store_receipt(receipt, expense_id)
            if isinstance(outcome, Failed):
                logger.warning(outcome.reason)
                result.record_warning(outcome)
            else:
                result.created.receipts += 1

    def _store_receipt(self, receipt: ReceiptFile, expense_id: str) -> Outcome[str]:
        try:
            storage_path = generate_storage_path(expense_id, receipt.filename)
            self.blob_store.upload(storage_path, receipt.data, receipt.content_type)
            receipt_id = self.db.create_receipt(
                expense_id=expense_id,
                storage_path=storage_path,
                original_filename=posixpath.basename(receipt.filename) or receipt.filename,
            )
            return Ok(receipt_id)
        except Exception as e:
            return Failed(f"Receipt {receipt.filename}: {e}")
