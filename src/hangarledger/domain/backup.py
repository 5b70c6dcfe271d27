"""Backup and restore of all ledger data as a ZIP archive.

Archive layout::

    manifest.json
    data/aircraft.json, vendors.json, categories.json, payment-methods.json,
         trips.json, expenses.json, line-items.json
    receipts/{receiptId}{ext}
"""

import io
import json
import logging
import zipfile
from collections import defaultdict
from datetime import datetime, UTC
from typing import Any, Callable, TypeVar

from hangarledger.database.base import Database
from hangarledger.domain.backup_models import (
    BACKUP_VERSION,
    BackupAircraft,
    BackupCategory,
    BackupExpense,
    BackupLineItem,
    BackupManifest,
    BackupPaymentMethod,
    BackupReceipt,
    BackupTrip,
    BackupVendor,
    RestoreResult,
    parse_timestamp,
)
from hangarledger.domain.entities import EntityKind, NewLineItem
from hangarledger.domain.errors import (
    ArchiveError,
    BackupVersionError,
    missing_archive_entry,
    unsupported_backup_version,
)
from hangarledger.domain.import_models import EntityCounts
from hangarledger.domain.parsers.bundle import content_type_for
from hangarledger.storage.base import BlobStore, generate_storage_path

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
DATA_DIR = "data"
RECEIPTS_DIR = "receipts"

AIRCRAFT_FILE = "aircraft.json"
VENDORS_FILE = "vendors.json"
CATEGORIES_FILE = "categories.json"
PAYMENT_METHODS_FILE = "payment-methods.json"
TRIPS_FILE = "trips.json"
EXPENSES_FILE = "expenses.json"
LINE_ITEMS_FILE = "line-items.json"

R = TypeVar("R")


class BackupService:
    """Service for writing and restoring backup archives."""

    def __init__(self, db: Database, blob_store: BlobStore, app_version: str):
        """Initialize backup service.

        Args:
            db: Database instance
            blob_store: Storage holding receipt files
            app_version: Application version recorded in new manifests
        """
        self.db = db
        self.blob_store = blob_store
        self.app_version = app_version

    def generate_backup(self) -> bytes:
        """Package every non-deleted record and its receipt files.

        Receipts whose file is missing from storage are still listed in
        ``expenses.json`` but have no entry under ``receipts/``.

        Returns:
            ZIP archive bytes
        """
        aircraft = [BackupAircraft.from_entity(a) for a in self.db.list_aircraft()]
        vendors = [BackupVendor.from_entity(v) for v in self.db.list_vendors()]
        categories = [BackupCategory.from_entity(c) for c in self.db.list_categories()]
        payment_methods = [
            BackupPaymentMethod.from_entity(p) for p in self.db.list_payment_methods()
        ]
        trips = [BackupTrip.from_entity(t) for t in self.db.list_trips()]

        receipts_by_expense: dict[str, list[BackupReceipt]] = defaultdict(list)
        for receipt in self.db.list_receipts():
            receipts_by_expense[receipt.expense_id].append(BackupReceipt.from_entity(receipt))

        expenses = [
            BackupExpense.from_entity(e, tuple(receipts_by_expense.get(e.id, ())))
            for e in self.db.list_expenses()
        ]
        expense_ids = {e.id for e in expenses}
        line_items = [
            BackupLineItem.from_entity(item)
            for item in self.db.list_line_items()
            if item.expense_id in expense_ids
        ]

        manifest = BackupManifest(
            version=BACKUP_VERSION,
            app_version=self.app_version,
            created_at=datetime.now(UTC).isoformat(),
            counts=EntityCounts(
                aircraft=len(aircraft),
                vendors=len(vendors),
                categories=len(categories),
                payment_methods=len(payment_methods),
                trips=len(trips),
                expenses=len(expenses),
                line_items=len(line_items),
                receipts=sum(len(e.receipts) for e in expenses),
            ),
        )

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(MANIFEST_NAME, json.dumps(manifest.to_dict(), indent=2))
            for filename, records in (
                (AIRCRAFT_FILE, aircraft),
                (VENDORS_FILE, vendors),
                (CATEGORIES_FILE, categories),
                (PAYMENT_METHODS_FILE, payment_methods),
                (TRIPS_FILE, trips),
                (EXPENSES_FILE, expenses),
                (LINE_ITEMS_FILE, line_items),
            ):
                zf.writestr(
                    f"{DATA_DIR}/{filename}",
                    json.dumps([record.to_dict() for record in records], indent=2),
                )

            for expense in expenses:
                for receipt in expense.receipts:
                    data = self.blob_store.download(receipt.storage_path)
                    if data is None:
                        logger.warning(
                            "Receipt file missing from storage: %s", receipt.storage_path
                        )
                        continue
                    zf.writestr(f"{RECEIPTS_DIR}/{receipt.filename}", data)

        logger.info("Backup created: %s", manifest.to_dict()["counts"])
        return buffer.getvalue()

    def restore_backup(self, archive_data: bytes) -> RestoreResult:
        """Restore records from a backup archive, keeping their original ids.

        Records whose id already exists (soft-deleted rows included) are
        counted as skipped, so restoring the same archive twice is harmless.
        Line items and receipts whose expense is neither present nor restored
        in this pass are dropped.

        Args:
            archive_data: ZIP archive bytes produced by ``generate_backup``

        Returns:
            RestoreResult with per-kind created/skipped counts and errors

        Raises:
            ArchiveError: If the archive is unreadable or has no manifest
            BackupVersionError: If the archive is newer than supported
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(archive_data))
        except zipfile.BadZipFile as exc:
            raise ArchiveError(f"Invalid backup: {exc}")

        with archive:
            manifest = self._read_manifest(archive)
            logger.info(
                "Restoring backup version %d created %s", manifest.version, manifest.created_at
            )

            aircraft = self._read_records(archive, AIRCRAFT_FILE, BackupAircraft.from_dict)
            vendors = self._read_records(archive, VENDORS_FILE, BackupVendor.from_dict)
            categories = self._read_records(archive, CATEGORIES_FILE, BackupCategory.from_dict)
            payment_methods = self._read_records(
                archive, PAYMENT_METHODS_FILE, BackupPaymentMethod.from_dict
            )
            trips = self._read_records(archive, TRIPS_FILE, BackupTrip.from_dict)
            expenses = self._read_records(archive, EXPENSES_FILE, BackupExpense.from_dict)
            line_items = self._read_records(archive, LINE_ITEMS_FILE, BackupLineItem.from_dict)

            existing = {kind: self.db.get_existing_ids(kind) for kind in EntityKind}
            result = RestoreResult()

            for a in aircraft:
                self._restore_one(
                    result,
                    "aircraft",
                    a.id in existing[EntityKind.AIRCRAFT],
                    f"Aircraft {a.tail_number}",
                    lambda a=a: self.db.create_aircraft(
                        tail_number=a.tail_number,
                        name=a.name,
                        notes=a.notes,
                        is_active=a.is_active,
                        id=a.id,
                        created_at=parse_timestamp(a.created_at),
                    ),
                )

            for v in vendors:
                self._restore_one(
                    result,
                    "vendors",
                    v.id in existing[EntityKind.VENDOR],
                    f"Vendor {v.name}",
                    lambda v=v: self.db.create_vendor(
                        name=v.name,
                        notes=v.notes,
                        is_active=v.is_active,
                        id=v.id,
                        created_at=parse_timestamp(v.created_at),
                    ),
                )

            for c in categories:
                self._restore_one(
                    result,
                    "categories",
                    c.id in existing[EntityKind.CATEGORY],
                    f"Category {c.name}",
                    lambda c=c: self.db.create_category(
                        name=c.name,
                        is_fuel_category=c.is_fuel_category,
                        is_system=c.is_system,
                        is_active=c.is_active,
                        is_default=c.is_default,
                        notes=c.notes,
                        id=c.id,
                        created_at=parse_timestamp(c.created_at),
                    ),
                )

            for p in payment_methods:
                self._restore_one(
                    result,
                    "payment_methods",
                    p.id in existing[EntityKind.PAYMENT_METHOD],
                    f"Payment method {p.name}",
                    lambda p=p: self.db.create_payment_method(
                        name=p.name,
                        notes=p.notes,
                        is_active=p.is_active,
                        id=p.id,
                        created_at=parse_timestamp(p.created_at),
                    ),
                )

            # Tail numbers come from the archive, not the live database
            tail_numbers = {a.id: a.tail_number for a in aircraft}
            for t in trips:
                self._restore_one(
                    result,
                    "trips",
                    t.id in existing[EntityKind.TRIP],
                    f"Trip {t.name}",
                    lambda t=t: self.db.create_trip(
                        name=t.name,
                        start_date=t.start_date,
                        end_date=t.end_date,
                        aircraft_id=t.aircraft_id,
                        aircraft=tail_numbers.get(t.aircraft_id, ""),
                        trip_number=t.trip_number,
                        notes=t.notes,
                        id=t.id,
                        created_at=parse_timestamp(t.created_at),
                    ),
                )

            restored_expenses: set[str] = set()
            for e in expenses:
                if self._restore_one(
                    result,
                    "expenses",
                    e.id in existing[EntityKind.EXPENSE],
                    f"Expense {e.date} {e.vendor}",
                    lambda e=e: self.db.create_expense(
                        date=e.date,
                        vendor=e.vendor,
                        amount=e.amount,
                        category=e.category,
                        trip_id=e.trip_id,
                        vendor_id=e.vendor_id,
                        payment_method_id=e.payment_method_id,
                        category_id=e.category_id,
                        payment_method=e.payment_method,
                        notes=e.notes,
                        id=e.id,
                        created_at=parse_timestamp(e.created_at),
                    ),
                ):
                    restored_expenses.add(e.id)

            known_expenses = existing[EntityKind.EXPENSE] | restored_expenses

            for item in line_items:
                if item.id in existing[EntityKind.LINE_ITEM]:
                    result.skipped.line_items += 1
                    continue
                if item.expense_id not in known_expenses:
                    logger.debug("Dropping orphaned line item %s", item.id)
                    continue
                self._restore_one(
                    result,
                    "line_items",
                    False,
                    "Line item",
                    lambda item=item: self.db.create_line_item(
                        item.expense_id,
                        NewLineItem(
                            category=item.category,
                            amount=item.amount,
                            category_id=item.category_id,
                            description=item.description,
                            quantity_gallons=item.quantity_gallons,
                            sort_order=item.sort_order,
                        ),
                        id=item.id,
                        created_at=parse_timestamp(item.created_at),
                    ),
                )

            for e in expenses:
                for receipt in e.receipts:
                    if receipt.id in existing[EntityKind.RECEIPT]:
                        result.skipped.receipts += 1
                        continue
                    if e.id not in known_expenses:
                        continue
                    self._restore_receipt(archive, e.id, receipt, result)

        logger.info(
            "Restore finished: created %s, skipped %s, %d errors",
            result.created.as_dict(),
            result.skipped.as_dict(),
            len(result.errors),
        )
        return result

    def _restore_one(
        self,
        result: RestoreResult,
        kind: str,
        exists: bool,
        label: str,
        insert: Callable[[], str],
    ) -> bool:
        """Insert one record unless its id exists. Returns True if inserted."""
        if exists:
            setattr(result.skipped, kind, getattr(result.skipped, kind) + 1)
            return False
        try:
            insert()
        except Exception as e:
            logger.warning("%s: %s", label, e)
            result.errors.append(f"{label}: {e}")
            return False
        setattr(result.created, kind, getattr(result.created, kind) + 1)
        return True

    def _restore_receipt(
        self,
        archive: zipfile.ZipFile,
        expense_id: str,
        receipt: BackupReceipt,
        result: RestoreResult,
    ) -> None:
        entry = f"{RECEIPTS_DIR}/{receipt.filename}"
        try:
            data = archive.read(entry)
        except KeyError:
            result.errors.append(f"Receipt file not found: {receipt.filename}")
            return

        try:
            storage_path = generate_storage_path(expense_id, receipt.original_filename)
            self.blob_store.upload(storage_path, data, content_type_for(receipt.filename))
            self.db.create_receipt(
                expense_id=expense_id,
                storage_path=storage_path,
                original_filename=receipt.original_filename,
                id=receipt.id,
            )
        except Exception as e:
            logger.warning("Receipt %s: %s", receipt.original_filename, e)
            result.errors.append(f"Receipt {receipt.original_filename}: {e}")
            return
        result.created.receipts += 1

    def _read_manifest(self, archive: zipfile.ZipFile) -> BackupManifest:
        try:
            raw = archive.read(MANIFEST_NAME)
        except KeyError:
            raise ArchiveError(missing_archive_entry(MANIFEST_NAME))
        try:
            manifest = BackupManifest.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise ArchiveError(f"Invalid backup: unreadable {MANIFEST_NAME} ({exc})")

        if manifest.version > BACKUP_VERSION:
            raise BackupVersionError(
                unsupported_backup_version(manifest.version, BACKUP_VERSION)
            )
        return manifest

    def _read_records(
        self,
        archive: zipfile.ZipFile,
        filename: str,
        from_dict: Callable[[dict[str, Any]], R],
    ) -> list[R]:
        """Read one data file; a missing file counts as no records."""
        try:
            raw = archive.read(f"{DATA_DIR}/{filename}")
        except KeyError:
            return []
        try:
            return [from_dict(record) for record in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as exc:
            raise ArchiveError(f"Invalid backup: unreadable {DATA_DIR}/{filename} ({exc})")
