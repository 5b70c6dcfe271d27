"""Airplane Manager expense export parser.

The export has one row per expense line item; rows sharing an ``ExpenseID``
belong to the same purchase.
"""

import logging
from typing import Sequence

from hangarledger.domain.import_models import (
    ImportPreviewData,
    ImportSource,
    ParsedExpense,
    ParsedLineItem,
    ParseResult,
    RowIssue,
    Severity,
)
from hangarledger.domain.parsers.base import (
    group_trips,
    looks_like_id,
    no_trip_warning,
    read_csv_rows,
    standalone_warning,
)
from hangarledger.domain.preview import ExistingEntities, build_preview
from hangarledger.utils.amount_parser import parse_amount_lenient, parse_gallons

logger = logging.getLogger(__name__)

COLUMNS = (
    "ExpenseID",
    "ExpenseItemID",
    "DateOccurred",
    "FlightID",
    "TripNumber",
    "TailNumber",
    "VendorID",
    "VendorName",
    "VendorPhone",
    "VendorEmail",
    "CategoryID",
    "Category",
    "CategoryColor",
    "Purchaser",
    "PurchaserID",
    "PaymentMethod",
    "FuelProvider",
    "ICAO",
    "AirportOrLocation",
    "Gallons",
    "Reimbursable",
    "Amount",
    "Paid",
    "Notes",
    "Created",
)


def parse_airplane_manager_csv(csv_content: str) -> ParseResult:
    """Parse and validate an Airplane Manager CSV export.

    Args:
        csv_content: CSV text from the export bundle

    Returns:
        ParseResult with rows, blocking errors and warnings
    """
    rows, errors = read_csv_rows(csv_content, str.strip)
    warnings: list[RowIssue] = []

    for index, row in enumerate(rows):
        row_num = index + 2

        if not row.get("DateOccurred"):
            errors.append(
                RowIssue(row_num, "DateOccurred", "", "Missing date", Severity.ERROR)
            )
        if not row.get("Amount"):
            errors.append(
                RowIssue(row_num, "Amount", "", "Missing amount", Severity.ERROR)
            )

        category = row.get("Category", "")
        if category and looks_like_id(category):
            warnings.append(
                RowIssue(
                    row_num,
                    "Category",
                    category,
                    f"Category appears to be an ID ({category}) instead of a name",
                    Severity.WARNING,
                )
            )
        if not row.get("TripNumber") and not row.get("TailNumber"):
            warnings.append(no_trip_warning(row_num))

    logger.debug(
        "Parsed %d Airplane Manager rows (%d errors, %d warnings)",
        len(rows),
        len(errors),
        len(warnings),
    )
    return ParseResult(rows=tuple(rows), errors=tuple(errors), warnings=tuple(warnings))


def _expense_key(row: dict[str, str]) -> str:
    expense_id = row.get("ExpenseID")
    if expense_id:
        return expense_id
    return f"standalone-{row.get('DateOccurred', '')}-{row.get('VendorName', '')}"


def _line_item(row: dict[str, str]) -> ParsedLineItem:
    category = row.get("Category", "")
    if looks_like_id(category):
        category = "Unknown"
    return ParsedLineItem(
        source_item_id=row.get("ExpenseItemID", ""),
        category=category or "Other",
        category_id=row.get("CategoryID", ""),
        amount=parse_amount_lenient(row.get("Amount")),
        gallons=parse_gallons(row.get("Gallons")),
        description=row.get("Notes", ""),
        icao=row.get("ICAO", ""),
    )


def group_expenses(rows: Sequence[dict[str, str]]) -> list[ParsedExpense]:
    """Assemble one expense per source expense id, in first-seen order."""
    grouped: dict[str, list[dict[str, str]]] = {}
    for row in rows:
        grouped.setdefault(_expense_key(row), []).append(row)

    expenses = []
    for expense_id, expense_rows in grouped.items():
        first = expense_rows[0]
        expenses.append(
            ParsedExpense(
                source_expense_id=expense_id,
                date=first.get("DateOccurred", ""),
                vendor_name=first.get("VendorName") or "Unknown Vendor",
                vendor_id=first.get("VendorID") or None,
                trip_number=first.get("TripNumber", ""),
                trip_flight_id=first.get("FlightID", ""),
                tail_number=first.get("TailNumber", ""),
                payment_method=first.get("PaymentMethod", ""),
                notes=first.get("Notes", ""),
                line_items=tuple(_line_item(row) for row in expense_rows),
            )
        )
    return expenses


def transform_airplane_manager_data(
    rows: Sequence[dict[str, str]], existing: ExistingEntities
) -> ImportPreviewData:
    """Build the import preview from validated Airplane Manager rows."""
    expenses = group_expenses(rows)
    trips, standalone = group_trips(expenses, lambda number: f"Trip {number}")

    warnings = []
    if standalone:
        warnings.append(standalone_warning(len(standalone)))

    return build_preview(
        source=ImportSource.AIRPLANE_MANAGER,
        expenses=expenses,
        trips=trips,
        standalone=standalone,
        rows=rows,
        existing=existing,
        warnings=warnings,
    )
