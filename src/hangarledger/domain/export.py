"""Expense export in the first-party CSV template layout."""

import csv
import io
import logging
from decimal import Decimal
from typing import Optional

from hangarledger.database.base import Database
from hangarledger.domain.entities import Trip

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    "date",
    "trip_name",
    "trip_start_date",
    "trip_end_date",
    "aircraft_tail_number",
    "vendor_name",
    "category_name",
    "amount",
    "gallons",
    "payment_method",
    "notes",
)


def _number_text(value: Optional[Decimal]) -> str:
    if value is None:
        return ""
    return format(value.normalize(), "f")


def export_expenses_to_csv(db: Database) -> str:
    """Export every non-deleted expense, one row per line item.

    Expenses are ordered newest first and line items by their sort order.
    An expense without line items yields a single row carrying its own
    category and amount. The result can be imported again as a
    ``csv_template`` file.

    Args:
        db: Database instance

    Returns:
        CSV text including the header row
    """
    trips: dict[str, Optional[Trip]] = {}

    def trip_for(trip_id: Optional[str]) -> Optional[Trip]:
        if trip_id is None:
            return None
        if trip_id not in trips:
            trips[trip_id] = db.get_trip(trip_id)
        return trips[trip_id]

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)

    row_count = 0
    for expense in db.list_expenses():
        trip = trip_for(expense.trip_id)
        trip_columns = [
            trip.name if trip else "",
            trip.start_date if trip else "",
            (trip.end_date or "") if trip else "",
            trip.aircraft if trip else "",
        ]
        payment_method = expense.payment_method or ""
        line_items = db.list_line_items(expense.id)

        if not line_items:
            writer.writerow(
                [
                    expense.date,
                    *trip_columns,
                    expense.vendor,
                    expense.category,
                    _number_text(expense.amount),
                    "",
                    payment_method,
                    expense.notes or "",
                ]
            )
            row_count += 1
            continue

        for item in line_items:
            writer.writerow(
                [
                    expense.date,
                    *trip_columns,
                    expense.vendor,
                    item.category,
                    _number_text(item.amount),
                    _number_text(item.quantity_gallons),
                    payment_method,
                    item.description or expense.notes or "",
                ]
            )
            row_count += 1

    logger.info("Exported %d expense rows", row_count)
    return output.getvalue()
