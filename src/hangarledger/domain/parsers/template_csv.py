"""First-party CSV template parser.

Columns: date, trip_name, aircraft_tail_number, vendor_name, category_name,
amount, gallons, payment_method, notes. Each row is one expense with a single
line item. Validation is stricter than for Airplane Manager exports: amounts
and gallons that are not numbers are blocking errors.
"""

import re
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
    no_trip_warning,
    read_csv_rows,
    standalone_warning,
)
from hangarledger.domain.preview import ExistingEntities, build_preview
from hangarledger.utils.amount_parser import (
    parse_amount,
    parse_amount_lenient,
    parse_gallons,
    parse_number_prefix,
)

COLUMNS = (
    "date",
    "trip_name",
    "aircraft_tail_number",
    "vendor_name",
    "category_name",
    "amount",
    "gallons",
    "payment_method",
    "notes",
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """Lower-case a header and turn whitespace runs into underscores."""
    return _WHITESPACE.sub("_", header.strip().lower())


def parse_template_csv(csv_content: str) -> ParseResult:
    """Parse and validate a CSV written against the import template."""
    rows, errors = read_csv_rows(csv_content, normalize_header)
    warnings: list[RowIssue] = []

    for index, row in enumerate(rows):
        row_num = index + 2
        date = row.get("date", "")
        amount = row.get("amount", "")
        gallons = row.get("gallons", "")

        if not date:
            errors.append(RowIssue(row_num, "date", "", "Missing date", Severity.ERROR))
        elif not _ISO_DATE.match(date):
            errors.append(
                RowIssue(
                    row_num,
                    "date",
                    date,
                    "Invalid date format (expected YYYY-MM-DD)",
                    Severity.ERROR,
                )
            )

        if not amount:
            errors.append(RowIssue(row_num, "amount", "", "Missing amount", Severity.ERROR))
        else:
            try:
                parse_amount(amount)
            except ValueError:
                errors.append(
                    RowIssue(
                        row_num,
                        "amount",
                        amount,
                        "Invalid amount (must be a number)",
                        Severity.ERROR,
                    )
                )

        if not row.get("vendor_name"):
            warnings.append(
                RowIssue(row_num, "vendor_name", "", "Missing vendor name", Severity.WARNING)
            )
        if not row.get("category_name"):
            warnings.append(
                RowIssue(
                    row_num,
                    "category_name",
                    "",
                    "Missing category name - will use 'Other'",
                    Severity.WARNING,
                )
            )
        if not row.get("trip_name") and not row.get("aircraft_tail_number"):
            warnings.append(no_trip_warning(row_num))

        if gallons and parse_number_prefix(gallons) is None:
            errors.append(
                RowIssue(
                    row_num,
                    "gallons",
                    gallons,
                    "Invalid gallons value (must be a number)",
                    Severity.ERROR,
                )
            )

    return ParseResult(rows=tuple(rows), errors=tuple(errors), warnings=tuple(warnings))


def _expense(index: int, row: dict[str, str]) -> ParsedExpense:
    line_item = ParsedLineItem(
        source_item_id=f"line-{index}",
        category=row.get("category_name") or "Other",
        category_id="",
        amount=parse_amount_lenient(row.get("amount")),
        gallons=parse_gallons(row.get("gallons")),
        description=row.get("notes", ""),
    )
    return ParsedExpense(
        source_expense_id=f"expense-{index}",
        date=row.get("date", ""),
        vendor_name=row.get("vendor_name") or "Unknown Vendor",
        vendor_id=None,
        trip_number=row.get("trip_name", ""),
        trip_flight_id="",
        tail_number=row.get("aircraft_tail_number", ""),
        payment_method=row.get("payment_method", ""),
        notes=row.get("notes", ""),
        line_items=(line_item,),
    )


def transform_template_data(
    rows: Sequence[dict[str, str]], existing: ExistingEntities
) -> ImportPreviewData:
    """Build the import preview from validated template rows."""
    expenses = [_expense(index, row) for index, row in enumerate(rows)]
    trips, standalone = group_trips(expenses, lambda name: name)

    warnings = []
    if standalone:
        warnings.append(standalone_warning(len(standalone)))

    return build_preview(
        source=ImportSource.CSV_TEMPLATE,
        expenses=expenses,
        trips=trips,
        standalone=standalone,
        rows=rows,
        existing=existing,
        warnings=warnings,
    )
