"""Helpers shared by every source format.

Parsers differ only in column names and validation rules; reading CSV text
and grouping expenses into trips are common.
"""

import csv
import io
import re
from typing import Callable, Iterable

from hangarledger.domain.import_models import (
    ParsedExpense,
    ParsedTrip,
    RowIssue,
    Severity,
)

_NUMERIC_ID = re.compile(r"^\d+$")
_EXTRA_FIELDS = "__extra__"


def looks_like_id(value: str) -> bool:
    """Return True when a category value is a bare numeric id."""
    return bool(_NUMERIC_ID.match(value.strip()))


def read_csv_rows(
    text: str, normalize_header: Callable[[str], str]
) -> tuple[list[dict[str, str]], list[RowIssue]]:
    """Read header-keyed rows, reporting malformed rows as errors.

    Missing cells are returned as empty strings. Blank lines are skipped.

    Args:
        text: Raw CSV content
        normalize_header: Applied to each header cell

    Returns:
        Tuple of (rows, codec errors)
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.DictReader(io.StringIO(text), restkey=_EXTRA_FIELDS, restval=None)
    if reader.fieldnames is None:
        return [], []
    reader.fieldnames = [normalize_header(h) for h in reader.fieldnames]
    expected = len(reader.fieldnames)

    rows: list[dict[str, str]] = []
    issues: list[RowIssue] = []
    try:
        for index, raw in enumerate(reader):
            row_num = index + 2
            extra = raw.pop(_EXTRA_FIELDS, None)
            if extra:
                issues.append(
                    RowIssue(
                        row=row_num,
                        field="csv",
                        value="",
                        message=(
                            f"Too many fields: expected {expected} fields "
                            f"but parsed {expected + len(extra)}"
                        ),
                        severity=Severity.ERROR,
                    )
                )
            present = sum(1 for v in raw.values() if v is not None)
            if present < expected:
                issues.append(
                    RowIssue(
                        row=row_num,
                        field="csv",
                        value="",
                        message=(
                            f"Too few fields: expected {expected} fields "
                            f"but parsed {present}"
                        ),
                        severity=Severity.ERROR,
                    )
                )
            rows.append({key: value or "" for key, value in raw.items()})
    except csv.Error as exc:
        issues.append(
            RowIssue(
                row=reader.line_num,
                field="csv",
                value="",
                message=str(exc),
                severity=Severity.ERROR,
            )
        )

    return rows, issues


def no_trip_warning(row_num: int) -> RowIssue:
    return RowIssue(
        row=row_num,
        field="trip",
        value="",
        message="No trip or aircraft information - will be imported as standalone expense",
        severity=Severity.WARNING,
    )


def group_trips(
    expenses: Iterable[ParsedExpense], trip_name: Callable[[str], str]
) -> tuple[list[ParsedTrip], list[ParsedExpense]]:
    """Partition expenses into trips by trip number.

    Expenses without a trip number are returned separately. Trip date ranges
    use string comparison, so dates must be zero-padded ``YYYY-MM-DD``.

    Args:
        expenses: Assembled expenses in source order
        trip_name: Builds the display name from a trip number

    Returns:
        Tuple of (trips in first-seen order, standalone expenses)
    """
    buckets: dict[str, list[ParsedExpense]] = {}
    standalone: list[ParsedExpense] = []
    for expense in expenses:
        if expense.trip_number:
            buckets.setdefault(expense.trip_number, []).append(expense)
        else:
            standalone.append(expense)

    trips = []
    for trip_number, trip_expenses in buckets.items():
        dates = sorted(e.date for e in trip_expenses)
        tail_numbers = [e.tail_number for e in trip_expenses if e.tail_number]
        flight_ids = dict.fromkeys(e.trip_flight_id for e in trip_expenses if e.trip_flight_id)
        trips.append(
            ParsedTrip(
                trip_number=trip_number,
                name=trip_name(trip_number),
                tail_number=tail_numbers[0] if tail_numbers else "",
                start_date=dates[0] if dates else "",
                end_date=dates[-1] if dates else "",
                expenses=tuple(trip_expenses),
                flight_ids=tuple(flight_ids),
            )
        )
    return trips, standalone


def standalone_warning(count: int) -> str:
    return (
        f"{count} expense{'s have' if count != 1 else ' has'} no trip information "
        "and will be imported without a trip association"
    )
