"""Import pipeline: Parse -> Preview -> Map -> Execute.

An ``ImportSession`` is an immutable snapshot of one import in progress.
Every stage function takes a session plus the user's input for that stage and
returns a new session; nothing is shared between imports.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

from hangarledger.domain.errors import ValidationError, blocking_parse_errors
from hangarledger.domain.import_executor import ImportExecutor
from hangarledger.domain.import_models import (
    DuplicateTrip,
    ImportPreviewData,
    ImportResult,
    ImportSource,
    ParseResult,
    ReceiptFile,
)
from hangarledger.domain.mapping import (
    ImportMappings,
    default_mappings,
    load_mapping_overrides,
)
from hangarledger.domain.parsers import get_source_format, read_bundle
from hangarledger.domain.preview import ExistingEntities, detect_duplicate_trips

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSession:
    source: ImportSource
    parse_result: ParseResult
    receipts: tuple[ReceiptFile, ...] = ()
    preview: Optional[ImportPreviewData] = None
    duplicate_trips: tuple[DuplicateTrip, ...] = ()
    mappings: Optional[ImportMappings] = None
    skip_duplicate_trip_names: frozenset[str] = frozenset()
    result: Optional[ImportResult] = None


def _require_preview(session: ImportSession) -> tuple[ImportPreviewData, ImportMappings]:
    if session.preview is None or session.mappings is None:
        raise ValidationError("Import has not been previewed yet")
    return session.preview, session.mappings


def start_session(
    source: ImportSource | str, content: str, receipts: Iterable[ReceiptFile] = ()
) -> ImportSession:
    """Parse source text and open a session.

    Args:
        source: Source format tag
        content: CSV text
        receipts: Receipt files supplied with the data

    Returns:
        Session holding the parse result
    """
    source_format = get_source_format(source)
    parse_result = source_format.parse(content)
    logger.info(
        "Parsed %d rows (%d errors, %d warnings)",
        len(parse_result.rows),
        len(parse_result.errors),
        len(parse_result.warnings),
    )
    return ImportSession(
        source=source_format.source,
        parse_result=parse_result,
        receipts=tuple(receipts),
    )


def start_bundle_session(bundle_data: bytes) -> ImportSession:
    """Open a session from an Airplane Manager ZIP bundle."""
    bundle = read_bundle(bundle_data)
    return start_session(ImportSource.AIRPLANE_MANAGER, bundle.csv_text, bundle.receipts)


def preview_session(session: ImportSession, existing: ExistingEntities) -> ImportSession:
    """Build the preview, duplicate trips and default mappings.

    Raises:
        ValidationError: If the parse stage found blocking errors
    """
    parse_result = session.parse_result
    if parse_result.has_blocking_errors:
        raise ValidationError(blocking_parse_errors(len(parse_result.errors)))

    preview = get_source_format(session.source).transform(parse_result.rows, existing)
    preview = replace(
        preview,
        warnings=tuple(str(issue) for issue in parse_result.warnings) + preview.warnings,
        receipt_count=len(session.receipts),
    )
    duplicates = detect_duplicate_trips(preview.trips, existing.trips)
    if duplicates:
        logger.info("Found %d trips that already exist", len(duplicates))

    return replace(
        session,
        preview=preview,
        duplicate_trips=tuple(duplicates),
        mappings=default_mappings(preview),
    )


def map_session(session: ImportSession, overrides: dict[str, Any]) -> ImportSession:
    """Apply user mapping overrides on top of the current mappings."""
    _, mappings = _require_preview(session)
    return replace(session, mappings=load_mapping_overrides(mappings, overrides))


def skip_duplicates(session: ImportSession, names: Iterable[str]) -> ImportSession:
    """Choose which import trip names to leave out."""
    _require_preview(session)
    return replace(session, skip_duplicate_trip_names=frozenset(names))


def execute_session(session: ImportSession, executor: ImportExecutor) -> ImportSession:
    """Run the import and return the session carrying its result."""
    preview, mappings = _require_preview(session)
    result = executor.execute(
        source=session.source,
        trips=preview.trips_for_import(),
        mappings=mappings,
        receipts=session.receipts,
        skip_duplicate_trip_names=session.skip_duplicate_trip_names,
    )
    return replace(session, result=result)
