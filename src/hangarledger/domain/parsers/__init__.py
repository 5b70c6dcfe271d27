"""Source format parsers.

Each source format pairs a ``parse`` step (raw text to validated rows) with a
``transform`` step (rows to the shared preview model). Callers pick the pair
by ``ImportSource`` tag.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from hangarledger.domain.errors import ValidationError
from hangarledger.domain.import_models import ImportPreviewData, ImportSource, ParseResult
from hangarledger.domain.parsers.airplane_manager import (
    parse_airplane_manager_csv,
    transform_airplane_manager_data,
)
from hangarledger.domain.parsers.bundle import parse_receipt_filename, read_bundle
from hangarledger.domain.parsers.template_csv import (
    parse_template_csv,
    transform_template_data,
)
from hangarledger.domain.preview import ExistingEntities


@dataclass(frozen=True)
class SourceFormat:
    source: ImportSource
    parse: Callable[[str], ParseResult]
    transform: Callable[[Sequence[dict[str, str]], ExistingEntities], ImportPreviewData]


SOURCE_FORMATS = {
    ImportSource.AIRPLANE_MANAGER: SourceFormat(
        source=ImportSource.AIRPLANE_MANAGER,
        parse=parse_airplane_manager_csv,
        transform=transform_airplane_manager_data,
    ),
    ImportSource.CSV_TEMPLATE: SourceFormat(
        source=ImportSource.CSV_TEMPLATE,
        parse=parse_template_csv,
        transform=transform_template_data,
    ),
}


def get_source_format(source: ImportSource | str) -> SourceFormat:
    """Return the parser pair for a source tag."""
    try:
        return SOURCE_FORMATS[ImportSource(source)]
    except ValueError:
        raise ValidationError(f"Unknown import source '{source}'")


__all__ = [
    "SOURCE_FORMATS",
    "SourceFormat",
    "get_source_format",
    "parse_airplane_manager_csv",
    "parse_receipt_filename",
    "parse_template_csv",
    "read_bundle",
    "transform_airplane_manager_data",
    "transform_template_data",
]
