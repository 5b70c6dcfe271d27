"""Airplane Manager export bundles and receipt filename matching.

A bundle is a ZIP holding one CSV export plus receipt files named
``"2025-01-05 N491JL 322077 KAUS UploadID-1187369.pdf"``: date, tail number,
trip number and airport, then anything.
"""

import io
import logging
import posixpath
import re
import zipfile
from dataclasses import dataclass
from typing import Optional

from hangarledger.domain.errors import ArchiveError, missing_archive_entry
from hangarledger.domain.import_models import ReceiptFile, ReceiptKey

logger = logging.getLogger(__name__)

RECEIPT_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

_BUNDLE_RECEIPT_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")

_RECEIPT_FILENAME = re.compile(
    r"^([0-9]{4}-[0-9]{2}-[0-9]{2})\s+([A-Za-z0-9_]+)\s+([0-9]+)\s+([A-Za-z0-9_]*)"
)


@dataclass(frozen=True)
class ImportBundle:
    csv_text: str
    receipts: tuple[ReceiptFile, ...]


def content_type_for(filename: str) -> str:
    """Return the MIME type for a receipt filename."""
    ext = posixpath.splitext(filename)[1].lower()
    return RECEIPT_CONTENT_TYPES.get(ext, "application/octet-stream")


def read_bundle(data: bytes) -> ImportBundle:
    """Extract the CSV export and receipt files from a bundle.

    Raises:
        ArchiveError: If the data is not a ZIP or holds no CSV file
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Invalid ZIP file: {exc}")

    csv_text: Optional[str] = None
    receipts = []
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            lower_name = info.filename.lower()
            if lower_name.endswith(".csv"):
                # A later CSV replaces an earlier one
                csv_text = archive.read(info).decode("utf-8-sig")
            elif lower_name.endswith(_BUNDLE_RECEIPT_EXTENSIONS):
                receipts.append(
                    ReceiptFile(
                        filename=info.filename,
                        data=archive.read(info),
                        content_type=content_type_for(info.filename),
                    )
                )

    if csv_text is None:
        raise ArchiveError(missing_archive_entry("CSV file"))

    logger.debug("Read bundle with %d receipt files", len(receipts))
    return ImportBundle(csv_text=csv_text, receipts=tuple(receipts))


def parse_receipt_filename(filename: str) -> Optional[ReceiptKey]:
    """Recover (date, tail number, trip number, icao) from a receipt filename.

    Returns None when the name does not follow the convention.
    """
    basename = posixpath.basename(filename.replace("\\", "/"))
    match = _RECEIPT_FILENAME.match(basename)
    if match is None:
        return None
    date, tail_number, trip_number, icao = match.groups()
    return ReceiptKey(
        date=date, tail_number=tail_number, trip_number=trip_number, icao=icao or ""
    )
