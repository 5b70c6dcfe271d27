"""Filesystem-backed blob store."""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Optional

from hangarledger.storage.base import BlobStore

logger = logging.getLogger(__name__)

STORAGE_DIR_ENV = "HANGARLEDGER_STORAGE_DIR"
CONTENT_TYPE_SUFFIX = ".content-type"


class LocalBlobStore(BlobStore):
    """Store blobs as files below a root directory.

    The content type of each blob is kept in a sidecar file next to it.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Invalid storage path: {path!r}")
        return self.root.joinpath(*relative.parts)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        target.with_name(target.name + CONTENT_TYPE_SUFFIX).write_text(content_type)
        logger.debug("Stored %d bytes at %s", len(data), path)

    def download(self, path: str) -> Optional[bytes]:
        target = self._resolve(path)
        if not target.is_file():
            return None
        return target.read_bytes()

    def content_type(self, path: str) -> Optional[str]:
        """Return the content type recorded for ``path``, if any."""
        sidecar = self._resolve(path + CONTENT_TYPE_SUFFIX)
        if not sidecar.is_file():
            return None
        return sidecar.read_text()

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        target.unlink(missing_ok=True)
        target.with_name(target.name + CONTENT_TYPE_SUFFIX).unlink(missing_ok=True)


def create_local_blob_store(storage_dir: Optional[str] = None) -> LocalBlobStore:
    """Create a filesystem blob store.

    Args:
        storage_dir: Root directory for blobs. If None, checks
            HANGARLEDGER_STORAGE_DIR environment variable, then defaults to
            ~/.hangarledger/blobs

    Returns:
        LocalBlobStore rooted at the chosen directory
    """
    if storage_dir is None:
        storage_dir = os.environ.get(STORAGE_DIR_ENV)

    if storage_dir is None:
        storage_dir = str(Path.home() / ".hangarledger" / "blobs")

    root = Path(storage_dir)
    root.mkdir(parents=True, exist_ok=True)
    return LocalBlobStore(root)
