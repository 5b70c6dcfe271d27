"""Abstract blob store interface."""

import re
import time
from abc import ABC, abstractmethod
from typing import Optional

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-]")


class BlobStore(ABC):
    """Abstract storage for receipt binaries, addressed by relative path."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store ``data`` at ``path``, replacing anything already there."""
        pass

    @abstractmethod
    def download(self, path: str) -> Optional[bytes]:
        """Return the bytes at ``path``, or None if nothing is stored there."""
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove ``path``. Missing paths are ignored."""
        pass


def generate_storage_path(expense_id: str, filename: str) -> str:
    """Build a unique storage path for a receipt of an expense.

    Args:
        expense_id: Expense the receipt belongs to
        filename: Original filename; characters outside ``[A-Za-z0-9.-]``
            are replaced with underscores

    Returns:
        Path of the form ``receipts/{expense_id}/{timestamp_ms}-{filename}``
    """
    timestamp = int(time.time() * 1000)
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"receipts/{expense_id}/{timestamp}-{sanitized}"
