"""Blob storage layer for receipt files."""

from hangarledger.storage.base import BlobStore, generate_storage_path
from hangarledger.storage.local import LocalBlobStore, create_local_blob_store

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "create_local_blob_store",
    "generate_storage_path",
]
