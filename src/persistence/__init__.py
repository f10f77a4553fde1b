"""Snapshot persistence for the page store.

This package reads and writes the whole store as a single JSON or YAML
snapshot, guards snapshot ownership with a file lock, and defines the base
exception shared by every page store error.
"""

from .errors import (
    PageStoreError,
    PersistenceError,
    SnapshotFormatError,
    StoreLockedError,
)
from .snapshot_adapter import FileSnapshotAdapter, MemorySnapshotAdapter, infer_format
from .snapshot_codec import decode_store, encode_store
from .store_lock import StoreLock

__all__ = [
    'PageStoreError',
    'PersistenceError',
    'SnapshotFormatError',
    'StoreLockedError',
    'FileSnapshotAdapter',
    'MemorySnapshotAdapter',
    'infer_format',
    'decode_store',
    'encode_store',
    'StoreLock',
]
