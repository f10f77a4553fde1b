"""Typed exception hierarchy for snapshot persistence errors.

This module defines the base exception for the whole page store and the
errors raised while reading, writing or locking the snapshot file.
All exceptions carry their context as attributes to help with debugging.
"""

from typing import Optional


class PageStoreError(Exception):
    """Base exception for all page store errors.

    Use this to catch any application-level error from the page store.
    """
    pass


class PersistenceError(PageStoreError):
    """Raised when the snapshot cannot be read, serialized or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Snapshot operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class SnapshotFormatError(PersistenceError):
    """Raised when a snapshot file exists but does not hold a valid snapshot."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(file_path, 'parse', reason)


class StoreLockedError(PageStoreError):
    """Raised when the store cannot be locked within the allowed time."""

    def __init__(self, lock_path: str, timeout: float):
        super().__init__(
            f"Timeout acquiring store lock {lock_path} after {timeout}s. "
            f"Another owner may be holding it."
        )
        self.lock_path = lock_path
        self.timeout = timeout
