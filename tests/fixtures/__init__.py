"""Test fixtures for page store tests.

This module provides sample snapshot documents covering the current
format, the legacy epoch-millisecond format and malformed inputs.
"""

from .sample_snapshots import (
    SNAPSHOT_DUPLICATE_VERSION_IDS,
    SNAPSHOT_EMPTY,
    SNAPSHOT_INVALID_JSON,
    SNAPSHOT_LEGACY_EPOCH,
    SNAPSHOT_TWO_PAGES,
)

__all__ = [
    "SNAPSHOT_DUPLICATE_VERSION_IDS",
    "SNAPSHOT_EMPTY",
    "SNAPSHOT_INVALID_JSON",
    "SNAPSHOT_LEGACY_EPOCH",
    "SNAPSHOT_TWO_PAGES",
]
