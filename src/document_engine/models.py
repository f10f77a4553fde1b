"""Configuration model for the document engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class StoreConfig:
    """Settings for opening a page store.

    Attributes:
        snapshot_path: Path of the snapshot file
        snapshot_format: 'json' or 'yaml'; None infers it from the file suffix
        lock_timeout: Seconds to wait for the store lock before giving up
        json_indent: Indentation of JSON snapshots (None for compact output)

    Example:
        >>> config = StoreConfig(snapshot_path="wiki/db.json", lock_timeout=5.0)
    """
    snapshot_path: str = ".page-store/db.json"
    snapshot_format: Optional[str] = None
    lock_timeout: float = 30.0
    json_indent: Optional[int] = 2
