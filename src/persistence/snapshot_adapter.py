"""Snapshot persistence for the page store.

This module provides the adapters that read and write the entire store as
one serialized snapshot. There is no write buffering: every persist call
rewrites the whole snapshot, which is fine for low write volumes but is the
scaling limit of this design.

Two adapters share the same load()/persist() contract:
- FileSnapshotAdapter: JSON or YAML file on disk, written atomically
- MemorySnapshotAdapter: serialized copy held in memory (tests, embedding)
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.models.store import Store
from src.persistence.errors import PersistenceError, SnapshotFormatError
from src.persistence.snapshot_codec import decode_store, encode_store

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('json', 'yaml')


def infer_format(snapshot_path: str) -> str:
    """Pick the snapshot format from the file suffix (default json)."""
    suffix = Path(snapshot_path).suffix.lower()
    if suffix in ('.yaml', '.yml'):
        return 'yaml'
    return 'json'


class FileSnapshotAdapter:
    """Reads and writes the store snapshot file.

    A missing or empty snapshot file is treated as a fresh, empty store so
    that the first run never fails. Writes go to a temporary file in the
    snapshot's directory and are moved over the target only after they
    have been flushed to disk, so a failed persist never leaves a partial
    snapshot behind.

    Example:
        >>> adapter = FileSnapshotAdapter(".page-store/db.json")
        >>> store = adapter.load()
        >>> adapter.persist(store)
    """

    def __init__(
        self,
        snapshot_path: str,
        snapshot_format: Optional[str] = None,
        json_indent: Optional[int] = 2,
    ):
        """Initialize the adapter.

        Args:
            snapshot_path: Path of the snapshot file
            snapshot_format: 'json' or 'yaml' (inferred from suffix if None)
            json_indent: Indentation for JSON output (None for compact)

        Raises:
            PersistenceError: If the format is not supported
        """
        self.snapshot_path = str(snapshot_path)
        self.snapshot_format = snapshot_format or infer_format(self.snapshot_path)
        if self.snapshot_format not in SUPPORTED_FORMATS:
            raise PersistenceError(
                self.snapshot_path,
                'configure',
                f"Unsupported snapshot format '{self.snapshot_format}', "
                f"expected one of {', '.join(SUPPORTED_FORMATS)}"
            )
        self.json_indent = json_indent

    def load(self) -> Store:
        """Load the store from the snapshot file.

        Returns:
            Store parsed from the snapshot, or an empty Store if none exists

        Raises:
            PersistenceError: If the file exists but cannot be read
            SnapshotFormatError: If the file content is not a valid snapshot
        """
        try:
            with open(self.snapshot_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.snapshot_path}, starting with an empty store")
            return Store()
        except PermissionError as e:
            raise PersistenceError(self.snapshot_path, 'read', 'Permission denied') from e
        except OSError as e:
            raise PersistenceError(self.snapshot_path, 'read', str(e)) from e
        except UnicodeDecodeError as e:
            raise SnapshotFormatError(self.snapshot_path, f"Snapshot is not valid UTF-8: {e}") from e

        if not content.strip():
            logger.info(f"Snapshot {self.snapshot_path} is empty, starting with an empty store")
            return Store()

        data = self._deserialize(content)
        if data is None:
            return Store()

        store = decode_store(data, self.snapshot_path)
        logger.debug(f"Loaded {len(store)} page(s) from {self.snapshot_path}")
        return store

    def persist(self, store: Store) -> None:
        """Write the complete store as one atomic snapshot.

        Args:
            store: Store to persist

        Raises:
            PersistenceError: If serialization or any filesystem step fails
        """
        payload = self._serialize(encode_store(store))

        snapshot_dir = os.path.dirname(os.path.abspath(self.snapshot_path))
        try:
            os.makedirs(snapshot_dir, exist_ok=True)
        except Exception as e:
            raise PersistenceError(snapshot_dir, 'create_directory', str(e)) from e

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=f".{os.path.basename(self.snapshot_path)}.",
                suffix='.tmp',
                dir=snapshot_dir,
            )
            with os.fdopen(fd, 'wb') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.snapshot_path)
            temp_path = None
        except PermissionError as e:
            logger.error(f"Permission denied writing snapshot {self.snapshot_path}")
            raise PersistenceError(self.snapshot_path, 'write', 'Permission denied') from e
        except OSError as e:
            logger.error(f"Failed to write snapshot {self.snapshot_path}: {e}")
            raise PersistenceError(self.snapshot_path, 'write', str(e)) from e
        finally:
            if temp_path is not None:
                self._remove_temp_file(temp_path)

        logger.debug(f"Persisted {len(store)} page(s) to {self.snapshot_path}")

    def _serialize(self, data: Dict[str, Any]) -> bytes:
        # Encode here so unstorable text fails before any file is created
        try:
            if self.snapshot_format == 'yaml':
                text = yaml.safe_dump(
                    data,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False
                )
            else:
                text = json.dumps(data, indent=self.json_indent, ensure_ascii=False)
            return text.encode('utf-8')
        except (TypeError, ValueError, yaml.YAMLError) as e:
            raise PersistenceError(self.snapshot_path, 'serialize', str(e)) from e

    def _deserialize(self, content: str) -> Any:
        try:
            if self.snapshot_format == 'yaml':
                return yaml.safe_load(content)
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise SnapshotFormatError(self.snapshot_path, f"Invalid JSON syntax: {e}") from e
        except yaml.YAMLError as e:
            raise SnapshotFormatError(self.snapshot_path, f"Invalid YAML syntax: {e}") from e

    def _remove_temp_file(self, temp_path: str) -> None:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e:
            logger.warning(f"Failed to remove temp file {temp_path}: {e}")


class MemorySnapshotAdapter:
    """Keeps the snapshot in memory instead of on disk.

    The snapshot is stored in its encoded form, so a loaded Store never
    shares objects with the Store that was persisted.

    Attributes:
        snapshot: Last persisted snapshot dictionary (None before first persist)
        persist_count: Number of successful persists
        fail_next_persist: If set, the next persist raises PersistenceError
    """

    location = '<memory>'

    def __init__(self, snapshot: Optional[Dict[str, Any]] = None):
        self.snapshot = snapshot
        self.persist_count = 0
        self.fail_next_persist: Optional[str] = None

    def load(self) -> Store:
        if self.snapshot is None:
            return Store()
        return decode_store(self.snapshot, self.location)

    def persist(self, store: Store) -> None:
        if self.fail_next_persist:
            reason = self.fail_next_persist
            self.fail_next_persist = None
            raise PersistenceError(self.location, 'write', reason)
        # Round-trip through JSON to match what a file adapter would keep
        self.snapshot = json.loads(json.dumps(encode_store(store)))
        self.persist_count += 1
