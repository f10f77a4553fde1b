"""Exclusive ownership lock for a snapshot file.

A snapshot file is owned by exactly one running engine. StoreLock takes an
advisory fcntl lock on a sibling ``<snapshot>.lock`` file and holds it
until released, so a second engine pointed at the same snapshot fails fast
instead of silently overwriting the first one's writes.
"""

import logging
import os
import time
from typing import Optional

# Import fcntl for POSIX file locking (not available on Windows)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

from src.persistence.errors import PersistenceError, StoreLockedError

logger = logging.getLogger(__name__)


class StoreLock:
    """Advisory lock guarding one snapshot file.

    Example:
        >>> with StoreLock(".page-store/db.json", timeout=5.0):
        ...     # exclusive owner of the snapshot here
        ...     pass
    """

    POLL_INTERVAL = 0.1

    def __init__(self, snapshot_path: str, timeout: float = 30.0):
        """Initialize the lock.

        Args:
            snapshot_path: Path of the snapshot file to guard
            timeout: Maximum time to wait for acquisition (seconds)
        """
        self.lock_path = f"{snapshot_path}.lock"
        self.timeout = timeout
        self._lock_file = None

    @property
    def is_held(self) -> bool:
        return self._lock_file is not None

    def acquire(self) -> None:
        """Acquire the lock, polling until the timeout expires.

        Raises:
            StoreLockedError: If another owner holds the lock past the timeout
            PersistenceError: If the lock file cannot be opened
        """
        if self._lock_file is not None:
            return

        lock_dir = os.path.dirname(os.path.abspath(self.lock_path))
        try:
            os.makedirs(lock_dir, exist_ok=True)
            lock_file = open(self.lock_path, 'a')
        except OSError as e:
            raise PersistenceError(self.lock_path, 'lock', str(e)) from e

        if not HAS_FCNTL:
            logger.warning(
                "File locking not available on this platform. "
                "Two engines on one snapshot may overwrite each other."
            )
            self._lock_file = lock_file
            return

        logger.debug(f"Acquiring exclusive lock {self.lock_path}")
        start_time = time.monotonic()
        while True:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError:
                if time.monotonic() - start_time > self.timeout:
                    lock_file.close()
                    raise StoreLockedError(self.lock_path, self.timeout)
                time.sleep(self.POLL_INTERVAL)

        self._lock_file = lock_file
        logger.debug(f"Store lock acquired: {self.lock_path}")

    def release(self) -> None:
        """Release the lock. Releasing an unheld lock is a no-op."""
        lock_file = self._lock_file
        if lock_file is None:
            return

        if HAS_FCNTL:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                logger.debug(f"Store lock released: {self.lock_path}")
            except OSError as e:
                logger.warning(f"Failed to release lock {self.lock_path}: {e}")

        lock_file.close()
        self._lock_file = None

    def __enter__(self) -> 'StoreLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.release()
        return None
