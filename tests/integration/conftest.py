"""Pytest configuration and fixtures for integration tests.

Integration tests exercise the engine against real snapshot files in a
temporary directory; nothing leaves that directory.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from src.document_engine.models import StoreConfig


@pytest.fixture(scope="function")
def temp_test_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    temp_dir = Path(tempfile.mkdtemp(prefix="page_store_test_"))
    yield temp_dir
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


@pytest.fixture(scope="function")
def store_config(temp_test_dir: Path) -> StoreConfig:
    """StoreConfig pointing at a JSON snapshot in the temp directory."""
    return StoreConfig(
        snapshot_path=str(temp_test_dir / "store" / "db.json"),
        lock_timeout=0.5,
    )
