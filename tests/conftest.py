"""Root pytest configuration for all tests.

Provides deterministic clocks and id factories plus an engine backed by an
in-memory snapshot adapter.
"""

import itertools
import logging

import pytest

from src.document_engine.engine import DocumentEngine
from src.models.store import Store
from src.persistence.snapshot_adapter import MemorySnapshotAdapter
from tests.helpers.clock import StepClock

# Let caplog capture debug records from the engine
logging.getLogger("src").setLevel(logging.DEBUG)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def id_factory():
    """Sequential, readable version ids (v0001, v0002, ...)."""
    counter = itertools.count(1)
    return lambda: f"v{next(counter):04d}"


@pytest.fixture
def memory_adapter() -> MemorySnapshotAdapter:
    return MemorySnapshotAdapter()


@pytest.fixture
def engine(memory_adapter, clock, id_factory) -> DocumentEngine:
    """Engine over an empty store persisted in memory."""
    return DocumentEngine(
        Store(),
        memory_adapter,
        lock_timeout=1.0,
        clock=clock,
        id_factory=id_factory,
    )
