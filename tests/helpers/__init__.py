"""Test helper modules for page store testing.

This package provides utilities shared by unit and integration tests:
- clock: Deterministic clock for page and version timestamps
- assertion_helpers: Field-by-field store and page comparison
"""

from .assertion_helpers import assert_pages_equivalent, assert_stores_equivalent
from .clock import BASE_TIME, StepClock

__all__ = [
    'assert_pages_equivalent',
    'assert_stores_equivalent',
    'BASE_TIME',
    'StepClock',
]
