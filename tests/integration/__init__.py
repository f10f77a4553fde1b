"""Integration tests for the page store.

These tests run the DocumentEngine against real snapshot files in temporary
directories, covering what the in-memory adapter cannot:
- Atomic snapshot writes and reopen round trips (JSON and YAML)
- Exclusive ownership of a snapshot via the lock file
- Loading snapshots written by the earlier JavaScript tool

Run only these with:
    pytest tests/integration -m integration
"""
