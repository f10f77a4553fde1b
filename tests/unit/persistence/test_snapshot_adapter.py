"""Unit tests for persistence.snapshot_adapter module."""

import json
import os
from unittest.mock import patch

import pytest
import yaml

from src.models.page import ContentVersion, Page
from src.models.store import Store
from src.persistence.errors import PersistenceError, SnapshotFormatError
from src.persistence.snapshot_adapter import (
    FileSnapshotAdapter,
    MemorySnapshotAdapter,
    infer_format,
)
from tests.fixtures.sample_snapshots import SNAPSHOT_INVALID_JSON, SNAPSHOT_TWO_PAGES
from tests.helpers.assertion_helpers import assert_stores_equivalent
from tests.helpers.clock import BASE_TIME


@pytest.fixture
def sample_store():
    return Store(pages={
        "home": Page(
            slug="home",
            title="Home",
            date_created=BASE_TIME,
            tags=["intro"],
            content_versions=[
                ContentVersion(id="a", date_created=BASE_TIME, content="A", comment="c1"),
                ContentVersion(id="b", date_created=BASE_TIME, content="B"),
            ],
        )
    })


class TestInferFormat:
    """Test cases for infer_format()."""

    @pytest.mark.parametrize("path, expected", [
        ("db.json", "json"),
        ("db.yaml", "yaml"),
        ("db.YML", "yaml"),
        ("db", "json"),
    ])
    def test_suffixes(self, path, expected):
        assert infer_format(path) == expected

    def test_unsupported_format_rejected(self, tmp_path):
        with pytest.raises(PersistenceError) as exc_info:
            FileSnapshotAdapter(str(tmp_path / "db.json"), snapshot_format="xml")

        assert exc_info.value.operation == "configure"
        assert "xml" in str(exc_info.value)


class TestFileSnapshotAdapterLoad:
    """Test cases for FileSnapshotAdapter.load() method."""

    def test_missing_file_is_empty_store(self, tmp_path):
        """First run without a snapshot does not fail."""
        adapter = FileSnapshotAdapter(str(tmp_path / "db.json"))

        store = adapter.load()

        assert isinstance(store, Store)
        assert len(store) == 0

    def test_whitespace_file_is_empty_store(self, tmp_path):
        snapshot = tmp_path / "db.json"
        snapshot.write_text("  \n\t")

        assert len(FileSnapshotAdapter(str(snapshot)).load()) == 0

    def test_yaml_null_document_is_empty_store(self, tmp_path):
        snapshot = tmp_path / "db.yaml"
        snapshot.write_text("~\n")

        assert len(FileSnapshotAdapter(str(snapshot)).load()) == 0

    def test_loads_json_snapshot(self, tmp_path):
        snapshot = tmp_path / "db.json"
        snapshot.write_text(json.dumps(SNAPSHOT_TWO_PAGES))

        store = FileSnapshotAdapter(str(snapshot)).load()

        assert store.slugs() == ["about", "home"]

    def test_invalid_json_raises_format_error(self, tmp_path):
        snapshot = tmp_path / "db.json"
        snapshot.write_text(SNAPSHOT_INVALID_JSON)

        with pytest.raises(SnapshotFormatError) as exc_info:
            FileSnapshotAdapter(str(snapshot)).load()

        assert "Invalid JSON syntax" in str(exc_info.value)
        assert exc_info.value.file_path == str(snapshot)

    def test_invalid_yaml_raises_format_error(self, tmp_path):
        snapshot = tmp_path / "db.yaml"
        snapshot.write_text("pages: [unclosed\n")

        with pytest.raises(SnapshotFormatError) as exc_info:
            FileSnapshotAdapter(str(snapshot)).load()

        assert "Invalid YAML syntax" in str(exc_info.value)

    def test_directory_path_raises_persistence_error(self, tmp_path):
        """A directory in place of the snapshot cannot be read."""
        snapshot_dir = tmp_path / "db.json"
        snapshot_dir.mkdir()

        with pytest.raises(PersistenceError) as exc_info:
            FileSnapshotAdapter(str(snapshot_dir)).load()

        assert exc_info.value.operation == "read"

    def test_non_utf8_content_raises_format_error(self, tmp_path):
        """Binary garbage is reported as a format problem."""
        snapshot = tmp_path / "db.json"
        snapshot.write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(SnapshotFormatError) as exc_info:
            FileSnapshotAdapter(str(snapshot)).load()

        assert "UTF-8" in str(exc_info.value)


class TestFileSnapshotAdapterPersist:
    """Test cases for FileSnapshotAdapter.persist() method."""

    def test_writes_json_snapshot(self, tmp_path, sample_store):
        snapshot = tmp_path / "db.json"

        FileSnapshotAdapter(str(snapshot)).persist(sample_store)

        data = json.loads(snapshot.read_text(encoding="utf-8"))
        assert list(data) == ["pages"]
        assert data["pages"]["home"]["contentVersions"][1]["content"] == "B"

    def test_writes_yaml_snapshot(self, tmp_path, sample_store):
        snapshot = tmp_path / "db.yaml"

        FileSnapshotAdapter(str(snapshot)).persist(sample_store)

        data = yaml.safe_load(snapshot.read_text(encoding="utf-8"))
        assert data["pages"]["home"]["title"] == "Home"
        assert data["pages"]["home"]["dateCreated"] == "2024-01-15T10:30:00+00:00"

    @pytest.mark.parametrize("name", ["db.json", "db.yaml"])
    def test_persist_then_load(self, tmp_path, sample_store, name):
        adapter = FileSnapshotAdapter(str(tmp_path / name))

        adapter.persist(sample_store)

        assert_stores_equivalent(adapter.load(), sample_store)

    def test_creates_missing_directories(self, tmp_path, sample_store):
        snapshot = tmp_path / "a" / "b" / "db.json"

        FileSnapshotAdapter(str(snapshot)).persist(sample_store)

        assert snapshot.exists()

    def test_replaces_previous_snapshot(self, tmp_path, sample_store):
        adapter = FileSnapshotAdapter(str(tmp_path / "db.json"))
        adapter.persist(sample_store)

        adapter.persist(Store())

        assert len(adapter.load()) == 0

    def test_unicode_is_kept(self, tmp_path):
        store = Store(pages={
            "cafe": Page(
                slug="cafe",
                title="Café ☕",
                date_created=BASE_TIME,
                content_versions=[ContentVersion(id="a", date_created=BASE_TIME, content="日本語")],
            )
        })
        adapter = FileSnapshotAdapter(str(tmp_path / "db.json"))

        adapter.persist(store)

        assert "Café ☕" in (tmp_path / "db.json").read_text(encoding="utf-8")
        assert adapter.load().pages["cafe"].content_versions[0].content == "日本語"

    def test_unencodable_text_fails_before_writing(self, tmp_path, sample_store):
        """Text that is not valid UTF-8 is a typed serialize error."""
        snapshot = tmp_path / "db.json"
        adapter = FileSnapshotAdapter(str(snapshot))
        adapter.persist(sample_store)
        before = snapshot.read_text(encoding="utf-8")
        sample_store.pages["home"].content_versions.append(
            ContentVersion(id="c", date_created=BASE_TIME, content="bad \ud800 text")
        )

        with pytest.raises(PersistenceError) as exc_info:
            adapter.persist(sample_store)

        assert exc_info.value.operation == "serialize"
        assert snapshot.read_text(encoding="utf-8") == before
        assert sorted(p.name for p in tmp_path.iterdir()) == ["db.json"]

    def test_no_temp_files_left_behind(self, tmp_path, sample_store):
        FileSnapshotAdapter(str(tmp_path / "db.json")).persist(sample_store)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["db.json"]

    def test_failed_replace_keeps_old_snapshot(self, tmp_path, sample_store):
        """A failing final move leaves the previous snapshot and no temp file."""
        snapshot = tmp_path / "db.json"
        adapter = FileSnapshotAdapter(str(snapshot))
        adapter.persist(sample_store)
        before = snapshot.read_text(encoding="utf-8")

        with patch("src.persistence.snapshot_adapter.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError) as exc_info:
                adapter.persist(Store())

        assert exc_info.value.operation == "write"
        assert "disk full" in str(exc_info.value)
        assert snapshot.read_text(encoding="utf-8") == before
        assert sorted(p.name for p in tmp_path.iterdir()) == ["db.json"]

    def test_permission_denied(self, tmp_path, sample_store):
        snapshot = tmp_path / "db.json"

        with patch("src.persistence.snapshot_adapter.tempfile.mkstemp", side_effect=PermissionError("denied")):
            with pytest.raises(PersistenceError) as exc_info:
                FileSnapshotAdapter(str(snapshot)).persist(sample_store)

        assert "Permission denied" in str(exc_info.value)
        assert not snapshot.exists()

    def test_unwritable_directory(self, tmp_path, sample_store):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(PersistenceError) as exc_info:
            FileSnapshotAdapter(str(blocker / "db.json")).persist(sample_store)

        assert exc_info.value.operation == "create_directory"

    def test_compact_json(self, tmp_path, sample_store):
        snapshot = tmp_path / "db.json"

        FileSnapshotAdapter(str(snapshot), json_indent=None).persist(sample_store)

        assert "\n" not in snapshot.read_text(encoding="utf-8")


class TestMemorySnapshotAdapter:
    """Test cases for MemorySnapshotAdapter."""

    def test_load_before_persist_is_empty(self):
        assert len(MemorySnapshotAdapter().load()) == 0

    def test_loaded_store_is_independent(self, sample_store):
        """Loading never returns objects shared with the persisted store."""
        adapter = MemorySnapshotAdapter()
        adapter.persist(sample_store)

        loaded = adapter.load()
        loaded.pages["home"].title = "Changed"

        assert sample_store.pages["home"].title == "Home"
        assert adapter.load().pages["home"].title == "Home"
        assert_stores_equivalent(adapter.load(), sample_store)

    def test_fail_next_persist_once(self, sample_store):
        adapter = MemorySnapshotAdapter()
        adapter.fail_next_persist = "disk full"

        with pytest.raises(PersistenceError):
            adapter.persist(sample_store)
        adapter.persist(sample_store)

        assert adapter.persist_count == 1
        assert adapter.fail_next_persist is None

    def test_starts_from_given_snapshot(self):
        adapter = MemorySnapshotAdapter(SNAPSHOT_TWO_PAGES)

        assert adapter.load().slugs() == ["about", "home"]
