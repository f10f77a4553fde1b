"""Unit tests for models.page and models.store modules."""

import dataclasses

import pytest

from src.models.page import ContentVersion, Page
from src.models.store import Store
from tests.helpers.clock import BASE_TIME


def make_page(slug, versions=()):
    return Page(
        slug=slug,
        title=slug.title(),
        date_created=BASE_TIME,
        content_versions=[
            ContentVersion(id=version_id, date_created=BASE_TIME, content=version_id.upper())
            for version_id in versions
        ],
    )


class TestContentVersion:
    """Test cases for ContentVersion dataclass."""

    def test_is_immutable(self):
        """Content versions cannot be edited after creation."""
        version = ContentVersion(id="a", date_created=BASE_TIME, content="A")

        with pytest.raises(dataclasses.FrozenInstanceError):
            version.content = "changed"

    def test_comment_defaults_to_none(self):
        version = ContentVersion(id="a", date_created=BASE_TIME, content="A")
        assert version.comment is None


class TestPage:
    """Test cases for Page dataclass."""

    def test_defaults(self):
        """A new page has no tags and no versions."""
        page = Page(slug="home", title="Home", date_created=BASE_TIME)

        assert page.tags == []
        assert page.content_versions == []
        assert page.latest_version is None

    def test_latest_version_is_last(self):
        page = make_page("home", ["a", "b", "c"])
        assert page.latest_version.id == "c"

    def test_version_ids_in_order(self):
        page = make_page("home", ["b", "a"])
        assert page.version_ids() == ["b", "a"]


class TestStore:
    """Test cases for Store dataclass."""

    def test_enumeration_is_sorted(self):
        """Pages are enumerated by slug regardless of insertion order."""
        store = Store()
        for slug in ["zeta", "alpha", "mid"]:
            store.pages[slug] = make_page(slug)

        assert store.slugs() == ["alpha", "mid", "zeta"]
        assert [page.slug for page in store.iter_pages()] == ["alpha", "mid", "zeta"]

    def test_contains_and_len(self):
        store = Store(pages={"home": make_page("home")})

        assert "home" in store
        assert "other" not in store
        assert len(store) == 1

    def test_copy_pages_is_deep(self):
        """Changing the copy leaves the store untouched."""
        store = Store(pages={"home": make_page("home", ["a"])})

        copied = store.copy_pages()
        copied["home"].title = "Changed"
        copied["home"].content_versions.clear()

        assert store.pages["home"].title == "Home"
        assert len(store.pages["home"].content_versions) == 1
