"""Page and content version lifecycle operations.

This module implements the DocumentEngine, the single entry point through
which callers create, read, update and delete pages and their content
versions. The engine owns one Store and one snapshot adapter:

1. Acquire the engine guard (bounded by lock_timeout)
2. Resolve the target page/version against the Store
3. Mutate the Store in place
4. Persist the full snapshot before returning

If the persist fails, the Store is restored to its state before the call
and the PersistenceError is re-raised, so the in-memory view never runs
ahead of the last durable snapshot.
"""

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from src.document_engine.errors import (
    InvalidInputError,
    SlugAlreadyExistsError,
    SlugNotFoundError,
)
from src.document_engine.lookup import resolve_page, resolve_version, version_index
from src.document_engine.models import StoreConfig
from src.models.page import ContentVersion, Page, PageSummary, PageView
from src.models.store import Store
from src.persistence.errors import PersistenceError, StoreLockedError
from src.persistence.snapshot_adapter import FileSnapshotAdapter
from src.persistence.store_lock import StoreLock

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_version_id() -> str:
    return uuid.uuid4().hex


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Strip tags, drop empty ones and case-insensitive duplicates.

    Raises:
        InvalidInputError: If tags is not a list of strings
    """
    if tags is None:
        return []
    if not isinstance(tags, (list, tuple)):
        raise InvalidInputError('tags', f"expected a list of strings, got {type(tags).__name__}")

    normalized: List[str] = []
    seen = set()
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidInputError('tags', f"expected a list of strings, got item {tag!r}")
        clean = tag.strip()
        if not clean or clean.lower() in seen:
            continue
        seen.add(clean.lower())
        normalized.append(clean)
    return normalized


class DocumentEngine:
    """Versioned page store operations over an owned Store and adapter.

    The engine assumes a single logical writer. Its public methods share one
    re-entrant guard so that resolve, mutate and persist run as a single
    critical section even when the engine is called from several threads.

    Attributes:
        store: The in-memory Store (source of truth between persists)
        adapter: Object with load()/persist(store) used for durability
        lock_timeout: Seconds to wait for the engine guard

    Example:
        >>> engine = DocumentEngine(Store(), MemorySnapshotAdapter())
        >>> engine.create_page("Home", "home")
        >>> version = engine.create_content_version("home", "Hello", "first")
        >>> engine.get_page_latest("home").content.content
        'Hello'
    """

    def __init__(
        self,
        store: Store,
        adapter,
        lock_timeout: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_version_id,
        store_lock: Optional[StoreLock] = None,
    ):
        """Initialize the engine.

        Args:
            store: Store to operate on (usually adapter.load())
            adapter: Snapshot adapter with load() and persist(store)
            lock_timeout: Seconds to wait for the engine guard
            clock: Returns the current UTC time for new pages/versions
            id_factory: Returns a fresh version id token
            store_lock: Ownership lock released by close(), if any
        """
        self.store = store
        self.adapter = adapter
        self.lock_timeout = lock_timeout
        self._clock = clock
        self._id_factory = id_factory
        self._store_lock = store_lock
        self._guard = threading.RLock()

    @classmethod
    def open(cls, config: StoreConfig) -> 'DocumentEngine':
        """Open the store described by ``config``.

        Takes the snapshot ownership lock, loads the snapshot (an absent
        file yields an empty store) and returns an engine that holds the
        lock until close().

        Raises:
            StoreLockedError: If another engine owns the snapshot
            PersistenceError: If the snapshot cannot be read or parsed
        """
        store_lock = StoreLock(config.snapshot_path, timeout=config.lock_timeout)
        store_lock.acquire()
        try:
            adapter = FileSnapshotAdapter(
                config.snapshot_path,
                snapshot_format=config.snapshot_format,
                json_indent=config.json_indent,
            )
            store = adapter.load()
        except Exception:
            store_lock.release()
            raise

        logger.info(f"Opened page store {config.snapshot_path} with {len(store)} page(s)")
        return cls(store, adapter, lock_timeout=config.lock_timeout, store_lock=store_lock)

    def close(self) -> None:
        """Release the snapshot ownership lock, if this engine holds one."""
        if self._store_lock is not None:
            self._store_lock.release()
            self._store_lock = None

    def __enter__(self) -> 'DocumentEngine':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _guarded(self) -> Iterator[None]:
        if not self._guard.acquire(timeout=self.lock_timeout):
            raise StoreLockedError('<engine guard>', self.lock_timeout)
        try:
            yield
        finally:
            self._guard.release()

    @contextmanager
    def _commit(self, action: str) -> Iterator[None]:
        """Run a mutation and persist it, restoring the store on failure.

        Must be entered while holding the guard.
        """
        backup = self.store.copy_pages()
        try:
            yield
        except BaseException:
            self.store.pages = backup
            raise

        try:
            self.adapter.persist(self.store)
        except PersistenceError as e:
            logger.error(f"Persist failed after {action}, restoring previous state: {e}")
            self.store.pages = backup
            raise
        logger.info(f"Committed {action}")

    # CREATE

    def create_page(self, title: str, slug: str, tags: Optional[List[str]] = None) -> PageView:
        """Create an empty page.

        Raises:
            SlugAlreadyExistsError: If the slug is taken
            InvalidInputError: If title, slug or tags are invalid
        """
        _require_text('title', title)
        _require_text('slug', slug)
        clean_tags = normalize_tags(tags)

        with self._guarded():
            if slug in self.store:
                raise SlugAlreadyExistsError(slug)
            with self._commit(f"create_page '{slug}'"):
                self.store.pages[slug] = Page(
                    slug=slug,
                    title=title,
                    date_created=self._clock(),
                    tags=clean_tags,
                )
            return self._view(self.store.pages[slug], None)

    def create_content_version(
        self,
        slug: str,
        content: str,
        comment: Optional[str] = None,
    ) -> ContentVersion:
        """Append a new content version to a page.

        Returns:
            The created ContentVersion (with its generated id)

        Raises:
            SlugNotFoundError: If the page does not exist
            InvalidInputError: If content or comment is not a string
        """
        if not isinstance(content, str):
            raise InvalidInputError('content', f"expected a string, got {type(content).__name__}")
        if comment is not None and not isinstance(comment, str):
            raise InvalidInputError('comment', f"expected a string, got {type(comment).__name__}")

        with self._guarded():
            page = resolve_page(self.store, slug)
            version = ContentVersion(
                id=self._fresh_version_id(page),
                date_created=self._clock(),
                content=content,
                comment=comment,
            )
            with self._commit(f"create_content_version '{slug}@{version.id}'"):
                page.content_versions.append(version)
            return version

    # READ

    def get_page_latest(self, slug: str) -> PageView:
        """Page metadata with its latest version (None if it has none).

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            return self._view(page, resolve_version(page))

    def get_page_version(self, slug: str, version_id: str) -> PageView:
        """Page metadata with a specific version.

        Raises:
            SlugNotFoundError: If the page does not exist
            VersionNotFoundError: If the page has no version with that id
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            return self._view(page, resolve_version(page, version_id))

    def get_page_all(self, slug: str) -> Page:
        """Full page with every version, as a copy detached from the store.

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        with self._guarded():
            return copy.deepcopy(resolve_page(self.store, slug))

    def list_pages(self) -> List[PageSummary]:
        """Summaries of all pages, sorted by slug."""
        with self._guarded():
            return [
                PageSummary(
                    slug=page.slug,
                    title=page.title,
                    date_created=page.date_created,
                    tags=list(page.tags),
                    version_count=len(page.content_versions),
                    latest_version_id=page.latest_version.id if page.latest_version else None,
                )
                for page in self.store.iter_pages()
            ]

    # UPDATE

    def update_title(self, slug: str, new_title: str) -> None:
        """Replace a page's title.

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        _require_text('title', new_title)
        with self._guarded():
            page = resolve_page(self.store, slug)
            with self._commit(f"update_title '{slug}'"):
                page.title = new_title

    def update_tags(self, slug: str, new_tags: List[str]) -> List[str]:
        """Replace a page's tags and return the normalized list.

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        clean_tags = normalize_tags(new_tags)
        with self._guarded():
            page = resolve_page(self.store, slug)
            with self._commit(f"update_tags '{slug}'"):
                page.tags = clean_tags
            return list(clean_tags)

    def update_slug(self, old_slug: str, new_slug: str) -> None:
        """Move a page to a new slug, keeping every other field.

        Renaming a page to its current slug is a no-op.

        Raises:
            SlugNotFoundError: If ``old_slug`` does not exist
            SlugAlreadyExistsError: If ``new_slug`` belongs to another page
        """
        _require_text('slug', new_slug)
        with self._guarded():
            page = resolve_page(self.store, old_slug)
            if new_slug == old_slug:
                return
            if new_slug in self.store:
                raise SlugAlreadyExistsError(new_slug)
            with self._commit(f"update_slug '{old_slug}' -> '{new_slug}'"):
                del self.store.pages[old_slug]
                page.slug = new_slug
                self.store.pages[new_slug] = page

    # DELETE

    def delete_page(self, slug: str) -> None:
        """Remove a page and all its versions.

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        with self._guarded():
            resolve_page(self.store, slug)
            with self._commit(f"delete_page '{slug}'"):
                del self.store.pages[slug]

    def delete_content_version(self, slug: str, version_id: str) -> None:
        """Remove one version, leaving the order of the others unchanged.

        Raises:
            SlugNotFoundError: If the page does not exist
            VersionNotFoundError: If the page has no version with that id
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            index = version_index(page, version_id)
            with self._commit(f"delete_content_version '{slug}@{version_id}'"):
                del page.content_versions[index]

    def delete_all_versions_except(self, slug: str, version_id: str) -> None:
        """Keep only the version with ``version_id``.

        Raises:
            SlugNotFoundError: If the page does not exist
            VersionNotFoundError: If the page has no version with that id
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            kept = resolve_version(page, version_id)
            with self._commit(f"delete_all_versions_except '{slug}@{version_id}'"):
                page.content_versions = [kept]

    def trim_to_latest(self, slug: str) -> None:
        """Remove every version except the latest (no-op without versions).

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            with self._commit(f"trim_to_latest '{slug}'"):
                page.content_versions = page.content_versions[-1:]

    def pop_latest_version(self, slug: str) -> Optional[ContentVersion]:
        """Remove and return the latest version.

        Returns:
            The removed version, or None if the page had no versions (in
            which case nothing is written)

        Raises:
            SlugNotFoundError: If the page does not exist
        """
        with self._guarded():
            page = resolve_page(self.store, slug)
            if not page.content_versions:
                logger.debug(f"pop_latest_version on '{slug}': no versions to remove")
                return None
            with self._commit(f"pop_latest_version '{slug}'"):
                removed = page.content_versions.pop()
            return removed

    # helpers

    def _fresh_version_id(self, page: Page) -> str:
        existing = set(page.version_ids())
        while True:
            candidate = self._id_factory()
            if candidate not in existing:
                return candidate
            logger.warning(f"Version id collision on page '{page.slug}', regenerating")

    def _view(self, page: Page, version: Optional[ContentVersion]) -> PageView:
        return PageView(
            slug=page.slug,
            title=page.title,
            date_created=page.date_created,
            tags=list(page.tags),
            content=version,
        )


def _require_text(field: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(field, "must be a non-empty string")
