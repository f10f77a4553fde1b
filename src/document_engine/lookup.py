"""Slug and version resolution against the in-memory store."""

import logging
from typing import Optional

from src.document_engine.errors import SlugNotFoundError, VersionNotFoundError
from src.models.page import ContentVersion, Page
from src.models.store import Store

logger = logging.getLogger(__name__)


def resolve_page(store: Store, slug: str) -> Page:
    """Return the live Page stored under ``slug``.

    The returned object is the store's own Page, not a copy, so any change
    made to it must be followed by a persist.

    Raises:
        SlugNotFoundError: If no page has this slug
    """
    page = store.pages.get(slug)
    if page is None:
        logger.debug(f"Slug lookup failed: {slug}")
        raise SlugNotFoundError(slug)
    return page


def resolve_version(page: Page, version_id: Optional[str] = None) -> Optional[ContentVersion]:
    """Return a content version of ``page``.

    Args:
        page: Page to search
        version_id: Version to find; None means the latest version

    Returns:
        The matching version, or None when no id is given and the page has
        no versions yet

    Raises:
        VersionNotFoundError: If ``version_id`` is given and not on the page
    """
    if version_id is None:
        return page.latest_version

    for version in page.content_versions:
        if version.id == version_id:
            return version

    logger.debug(f"Version lookup failed: {page.slug}@{version_id}")
    raise VersionNotFoundError(page.slug, version_id)


def version_index(page: Page, version_id: str) -> int:
    """Position of ``version_id`` in the page's version list.

    Raises:
        VersionNotFoundError: If the id is not on the page
    """
    return page.content_versions.index(resolve_version(page, version_id))
