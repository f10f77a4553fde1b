"""Page and content version data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ContentVersion:
    """One immutable revision of a page's content.

    Versions are never edited in place; changing a page's content always
    appends a new ContentVersion.

    Attributes:
        id: Unique token within the owning page (uuid4 hex)
        date_created: UTC timestamp of creation
        content: The versioned payload
        comment: Optional caller-supplied annotation
    """
    id: str
    date_created: datetime
    content: str
    comment: Optional[str] = None


@dataclass
class Page:
    """A titled page with an ordered history of content versions.

    Attributes:
        slug: Unique identifier of the page within its store
        title: Display title (not unique)
        date_created: UTC timestamp of creation
        tags: Free-form labels attached to the page
        content_versions: Versions in creation order, oldest first

    Example:
        >>> page = Page(slug="home", title="Home", date_created=now)
        >>> page.latest_version is None
        True
    """
    slug: str
    title: str
    date_created: datetime
    tags: List[str] = field(default_factory=list)
    content_versions: List[ContentVersion] = field(default_factory=list)

    @property
    def latest_version(self) -> Optional[ContentVersion]:
        """Last appended version, or None for a page without content."""
        if not self.content_versions:
            return None
        return self.content_versions[-1]

    def version_ids(self) -> List[str]:
        return [version.id for version in self.content_versions]


@dataclass(frozen=True)
class PageView:
    """Read result for a single page at one version.

    Returned by the latest/specific-version reads. ``content`` is None when
    the page has no versions yet, which is a valid state, not an error.
    """
    slug: str
    title: str
    date_created: datetime
    tags: List[str]
    content: Optional[ContentVersion]


@dataclass(frozen=True)
class PageSummary:
    """Listing entry for a page."""
    slug: str
    title: str
    date_created: datetime
    tags: List[str]
    version_count: int
    latest_version_id: Optional[str]
