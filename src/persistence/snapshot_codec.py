"""Conversion between Store objects and plain snapshot dictionaries.

Snapshot structure:
    pages:
      home:
        title: "Home"
        tags: ["intro"]
        dateCreated: "2024-01-15T10:30:00+00:00"
        contentVersions:
          - id: "4f0c..."
            dateCreated: "2024-01-15T10:31:00+00:00"
            comment: "first draft"
            content: "..."

Timestamps are written as ISO 8601 strings in UTC. Snapshots written by the
earlier JavaScript tool also load: their integer timestamps (epoch
milliseconds) are converted, and versions stored without an id receive a
fresh one that is written back on the next persist.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from src.models.page import ContentVersion, Page
from src.models.store import Store
from src.persistence.errors import SnapshotFormatError

logger = logging.getLogger(__name__)


def encode_store(store: Store) -> Dict[str, Any]:
    """Convert a Store into a JSON/YAML-safe dictionary."""
    pages = {}
    for page in store.iter_pages():
        pages[page.slug] = {
            'title': page.title,
            'tags': list(page.tags),
            'dateCreated': _encode_timestamp(page.date_created),
            'contentVersions': [
                {
                    'id': version.id,
                    'dateCreated': _encode_timestamp(version.date_created),
                    'comment': version.comment,
                    'content': version.content,
                }
                for version in page.content_versions
            ],
        }
    return {'pages': pages}


def decode_store(data: Any, source: str) -> Store:
    """Build a Store from a snapshot dictionary.

    Args:
        data: Parsed snapshot content
        source: Snapshot location, used in error messages

    Returns:
        Store with all pages and versions

    Raises:
        SnapshotFormatError: If the structure is not a valid snapshot
    """
    if not isinstance(data, dict):
        raise SnapshotFormatError(
            source,
            f"Snapshot must be a dictionary, got {type(data).__name__}"
        )

    pages_raw = data.get('pages')
    if pages_raw is None:
        return Store()
    if not isinstance(pages_raw, dict):
        raise SnapshotFormatError(
            source,
            f"Field 'pages' must be a dictionary, got {type(pages_raw).__name__}"
        )

    pages: Dict[str, Page] = {}
    for slug, page_raw in pages_raw.items():
        if not isinstance(slug, str) or not slug:
            raise SnapshotFormatError(source, f"Invalid page slug: {slug!r}")
        pages[slug] = _decode_page(slug, page_raw, source)
    return Store(pages=pages)


def _decode_page(slug: str, page_raw: Any, source: str) -> Page:
    if not isinstance(page_raw, dict):
        raise SnapshotFormatError(source, f"Page '{slug}' must be a dictionary")

    title = page_raw.get('title')
    if not isinstance(title, str):
        raise SnapshotFormatError(source, f"Page '{slug}' has no string 'title'")

    tags = page_raw.get('tags') or []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise SnapshotFormatError(source, f"Field 'tags' of page '{slug}' must be a list of strings")

    versions_raw = page_raw.get('contentVersions') or []
    if not isinstance(versions_raw, list):
        raise SnapshotFormatError(
            source,
            f"Field 'contentVersions' of page '{slug}' must be a list"
        )

    versions: List[ContentVersion] = []
    seen_ids = set()
    for index, version_raw in enumerate(versions_raw):
        version = _decode_version(slug, index, version_raw, source)
        if version.id in seen_ids:
            raise SnapshotFormatError(
                source,
                f"Duplicate content version id '{version.id}' in page '{slug}'"
            )
        seen_ids.add(version.id)
        versions.append(version)

    return Page(
        slug=slug,
        title=title,
        date_created=_decode_timestamp(page_raw.get('dateCreated'), f"pages.{slug}.dateCreated", source),
        tags=list(tags),
        content_versions=versions,
    )


def _decode_version(slug: str, index: int, version_raw: Any, source: str) -> ContentVersion:
    where = f"pages.{slug}.contentVersions[{index}]"
    if not isinstance(version_raw, dict):
        raise SnapshotFormatError(source, f"{where} must be a dictionary")

    if 'id' not in version_raw:
        # Legacy snapshots stored versions without ids
        version_id = uuid.uuid4().hex
        logger.warning(f"{where} in {source} has no id, assigned {version_id}")
    else:
        version_id = version_raw['id']
        if not isinstance(version_id, str) or not version_id:
            raise SnapshotFormatError(source, f"{where}.id must be a non-empty string")

    content = version_raw.get('content')
    if not isinstance(content, str):
        raise SnapshotFormatError(source, f"{where} has no string 'content'")

    comment = version_raw.get('comment')
    if comment is not None and not isinstance(comment, str):
        raise SnapshotFormatError(source, f"{where}.comment must be a string or null")

    return ContentVersion(
        id=version_id,
        date_created=_decode_timestamp(version_raw.get('dateCreated'), f"{where}.dateCreated", source),
        content=content,
        comment=comment,
    )


def _encode_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _decode_timestamp(value: Any, where: str, source: str) -> datetime:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise SnapshotFormatError(source, f"{where} must be a timestamp")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise SnapshotFormatError(source, f"{where} is not a valid epoch timestamp: {e}") from e
    # PyYAML parses unquoted ISO timestamps into datetime objects
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise SnapshotFormatError(source, f"{where} is not an ISO 8601 timestamp: {e}") from e
    else:
        raise SnapshotFormatError(source, f"{where} must be a timestamp")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
