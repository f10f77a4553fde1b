"""Typed exception hierarchy for document engine errors.

Lookup failures, rejected inputs and configuration problems are all
reported as subclasses of PageStoreError so callers can branch on the
error kind instead of matching message strings.
"""

from typing import Optional

from src.persistence.errors import PageStoreError


class DocumentEngineError(PageStoreError):
    """Base exception for all document engine errors."""
    pass


class SlugNotFoundError(DocumentEngineError):
    """Raised when no page is stored under the requested slug."""

    def __init__(self, slug: str):
        super().__init__(f"Page with slug '{slug}' does not exist")
        self.slug = slug


class SlugAlreadyExistsError(DocumentEngineError):
    """Raised when creating or renaming a page onto an occupied slug."""

    def __init__(self, slug: str):
        super().__init__(f"Page with slug '{slug}' already exists")
        self.slug = slug


class VersionNotFoundError(DocumentEngineError):
    """Raised when a page has no content version with the requested id."""

    def __init__(self, slug: str, version_id: str):
        super().__init__(
            f"Content version '{version_id}' not found for page '{slug}'"
        )
        self.slug = slug
        self.version_id = version_id


class InvalidInputError(DocumentEngineError):
    """Raised when an operation argument is rejected before any change."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid value for '{field}': {message}")
        self.field = field
        self.original_message = message


class ConfigError(DocumentEngineError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message
