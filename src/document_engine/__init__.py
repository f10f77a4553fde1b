"""Versioned page store engine.

This package provides the DocumentEngine, which manages pages (title, slug,
tags and an ordered history of content versions) held in an in-memory
Store and persisted as a full snapshot after every accepted change.
"""

from .config_loader import ConfigLoader
from .engine import DocumentEngine, normalize_tags
from .errors import (
    ConfigError,
    DocumentEngineError,
    InvalidInputError,
    SlugAlreadyExistsError,
    SlugNotFoundError,
    VersionNotFoundError,
)
from .logging_setup import configure_logging
from .lookup import resolve_page, resolve_version
from .models import StoreConfig

__all__ = [
    'DocumentEngine',
    'normalize_tags',
    'ConfigLoader',
    'StoreConfig',
    'configure_logging',
    'resolve_page',
    'resolve_version',
    'DocumentEngineError',
    'SlugNotFoundError',
    'SlugAlreadyExistsError',
    'VersionNotFoundError',
    'InvalidInputError',
    'ConfigError',
]
