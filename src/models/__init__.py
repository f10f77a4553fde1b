"""Data models for pages, content versions and the store."""

from src.models.page import ContentVersion, Page, PageSummary, PageView
from src.models.store import Store

__all__ = ['ContentVersion', 'Page', 'PageSummary', 'PageView', 'Store']
