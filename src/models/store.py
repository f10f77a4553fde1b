"""In-memory store state."""

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from src.models.page import Page


@dataclass
class Store:
    """All pages of a store, keyed by slug.

    The store is the single source of truth between persists. Pages are
    handed out by reference so in-place mutation is visible immediately;
    every such mutation must be followed by a persist.

    Attributes:
        pages: Dict mapping slug to Page
    """
    pages: Dict[str, Page] = field(default_factory=dict)

    def __contains__(self, slug: object) -> bool:
        return slug in self.pages

    def __len__(self) -> int:
        return len(self.pages)

    def slugs(self) -> List[str]:
        """Slugs in deterministic (sorted) order."""
        return sorted(self.pages)

    def iter_pages(self) -> Iterator[Page]:
        for slug in self.slugs():
            yield self.pages[slug]

    def copy_pages(self) -> Dict[str, Page]:
        """Deep copy of the page mapping, used to restore state."""
        return copy.deepcopy(self.pages)
