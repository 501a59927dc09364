"""
Comparable retrieval.

The engine never fetches data itself. Callers supply a ComparableSource;
the in-memory source serves a fixed pool of sales and is what the web API
and tests use.
"""

import logging
from typing import Iterable, List, Optional, Protocol

from .filters import ComparableFilters, filter_comparables
from .models import Comparable, Subject


logger = logging.getLogger(__name__)


class ComparableSource(Protocol):
    """Supplies candidate comparables for a subject."""

    def search(
        self,
        subject: Subject,
        filters: Optional[ComparableFilters] = None,
    ) -> List[Comparable]:
        ...


class InMemoryComparableSource:
    """
    Serves comparables from a fixed in-memory pool.

    Filters are applied against the subject, so distance bounds are
    measured from the subject coordinates.
    """

    def __init__(self, comparables: Iterable[Comparable] = ()):
        self._pool = {}
        for comp in comparables:
            self.add(comp)

    def add(self, comp: Comparable) -> None:
        """Add or replace a comparable, keyed by id."""
        if comp.id in self._pool:
            logger.debug("Replacing comparable %s in pool", comp.id)
        self._pool[comp.id] = comp

    def __len__(self) -> int:
        return len(self._pool)

    def search(
        self,
        subject: Subject,
        filters: Optional[ComparableFilters] = None,
    ) -> List[Comparable]:
        result = filter_comparables(list(self._pool.values()), filters, subject=subject)
        logger.debug("Source returned %d of %d comparables for %s", len(result), len(self._pool), subject.id)
        return result
