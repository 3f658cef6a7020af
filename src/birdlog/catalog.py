"""Shared search and filter state consumed by every sighting view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from .errors import StoreUnavailableError
from .models.sighting import Sighting
from .query.grouping import DayGroup, SortMode, group_by_day, sort_sightings
from .query.search import SightingFilters, filter_sightings, unique_species
from .query.stats import SightingStats, compute_stats
from .service import SightingService
from .storage.base import StoreResult

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchStats:
    """Counts describing the current search against the loaded collection."""

    total: int
    filtered: int
    is_filtering: bool
    unique_species_count: int


class SightingCatalog(QObject):
    """In-memory view model over the loaded sightings.

    The gallery, journal, map and heatmap views all read from one catalog, so
    a search term typed in one view narrows every other view as well.  The
    catalog reloads itself whenever the service reports a change.
    """

    loaded = Signal()
    resultsChanged = Signal()
    errorOccurred = Signal(str)

    def __init__(
        self,
        service: SightingService,
        *,
        tz: Optional[tzinfo] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service
        self._tz = tz
        self._sightings: List[Sighting] = []
        self._results: List[Sighting] = []
        self._term = ""
        self._filters = SightingFilters()
        self._sort_mode = SortMode.NEWEST
        self._service.sightingsChanged.connect(self.reload)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def reload(self) -> bool:
        """Fetch every sighting from the service and recompute the results.

        On failure :attr:`errorOccurred` fires and the previously loaded
        sightings stay in place.
        """

        try:
            result = self._service.get_all_sightings()
        except StoreUnavailableError as exc:
            self._report(str(exc))
            return False
        if not result.success:
            self._report(result.error or "Unable to load sightings")
            return False
        self._sightings = list(result.data or [])
        self._refresh()
        self.loaded.emit()
        return True

    def database_search(self, term: str) -> List[Sighting]:
        """Search the backend directly, bypassing the in-memory filters."""

        try:
            result: StoreResult = self._service.search_sightings(term)
        except StoreUnavailableError as exc:
            self._report(str(exc))
            return []
        if not result.success:
            self._report(result.error or "Search failed")
            return []
        return list(result.data or [])

    def _report(self, message: str) -> None:
        _LOGGER.error("Sighting catalog error: %s", message)
        self.errorOccurred.emit(message)

    # ------------------------------------------------------------------
    # Search state
    # ------------------------------------------------------------------
    @property
    def search_term(self) -> str:
        return self._term

    @property
    def filters(self) -> SightingFilters:
        return self._filters

    def set_search_term(self, term: str) -> None:
        term = term or ""
        if term == self._term:
            return
        self._term = term
        self._refresh()

    def update_filter(self, key: str, value: object) -> None:
        """Set one filter field; raises ``KeyError`` for an unknown *key*."""

        updated = self._filters.with_value(key, value)
        if updated == self._filters:
            return
        self._filters = updated
        self._refresh()

    @property
    def sort_mode(self) -> SortMode:
        return self._sort_mode

    def set_sort_mode(self, mode) -> None:
        """Change the gallery order; raises ``ValueError`` for an unknown *mode*."""

        mode = SortMode(mode)
        if mode is self._sort_mode:
            return
        self._sort_mode = mode
        self.resultsChanged.emit()

    def clear_search(self) -> None:
        """Drop the term and filters and return to newest-first order."""

        if not self._term and not self._filters.is_active and self._sort_mode is SortMode.NEWEST:
            return
        self._term = ""
        self._filters = SightingFilters()
        self._sort_mode = SortMode.NEWEST
        self._refresh()

    def _refresh(self) -> None:
        self._results = filter_sightings(self._sightings, self._term, self._filters, tz=self._tz)
        self.resultsChanged.emit()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------
    def sightings(self) -> List[Sighting]:
        return list(self._sightings)

    def results(self) -> List[Sighting]:
        return list(self._results)

    def sorted_results(self) -> List[Sighting]:
        """The current results in the selected gallery order."""

        return sort_sightings(self._results, self._sort_mode)

    @property
    def is_filtering(self) -> bool:
        return bool(self._term.strip()) or self._filters.is_active

    def day_groups(self) -> List[DayGroup]:
        return group_by_day(self._results, tz=self._tz)

    def stats(self) -> SightingStats:
        """Statistics over the whole loaded collection, ignoring the search."""

        return compute_stats(self._sightings, tz=self._tz)

    def unique_species(self) -> List[str]:
        return unique_species(self._sightings)

    def search_stats(self) -> SearchStats:
        return SearchStats(
            total=len(self._sightings),
            filtered=len(self._results),
            is_filtering=self.is_filtering,
            unique_species_count=len(unique_species(self._results)),
        )
