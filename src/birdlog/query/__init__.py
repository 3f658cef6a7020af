"""Pure query, filter and grouping functions over in-memory sightings.

Nothing in this package performs I/O; every function returns the same result
for the same input collection, filter state and time zone.

- `search`: free-text search, field filters and species name suggestions
- `grouping`: gallery sort modes, newest-first ordering and day grouping
- `stats`: activity statistics, heatmap banding and species summaries
- `geo`: coordinate grouping and bounds for the map view
"""

from .dates import local_day, parse_datetime
from .geo import Bounds, LocationGroup, bounds, group_by_location, sightings_with_coordinates
from .grouping import DayGroup, SortMode, group_by_day, sort_newest_first, sort_sightings
from .search import SightingFilters, SpeciesEntry, filter_sightings, matches_text, suggest_species, unique_species
from .stats import (
    HeatmapCell,
    Intensity,
    SightingStats,
    SpeciesSummary,
    compute_stats,
    day_counts,
    heatmap_calendar,
    intensity_for,
    monthly_timeline,
    species_summary,
)

__all__ = [
    "Bounds",
    "DayGroup",
    "HeatmapCell",
    "Intensity",
    "LocationGroup",
    "SightingFilters",
    "SightingStats",
    "SortMode",
    "SpeciesEntry",
    "SpeciesSummary",
    "bounds",
    "compute_stats",
    "day_counts",
    "filter_sightings",
    "group_by_day",
    "group_by_location",
    "heatmap_calendar",
    "intensity_for",
    "local_day",
    "matches_text",
    "monthly_timeline",
    "parse_datetime",
    "sightings_with_coordinates",
    "sort_newest_first",
    "sort_sightings",
    "species_summary",
    "suggest_species",
    "unique_species",
]
