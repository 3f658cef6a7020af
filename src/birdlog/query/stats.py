"""Derived statistics: activity counts, heatmap banding and species summaries."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

from .dates import local_day, parse_datetime, to_local
from .geo import location_key, sightings_with_coordinates
from .grouping import sort_newest_first
from .search import unique_species

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..models.sighting import Sighting

_DAYS_PER_MONTH = 30


class Intensity(str, Enum):
    """Ordinal activity level of a heatmap cell."""

    EMPTY = "empty"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    HIGHEST = "highest"


def intensity_for(count: int) -> Intensity:
    """Map a per-day sighting count onto its fixed intensity band."""

    if count <= 0:
        return Intensity.EMPTY
    if count == 1:
        return Intensity.LOW
    if count <= 3:
        return Intensity.MEDIUM
    if count <= 6:
        return Intensity.HIGH
    return Intensity.HIGHEST


def day_counts(sightings: Iterable["Sighting"], tz: Optional[tzinfo] = None) -> Counter:
    """Count sightings per local calendar day; undated sightings are skipped."""

    counts: Counter = Counter()
    for sighting in sightings:
        day = local_day(sighting.datetime, tz)
        if day is not None:
            counts[day] += 1
    return counts


@dataclass(frozen=True)
class SightingStats:
    total: int
    unique_species: int
    active_days: int
    best_day: Optional[date]
    best_day_count: int


def compute_stats(sightings: Iterable["Sighting"], tz: Optional[tzinfo] = None) -> SightingStats:
    """Summarise a collection for the dashboard header.

    When several days share the highest count the most recent one is reported.
    """

    items = list(sightings)
    counts = day_counts(items, tz)
    best_day: Optional[date] = None
    best_count = 0
    for day, count in counts.items():
        if count > best_count or (count == best_count and best_day is not None and day > best_day):
            best_day, best_count = day, count
    return SightingStats(
        total=len(items),
        unique_species=len(unique_species(items)),
        active_days=len(counts),
        best_day=best_day,
        best_day_count=best_count,
    )


@dataclass(frozen=True)
class HeatmapCell:
    day: date
    count: int
    intensity: Intensity
    in_year: bool


def heatmap_calendar(
    sightings: Iterable["Sighting"], year: int, tz: Optional[tzinfo] = None
) -> List[HeatmapCell]:
    """Return one cell per day covering *year* in whole Sunday-to-Saturday weeks."""

    counts = day_counts(sightings, tz)
    first = date(year, 1, 1)
    last = date(year, 12, 31)
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)

    cells: List[HeatmapCell] = []
    current = start
    while current <= end:
        count = counts.get(current, 0) if current.year == year else 0
        cells.append(HeatmapCell(current, count, intensity_for(count), current.year == year))
        current += timedelta(days=1)
    return cells


@dataclass(frozen=True)
class YearStats:
    total: int
    active_days: int
    max_day: int


def year_stats(sightings: Iterable["Sighting"], year: int, tz: Optional[tzinfo] = None) -> YearStats:
    counts = [count for day, count in day_counts(sightings, tz).items() if day.year == year]
    return YearStats(total=sum(counts), active_days=len(counts), max_day=max(counts, default=0))


def available_years(
    sightings: Iterable["Sighting"], today: Optional[date] = None, tz: Optional[tzinfo] = None
) -> List[int]:
    """Return the years containing sightings plus the current year, newest first."""

    years = {day.year for day in day_counts(sightings, tz)}
    years.add((today or date.today()).year)
    return sorted(years, reverse=True)


# ----------------------------------------------------------------------
# Species detail
# ----------------------------------------------------------------------
def species_sightings(sightings: Iterable["Sighting"], name: str) -> List["Sighting"]:
    """Return sightings whose species equals *name* (case-insensitive), newest first."""

    wanted = (name or "").strip().lower()
    matches = [
        s for s in sightings if isinstance(s.species, str) and s.species.strip().lower() == wanted
    ]
    return sort_newest_first(matches)


@dataclass(frozen=True)
class SpeciesSummary:
    total: int = 0
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    total_locations: int = 0
    average_per_month: float = 0.0
    most_active_location: Optional[str] = None
    latest: Optional["Sighting"] = None


def species_summary(
    sightings: Iterable["Sighting"], name: str, tz: Optional[tzinfo] = None
) -> SpeciesSummary:
    matches = species_sightings(sightings, name)
    if not matches:
        return SpeciesSummary()

    moments = sorted(
        to_local(parsed, tz)
        for parsed in (parse_datetime(s.datetime) for s in matches)
        if parsed is not None
    )
    locations = Counter(
        location_key(s.latitude, s.longitude) for s in sightings_with_coordinates(matches)
    )

    months = 1.0
    if len(moments) > 1:
        months = (moments[-1] - moments[0]) / timedelta(days=_DAYS_PER_MONTH)
    average = len(matches) / months if months > 0 else float(len(matches))

    # Counter.most_common keeps first-seen order among equal counts.
    most_active = locations.most_common(1)[0][0] if locations else None
    return SpeciesSummary(
        total=len(matches),
        first_seen=moments[0] if moments else None,
        last_seen=moments[-1] if moments else None,
        total_locations=len(locations),
        average_per_month=round(average, 1),
        most_active_location=most_active,
        latest=matches[0],
    )


@dataclass
class MonthGroup:
    key: str
    sightings: List["Sighting"] = field(default_factory=list)


def monthly_timeline(sightings: Iterable["Sighting"], tz: Optional[tzinfo] = None) -> List[MonthGroup]:
    """Group dated sightings by ``YYYY-MM``, newest month first."""

    groups: dict[str, MonthGroup] = {}
    for sighting in sort_newest_first(sightings):
        day = local_day(sighting.datetime, tz)
        if day is None:
            continue
        key = f"{day.year:04d}-{day.month:02d}"
        groups.setdefault(key, MonthGroup(key)).sightings.append(sighting)
    return sorted(groups.values(), key=lambda group: group.key, reverse=True)
