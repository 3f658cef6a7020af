"""Chronological ordering and day grouping for the journal view."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Union

from ..config import NO_DATE_KEY
from .dates import local_day, parse_datetime, sort_timestamp

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..models.sighting import Sighting


@dataclass
class DayGroup:
    """Sightings sharing one local calendar day (or the no-date bucket)."""

    key: str
    day: Optional[date]
    sightings: List["Sighting"] = field(default_factory=list)

    @property
    def is_undated(self) -> bool:
        return self.day is None

    def __len__(self) -> int:
        return len(self.sightings)


def _newest_first_key(sighting: "Sighting") -> tuple:
    return (
        sort_timestamp(sighting.datetime),
        sort_timestamp(getattr(sighting, "created_at", "")),
        getattr(sighting, "id", 0) or 0,
    )


def sort_newest_first(sightings: Iterable["Sighting"]) -> List["Sighting"]:
    """Order by observation time descending; undated sightings go last."""

    return sorted(sightings, key=_newest_first_key, reverse=True)


class SortMode(str, Enum):
    """Orderings offered by the gallery."""

    NEWEST = "newest"
    OLDEST = "oldest"
    SPECIES = "species"


def _gallery_timestamp(sighting: "Sighting") -> float:
    # Undated or unparsable sightings count as the epoch.
    parsed = parse_datetime(sighting.datetime)
    if parsed is None:
        return 0.0
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0


def _species_key(sighting: "Sighting") -> str:
    return sighting.species.casefold() if isinstance(sighting.species, str) else ""


def sort_sightings(sightings: Iterable["Sighting"], mode: Union[SortMode, str] = SortMode.NEWEST) -> List["Sighting"]:
    """Return *sightings* in gallery *mode* order.

    ``newest`` and ``oldest`` compare observation times, treating undated
    sightings as the epoch. ``species`` sorts by name, case-insensitively.
    The sort is stable, so ties keep their incoming order. Raises
    ``ValueError`` for an unknown mode.
    """

    mode = SortMode(mode)
    if mode is SortMode.SPECIES:
        return sorted(sightings, key=_species_key)
    return sorted(sightings, key=_gallery_timestamp, reverse=mode is SortMode.NEWEST)


def group_by_day(sightings: Iterable["Sighting"], tz: Optional[tzinfo] = None) -> List[DayGroup]:
    """Bucket *sightings* by local calendar day, newest day first.

    Within a day the newest-first order is kept.  Sightings with a missing or
    unparsable ``datetime`` land in the ``no-date`` group, which is always the
    last group.
    """

    groups: Dict[Optional[date], DayGroup] = {}
    for sighting in sort_newest_first(sightings):
        day = local_day(sighting.datetime, tz)
        group = groups.get(day)
        if group is None:
            key = day.isoformat() if day is not None else NO_DATE_KEY
            group = groups[day] = DayGroup(key=key, day=day)
        group.sightings.append(sighting)

    dated = sorted((g for d, g in groups.items() if d is not None), key=lambda g: g.day, reverse=True)
    undated = groups.get(None)
    return dated + ([undated] if undated is not None else [])
