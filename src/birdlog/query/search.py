"""Free-text search and field filters over in-memory sightings."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime, time, tzinfo
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional, Union

from .dates import parse_datetime, parse_day, to_local

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..models.sighting import Sighting

DateBound = Union[str, date, None]


@dataclass(frozen=True)
class SightingFilters:
    """Field-level filters; every active filter must match (logical AND)."""

    species: str = ""
    date_from: DateBound = ""
    date_to: DateBound = ""
    location: str = ""
    has_coordinates: bool = False
    has_notes: bool = False

    @property
    def is_active(self) -> bool:
        return any(bool(getattr(self, f.name)) for f in fields(self))

    def with_value(self, key: str, value: object) -> "SightingFilters":
        if key not in {f.name for f in fields(self)}:
            raise KeyError(f"Unknown filter: {key}")
        return replace(self, **{key: value})


def format_coordinate(value: float) -> str:
    """Render a coordinate the way it is displayed, without a trailing ``.0``."""

    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def _contains(haystack: object, needle: str) -> bool:
    return isinstance(haystack, str) and needle in haystack.casefold()


def matches_text(sighting: "Sighting", term: str) -> bool:
    """Return ``True`` when *term* occurs in the species, notes or file path."""

    needle = (term or "").strip().casefold()
    if not needle:
        return True
    return (
        _contains(sighting.species, needle)
        or _contains(sighting.notes, needle)
        or _contains(sighting.file_path, needle)
    )


def _matches_species(sighting: "Sighting", species: str) -> bool:
    return not species or _contains(sighting.species, species.casefold())


def _matches_date_range(
    sighting: "Sighting",
    start: Optional[datetime],
    end: Optional[datetime],
    tz: Optional[tzinfo],
) -> bool:
    if start is None and end is None:
        return True
    parsed = parse_datetime(sighting.datetime)
    if parsed is None:
        return False
    moment = to_local(parsed, tz)
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True


def _matches_location(sighting: "Sighting", location: str) -> bool:
    if not location:
        return True
    if _contains(sighting.notes, location.casefold()):
        return True
    for value in (sighting.latitude, sighting.longitude):
        if value is not None and location in format_coordinate(value):
            return True
    return False


def _has_notes(sighting: "Sighting") -> bool:
    return isinstance(sighting.notes, str) and bool(sighting.notes.strip())


def filter_sightings(
    sightings: Iterable["Sighting"],
    term: str = "",
    filters: Optional[SightingFilters] = None,
    tz: Optional[tzinfo] = None,
) -> List["Sighting"]:
    """Apply the free-text *term* and *filters* to *sightings*, preserving order.

    ``date_to`` covers the whole day so a sighting at 23:59 on that date still
    matches.  Undated sightings never satisfy an active date bound.
    """

    filters = filters or SightingFilters()
    from_day = parse_day(filters.date_from) if filters.date_from else None
    to_day = parse_day(filters.date_to) if filters.date_to else None
    start = datetime.combine(from_day, time.min) if from_day else None
    end = datetime.combine(to_day, time.max) if to_day else None

    results: List["Sighting"] = []
    for sighting in sightings:
        if not matches_text(sighting, term):
            continue
        if not _matches_species(sighting, filters.species):
            continue
        if not _matches_date_range(sighting, start, end, tz):
            continue
        if not _matches_location(sighting, filters.location):
            continue
        if filters.has_coordinates and not sighting.has_coordinates:
            continue
        if filters.has_notes and not _has_notes(sighting):
            continue
        results.append(sighting)
    return results


def unique_species(sightings: Iterable["Sighting"]) -> List[str]:
    """Return the distinct non-blank species names, sorted case-insensitively."""

    names = {s.species for s in sightings if isinstance(s.species, str) and s.species.strip()}
    return sorted(names, key=lambda name: (name.lower(), name))


SUGGESTION_LIMIT = 8


@dataclass(frozen=True)
class SpeciesEntry:
    """One row of the species reference list used for name suggestions."""

    common_name: str
    scientific_name: str = ""
    family: str = ""

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SpeciesEntry":
        return cls(
            common_name=str(mapping.get("common_name") or ""),
            scientific_name=str(mapping.get("scientific_name") or ""),
            family=str(mapping.get("family") or ""),
        )


def _suggestion_key(entry: SpeciesEntry, needle: str) -> tuple:
    common = entry.common_name.casefold()
    return (not common.startswith(needle), common, entry.common_name)


def suggest_species(entries: Iterable[SpeciesEntry], term: str, limit: int = SUGGESTION_LIMIT) -> List[SpeciesEntry]:
    """Return up to *limit* entries whose common, scientific or family name contains *term*.

    Common names starting with *term* come first, then alphabetical order by
    common name. A blank *term* suggests nothing.
    """

    needle = (term or "").strip().casefold()
    if not needle or limit <= 0:
        return []
    matches = [
        entry
        for entry in entries
        if needle in entry.common_name.casefold()
        or needle in entry.scientific_name.casefold()
        or needle in entry.family.casefold()
    ]
    matches.sort(key=lambda entry: _suggestion_key(entry, needle))
    return matches[:limit]
