"""Coordinate helpers backing the map view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, NamedTuple, Optional

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..models.sighting import Sighting


class Bounds(NamedTuple):
    south: float
    west: float
    north: float
    east: float


@dataclass
class LocationGroup:
    """Sightings whose coordinates coincide at the grouping precision."""

    key: str
    latitude: float
    longitude: float
    sightings: List["Sighting"] = field(default_factory=list)


def location_key(latitude: float, longitude: float, precision: int = 4) -> str:
    return f"{latitude:.{precision}f},{longitude:.{precision}f}"


def sightings_with_coordinates(sightings: Iterable["Sighting"]) -> List["Sighting"]:
    return [s for s in sightings if s.latitude is not None and s.longitude is not None]


def group_by_location(sightings: Iterable["Sighting"], precision: int = 4) -> List[LocationGroup]:
    """Group located sightings by rounded coordinates, in first-seen order.

    A group keeps the exact coordinates of its first sighting as its marker
    position.
    """

    groups: Dict[str, LocationGroup] = {}
    for sighting in sightings_with_coordinates(sightings):
        key = location_key(sighting.latitude, sighting.longitude, precision)
        group = groups.get(key)
        if group is None:
            group = groups[key] = LocationGroup(key, sighting.latitude, sighting.longitude)
        group.sightings.append(sighting)
    return list(groups.values())


def bounds(sightings: Iterable["Sighting"]) -> Optional[Bounds]:
    """Return the bounding box of all located sightings, or ``None``."""

    located = sightings_with_coordinates(sightings)
    if not located:
        return None
    latitudes = [s.latitude for s in located]
    longitudes = [s.longitude for s in located]
    return Bounds(min(latitudes), min(longitudes), max(latitudes), max(longitudes))
