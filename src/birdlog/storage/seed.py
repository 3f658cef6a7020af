"""Opt-in demo data for an empty fallback store.

Seeding is never triggered by a read; the service calls :func:`seed_if_empty`
only when it was constructed with ``seed_demo_data=True``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..models.sighting import SightingInput, create_sighting
from .base import SightingStore, format_utc

_LOGGER = logging.getLogger(__name__)

# (file, species, days ago, latitude, longitude, notes)
_FIXTURES = (
    ("robin-photo-1.jpg", "American Robin", 0, 40.7128, -74.0060,
     "Beautiful robin spotted in Central Park this morning. Very active and vocal."),
    ("cardinal-photo.jpg", "Northern Cardinal", 0, 40.7589, -73.9851,
     "Bright red male cardinal at the bird feeder."),
    ("bluejay-photo.jpg", "Blue Jay", 1, 40.7505, -73.9934,
     "Loud and intelligent Blue Jay caching acorns for winter."),
    ("sparrow-photo.jpg", "House Sparrow", 1, 40.7282, -74.0776,
     "Small flock of sparrows feeding on scattered seeds."),
    ("hawk-photo.jpg", "Red-tailed Hawk", 2, 40.7831, -73.9712,
     "Magnificent Red-tailed Hawk perched on a tall oak tree, scanning for prey."),
    ("finch-photo.jpg", "American Goldfinch", 3, 40.7411, -74.0106,
     "Bright yellow goldfinch feeding on thistle seeds."),
    ("woodpecker-photo.jpg", "Downy Woodpecker", 3, 40.7614, -73.9776,
     "Small woodpecker drumming on dead tree branch."),
    ("crow-photo.jpg", "American Crow", 7, 40.7320, -74.0052,
     "Intelligent crow observed using tools to extract insects."),
)


def create_seed_sightings(now: Optional[datetime] = None) -> List[SightingInput]:
    """Return the demo sightings dated relative to *now* (deterministic for a fixed *now*)."""

    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return [
        create_sighting(
            file_path=file_path,
            species=species,
            datetime=format_utc(reference - timedelta(days=days_ago)),
            latitude=latitude,
            longitude=longitude,
            notes=notes,
        )
        for file_path, species, days_ago, latitude, longitude, notes in _FIXTURES
    ]


def seed_if_empty(store: SightingStore, now: Optional[datetime] = None) -> List[int]:
    """Insert the demo sightings into an empty fallback *store*.

    Returns the new ids; an empty list when the store already holds data or is
    the durable relational store.
    """

    if store.durable:
        _LOGGER.debug("Refusing to seed demo data into the %s store", store.kind)
        return []
    if store.count() > 0:
        return []

    # Oldest first so insertion order follows observation time.
    ids: List[int] = []
    for sighting in reversed(create_seed_sightings(now)):
        result = store.insert_sighting(sighting)
        if not result.success:
            _LOGGER.error("Seeding stopped after %d sightings: %s", len(ids), result.error)
            break
        ids.append(result.id)
    _LOGGER.info("Seeded %d demo sightings into the %s store", len(ids), store.kind)
    return ids


def clear_seed_data(store: SightingStore) -> None:
    """Remove every record from a fallback *store*."""

    if store.durable:
        raise ValueError("Demo data can only be cleared from the fallback store")
    clear = getattr(store, "clear", None)
    if clear is not None:
        clear()
        return
    result = store.get_all_sightings()
    for sighting in result.data or []:
        store.delete_sighting(sighting.id)
