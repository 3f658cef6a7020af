"""Write a species' sightings and summary to a JSON file."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from ..models.sighting import Sighting
from ..query.stats import species_sightings, species_summary
from ..storage.base import format_utc
from ..utils.jsonio import write_json

_LOGGER = logging.getLogger(__name__)


def export_file_name(species: str) -> str:
    """Return the default export file name, e.g. ``American_Robin_sightings.json``."""

    stem = re.sub(r"\s+", "_", species.strip()) or "unknown"
    return f"{stem}_sightings.json"


def export_species(
    path: Path,
    species: str,
    sightings: Iterable[Sighting],
    *,
    now: Optional[datetime] = None,
) -> Path:
    """Export every sighting of *species* with its summary statistics.

    When *path* is an existing directory the default file name is used inside
    it.  The file is written atomically; the written path is returned.
    """

    target = Path(path)
    if target.is_dir():
        target = target / export_file_name(species)

    pool = list(sightings)
    matches = species_sightings(pool, species)
    summary = species_summary(pool, species)
    statistics = asdict(summary)
    statistics.pop("latest")
    payload = {
        "species": species,
        "statistics": statistics,
        "sightings": [sighting.to_dict() for sighting in matches],
        "exportDate": format_utc(now or datetime.now(timezone.utc)),
    }
    write_json(target, payload)
    _LOGGER.info("Exported %d %s sightings to %s", len(matches), species, target)
    return target
