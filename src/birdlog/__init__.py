"""Local-first birding journal data layer.

Sightings are persisted through :class:`~birdlog.service.SightingService`,
which picks the SQLite backend when it is available and a Qt settings file
otherwise, and browsed through :class:`~birdlog.catalog.SightingCatalog`.
"""

from .catalog import SearchStats, SightingCatalog
from .errors import (
    BirdlogError,
    PayloadInvalidError,
    SightingValidationError,
    StorageError,
    StoreUnavailableError,
)
from .models import Sighting, SightingInput, create_sighting, normalize_coordinates, validate
from .service import SightingService
from .storage import SettingsSightingStore, SightingStore, SqliteSightingStore, StoreResult

__all__ = [
    "BirdlogError",
    "PayloadInvalidError",
    "SearchStats",
    "Sighting",
    "SightingCatalog",
    "SightingInput",
    "SightingService",
    "SightingStore",
    "SightingValidationError",
    "SettingsSightingStore",
    "SqliteSightingStore",
    "StorageError",
    "StoreResult",
    "StoreUnavailableError",
    "create_sighting",
    "normalize_coordinates",
    "validate",
]
