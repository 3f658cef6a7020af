"""Sighting storage package.

Two interchangeable backends answer one logical interface
(:class:`~birdlog.storage.base.SightingStore`):

- `sqlite_store`: durable, indexed persistence in one SQLite file (preferred)
- `settings_store`: a JSON array under one key of a Qt settings file (fallback)
- `resolver`: the single probe deciding, once per session, which backend is used
- `schema`: idempotent table and index bootstrap for the relational backend
- `seed`: opt-in demo data for an empty fallback store

Every operation returns a :class:`~birdlog.storage.base.StoreResult` and never
raises past the store boundary.
"""

from .base import SightingStore, StoreResult, order_records
from .resolver import StoreResolver, sqlite_probe
from .seed import clear_seed_data, create_seed_sightings, seed_if_empty
from .settings_store import SettingsSightingStore
from .sqlite_store import SqliteSightingStore

__all__ = [
    "SettingsSightingStore",
    "SightingStore",
    "SqliteSightingStore",
    "StoreResolver",
    "StoreResult",
    "clear_seed_data",
    "create_seed_sightings",
    "order_records",
    "seed_if_empty",
    "sqlite_probe",
]
