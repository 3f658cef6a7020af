"""Schema bootstrap for the relational sighting store."""

from __future__ import annotations

import logging
import sqlite3

_LOGGER = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# ISO-8601 UTC with milliseconds so created_at breaks ordering ties reliably.
UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS sightings (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    file_path   TEXT NOT NULL,
    species     TEXT NOT NULL DEFAULT '',
    datetime    TEXT NOT NULL DEFAULT '',
    latitude    REAL,
    longitude   REAL,
    notes       TEXT NOT NULL DEFAULT '',
    created_at  TEXT NOT NULL DEFAULT ({UTC_NOW_SQL}),
    updated_at  TEXT NOT NULL DEFAULT ({UTC_NOW_SQL})
);
CREATE INDEX IF NOT EXISTS idx_sightings_datetime ON sightings(datetime);
CREATE INDEX IF NOT EXISTS idx_sightings_species ON sightings(species);
"""


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the sightings table and its indexes if they are missing.

    Idempotent; runs on every launch.
    """

    conn.executescript(SCHEMA_SQL)
    current = conn.execute("PRAGMA user_version").fetchone()[0]
    if current < SCHEMA_VERSION:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        _LOGGER.info("Initialised sightings schema (version %d)", SCHEMA_VERSION)
    conn.commit()
