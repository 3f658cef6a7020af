"""Static configuration for birdlog."""

from __future__ import annotations

import os
from pathlib import Path

ORGANIZATION_NAME = "birdlog"
APPLICATION_NAME = "Birding Journal"

DATA_DIR_NAME = "birding-data"
DATA_DIR_ENV = "BIRDLOG_DATA_DIR"
DB_FILE_NAME = "sightings.db"

# Single key holding the serialised sighting array in the fallback store.
SETTINGS_KEY = "sightings/records"

# Backend detection: one immediate probe, then up to six retries 500 ms apart.
PROBE_INTERVAL_MS = 500
PROBE_MAX_ATTEMPTS = 6

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

NO_DATE_KEY = "no-date"


def resolve_data_dir() -> Path:
    """Return the application-private data directory.

    ``BIRDLOG_DATA_DIR`` overrides the platform location reported by Qt.  The
    directory is not created here; the storage probe decides whether it is
    usable.
    """

    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    from PySide6.QtCore import QCoreApplication, QStandardPaths

    if not QCoreApplication.organizationName():
        QCoreApplication.setOrganizationName(ORGANIZATION_NAME)
    if not QCoreApplication.applicationName():
        QCoreApplication.setApplicationName(APPLICATION_NAME)
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if not base:
        base = str(Path.home() / f".{ORGANIZATION_NAME}")
    return Path(base) / DATA_DIR_NAME
