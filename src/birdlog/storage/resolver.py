"""Select the storage backend for the running session."""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..config import DB_FILE_NAME, PROBE_INTERVAL_MS, PROBE_MAX_ATTEMPTS
from ..errors import StorageError, StoreUnavailableError
from .base import SightingStore
from .sqlite_store import SqliteSightingStore

_LOGGER = logging.getLogger(__name__)

StoreProbe = Callable[[], Optional[SightingStore]]
StoreFactory = Callable[[], SightingStore]

# ``create_function(..., deterministic=True)`` needs SQLite 3.8.3.
_MIN_SQLITE_VERSION = (3, 8, 3)


def sqlite_probe(data_dir: Path) -> StoreProbe:
    """Return a probe that opens the relational store inside *data_dir*.

    The probe reports ``None`` while the engine is too old or the directory
    cannot be created or written, for example when the data directory lives on
    a volume that is not mounted yet.
    """

    def probe() -> Optional[SightingStore]:
        if sqlite3.sqlite_version_info < _MIN_SQLITE_VERSION:
            _LOGGER.warning("SQLite %s is too old for the sighting store", sqlite3.sqlite_version)
            return None
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _LOGGER.debug("Data directory %s unavailable: %s", data_dir, exc)
            return None
        if not os.access(data_dir, os.W_OK):
            _LOGGER.debug("Data directory %s is not writable", data_dir)
            return None
        store = SqliteSightingStore(data_dir / DB_FILE_NAME)
        try:
            store.open()
        except StorageError as exc:
            _LOGGER.debug("Relational store unavailable: %s", exc)
            return None
        return store

    return probe


class StoreResolver(QObject):
    """Decide once per session which backend answers the store interface.

    The native backend is probed immediately; if it is missing the probe is
    repeated on a timer for a bounded number of attempts before committing to
    the fallback.  Polling runs on the event loop and never blocks it.  The
    decision is final for the session and announced once via :attr:`resolved`.
    """

    resolved = Signal(object)

    def __init__(
        self,
        probe: StoreProbe,
        fallback: StoreFactory,
        *,
        interval_ms: int = PROBE_INTERVAL_MS,
        max_attempts: int = PROBE_MAX_ATTEMPTS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._probe = probe
        self._fallback = fallback
        self._max_attempts = max(0, int(max_attempts))
        self._attempts = 0
        self._store: Optional[SightingStore] = None
        self._timer = QTimer(self)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self._retry)

    # ------------------------------------------------------------------
    @property
    def store(self) -> Optional[SightingStore]:
        return self._store

    @property
    def is_resolved(self) -> bool:
        return self._store is not None

    @property
    def is_probing(self) -> bool:
        return self._timer.isActive()

    @property
    def attempts(self) -> int:
        """Number of retries performed after the initial probe."""

        return self._attempts

    @property
    def backend_kind(self) -> Optional[str]:
        return self._store.kind if self._store is not None else None

    # ------------------------------------------------------------------
    def start(self) -> None:
        """Probe now and schedule retries if the native backend is absent."""

        if self._store is not None or self._timer.isActive():
            return
        if self._try_probe():
            return
        if self._max_attempts == 0:
            self._commit_fallback()
            return
        _LOGGER.info(
            "Native sighting store not available yet; retrying every %d ms (%d attempts)",
            self._timer.interval(),
            self._max_attempts,
        )
        self._timer.start()

    def resolve_now(self) -> SightingStore:
        """Resolve synchronously: one probe, then the fallback.  For headless use."""

        if self._store is None:
            self._timer.stop()
            if not self._try_probe():
                self._commit_fallback()
        if self._store is None:
            raise StoreUnavailableError("No sighting store could be opened")
        return self._store

    # ------------------------------------------------------------------
    def _try_probe(self) -> bool:
        try:
            store = self._probe()
        except Exception as exc:  # noqa: BLE001 - a failing probe means "not available"
            _LOGGER.warning("Sighting store probe raised: %s", exc)
            store = None
        if store is None:
            return False
        self._commit(store)
        return True

    def _retry(self) -> None:
        self._attempts += 1
        if self._try_probe():
            return
        if self._attempts >= self._max_attempts:
            _LOGGER.warning(
                "Native sighting store unavailable after %d attempts; using fallback store",
                self._attempts,
            )
            self._commit_fallback()

    def _commit_fallback(self) -> None:
        store = self._fallback()
        if store is None:
            self._timer.stop()
            _LOGGER.error("Fallback sighting store factory returned no store")
            return
        self._commit(store)

    def _commit(self, store: SightingStore) -> None:
        self._timer.stop()
        self._store = store
        _LOGGER.info("Using %s sighting store", store.kind)
        self.resolved.emit(store)
