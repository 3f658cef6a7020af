"""Relational sighting store backed by a single SQLite database file."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from ..errors import StorageError
from ..models.sighting import Sighting, SightingInput, as_sighting_input
from .base import SightingStore, StoreResult
from .schema import UTC_NOW_SQL, ensure_schema

_LOGGER = logging.getLogger(__name__)

_COLUMNS = "id, file_path, species, datetime, latitude, longitude, notes, created_at, updated_at"
_ORDER_BY = "ORDER BY datetime DESC, created_at DESC, id DESC"

_INSERT_SQL = (
    "INSERT INTO sightings (file_path, species, datetime, latitude, longitude, notes) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)
_SELECT_ALL_SQL = f"SELECT {_COLUMNS} FROM sightings {_ORDER_BY}"
_SELECT_ONE_SQL = f"SELECT {_COLUMNS} FROM sightings WHERE id = ?"
_UPDATE_SQL = (
    "UPDATE sightings SET file_path = ?, species = ?, datetime = ?, latitude = ?, "
    f"longitude = ?, notes = ?, updated_at = {UTC_NOW_SQL} WHERE id = ?"
)
_DELETE_SQL = "DELETE FROM sightings WHERE id = ?"
_SEARCH_SQL = (
    f"SELECT {_COLUMNS} FROM sightings "
    "WHERE instr(casefold(species), ?) > 0 OR instr(casefold(notes), ?) > 0 "
    f"{_ORDER_BY}"
)


def _casefold(value: Optional[str]) -> str:
    return value.casefold() if isinstance(value, str) else ""


def _coordinate(value: object) -> Optional[float]:
    return None if value is None else float(value)  # type: ignore[arg-type]


def _params(sighting: SightingInput) -> Tuple[object, ...]:
    return (
        sighting.file_path,
        sighting.species or "",
        sighting.datetime or "",
        _coordinate(sighting.latitude),
        _coordinate(sighting.longitude),
        sighting.notes or "",
    )


def _row_to_sighting(row: sqlite3.Row) -> Sighting:
    return Sighting(
        id=row["id"],
        file_path=row["file_path"],
        species=row["species"],
        datetime=row["datetime"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqliteSightingStore(SightingStore):
    """Durable, indexed persistence for one user's sightings.

    A single connection is opened by :meth:`open` and released by
    :meth:`close`.  The connection may be used from the worker pool, so every
    statement runs under one lock.
    """

    kind = "sqlite"
    durable = True

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> None:
        with self._lock:
            if self._conn is not None:
                return
            try:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self._db_path), check_same_thread=False, timeout=10.0)
            except (OSError, sqlite3.Error) as exc:
                raise StorageError(f"Unable to open sighting database {self._db_path}: {exc}") from exc
            try:
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
                conn.create_function("casefold", 1, _casefold, deterministic=True)
                ensure_schema(conn)
            except sqlite3.Error as exc:
                conn.close()
                raise StorageError(f"Unable to initialise sighting database: {exc}") from exc
            self._conn = conn
            _LOGGER.info("Opened sighting database at %s", self._db_path)

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            except sqlite3.Error as exc:
                _LOGGER.error("Error closing sighting database: %s", exc)
            finally:
                self._conn = None
            _LOGGER.info("Closed sighting database at %s", self._db_path)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            if self._conn is None:
                raise StorageError("Sighting database is not open")
            yield self._conn

    def _failed(self, action: str, exc: Exception) -> StoreResult:
        _LOGGER.error("Sighting %s failed: %s", action, exc)
        return StoreResult.failure(str(exc))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def insert_sighting(self, sighting: SightingInput) -> StoreResult:
        try:
            with self._connection() as conn, conn:
                cursor = conn.execute(_INSERT_SQL, _params(as_sighting_input(sighting)))
            return StoreResult.ok(id=cursor.lastrowid)
        except (sqlite3.Error, StorageError, TypeError, ValueError) as exc:
            return self._failed("insert", exc)

    def get_all_sightings(self) -> StoreResult:
        try:
            with self._connection() as conn:
                rows = conn.execute(_SELECT_ALL_SQL).fetchall()
            return StoreResult.ok(data=[_row_to_sighting(row) for row in rows])
        except (sqlite3.Error, StorageError) as exc:
            return self._failed("listing", exc)

    def get_sighting_by_id(self, sighting_id: int) -> StoreResult:
        try:
            with self._connection() as conn:
                row = conn.execute(_SELECT_ONE_SQL, (sighting_id,)).fetchone()
            return StoreResult.ok(data=_row_to_sighting(row) if row is not None else None)
        except (sqlite3.Error, StorageError) as exc:
            return self._failed("lookup", exc)

    def update_sighting(self, sighting_id: int, sighting: SightingInput) -> StoreResult:
        try:
            with self._connection() as conn, conn:
                cursor = conn.execute(_UPDATE_SQL, _params(as_sighting_input(sighting)) + (sighting_id,))
            return StoreResult.ok(changes=cursor.rowcount)
        except (sqlite3.Error, StorageError, TypeError, ValueError) as exc:
            return self._failed("update", exc)

    def delete_sighting(self, sighting_id: int) -> StoreResult:
        try:
            with self._connection() as conn, conn:
                cursor = conn.execute(_DELETE_SQL, (sighting_id,))
            return StoreResult.ok(changes=cursor.rowcount)
        except (sqlite3.Error, StorageError) as exc:
            return self._failed("delete", exc)

    def search_sightings(self, term: str) -> StoreResult:
        needle = (term or "").strip().casefold()
        if not needle:
            return self.get_all_sightings()
        try:
            with self._connection() as conn:
                rows = conn.execute(_SEARCH_SQL, (needle, needle)).fetchall()
            return StoreResult.ok(data=[_row_to_sighting(row) for row in rows])
        except (sqlite3.Error, StorageError) as exc:
            return self._failed("search", exc)

    def count(self) -> int:
        try:
            with self._connection() as conn:
                return int(conn.execute("SELECT COUNT(*) FROM sightings").fetchone()[0])
        except (sqlite3.Error, StorageError) as exc:
            _LOGGER.warning("Unable to count sightings: %s", exc)
            return 0
