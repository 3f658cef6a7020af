"""Fallback sighting store kept in a Qt key-value settings file.

Used when the relational database cannot be reached.  The whole collection
lives as one JSON array under a single key; every call deserialises it and
every mutation writes it back.  There are no indexes, which is acceptable for
a single user's local data.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from datetime import datetime, timezone
from typing import List, Optional

from PySide6.QtCore import QByteArray, QSettings

from ..config import APPLICATION_NAME, ORGANIZATION_NAME, SETTINGS_KEY
from ..errors import PayloadInvalidError, StorageError
from ..models.sighting import EDITABLE_FIELDS, Sighting, SightingInput, as_sighting_input
from ..utils.jsonio import decode_array, encode_array
from .base import SightingStore, StoreResult, format_utc, order_records

_LOGGER = logging.getLogger(__name__)


def utc_now_text() -> str:
    """Return the current UTC time in the same format the relational store uses."""

    return format_utc(datetime.now(timezone.utc))


def _next_id(records: List[Sighting], floor: int = 0) -> int:
    # Millisecond clock scaled up with a random low part so two inserts in the
    # same millisecond do not collide; always above the current maximum and
    # above *floor*, the last id handed out by this store.
    candidate = int(time.time() * 1000) * 1000 + random.randrange(1000)
    highest = max((record.id for record in records), default=0)
    return max(candidate, highest + 1, floor + 1)


class SettingsSightingStore(SightingStore):
    """Key-value fallback answering the same interface as the SQLite store."""

    kind = "settings"
    durable = False

    def __init__(self, settings: Optional[QSettings] = None, key: str = SETTINGS_KEY) -> None:
        self._settings = settings if settings is not None else QSettings(ORGANIZATION_NAME, APPLICATION_NAME)
        self._key = key
        self._lock = threading.RLock()
        self._last_id = 0

    @property
    def key(self) -> str:
        return self._key

    def close(self) -> None:
        with self._lock:
            self._settings.sync()

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def _load(self) -> List[Sighting]:
        raw = self._settings.value(self._key, "")
        if raw is None:
            payload = ""
        elif isinstance(raw, QByteArray):
            payload = bytes(raw.data()).decode("utf-8")
        elif isinstance(raw, (bytes, bytearray)):
            payload = bytes(raw).decode("utf-8")
        elif isinstance(raw, str):
            payload = raw
        else:
            raise PayloadInvalidError(f"Unexpected value type under {self._key!r}: {type(raw).__name__}")
        return [Sighting.from_mapping(item) for item in decode_array(payload)]

    def _save(self, records: List[Sighting]) -> None:
        existed = self._settings.contains(self._key)
        previous = self._settings.value(self._key) if existed else None
        self._settings.setValue(self._key, encode_array([record.to_dict() for record in records]))
        self._settings.sync()
        if self._settings.status() == QSettings.Status.NoError:
            return
        # setValue already replaced the cached value; put the old one back so
        # later reads do not see a write that never reached the file.
        if existed:
            self._settings.setValue(self._key, previous)
        else:
            self._settings.remove(self._key)
        raise StorageError(f"Unable to write sightings to {self._settings.fileName()}")

    def _failed(self, action: str, exc: Exception) -> StoreResult:
        _LOGGER.error("Fallback sighting %s failed: %s", action, exc)
        return StoreResult.failure(str(exc))

    @staticmethod
    def _index_of(records: List[Sighting], sighting_id: int) -> int:
        for index, record in enumerate(records):
            if record.id == sighting_id:
                return index
        return -1

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def insert_sighting(self, sighting: SightingInput) -> StoreResult:
        try:
            with self._lock:
                sighting = as_sighting_input(sighting)
                records = self._load()
                now = utc_now_text()
                new_id = _next_id(records, self._last_id)
                record = Sighting(
                    **sighting.editable().to_dict(),
                    id=new_id,
                    created_at=now,
                    updated_at=now,
                )
                records.append(record)
                self._save(records)
                self._last_id = new_id
            return StoreResult.ok(id=record.id)
        except (PayloadInvalidError, StorageError, TypeError, ValueError) as exc:
            return self._failed("insert", exc)

    def get_all_sightings(self) -> StoreResult:
        try:
            with self._lock:
                records = self._load()
            return StoreResult.ok(data=order_records(records))
        except (PayloadInvalidError, TypeError, ValueError) as exc:
            return self._failed("listing", exc)

    def get_sighting_by_id(self, sighting_id: int) -> StoreResult:
        try:
            with self._lock:
                records = self._load()
            index = self._index_of(records, sighting_id)
            return StoreResult.ok(data=records[index] if index >= 0 else None)
        except (PayloadInvalidError, TypeError, ValueError) as exc:
            return self._failed("lookup", exc)

    def update_sighting(self, sighting_id: int, sighting: SightingInput) -> StoreResult:
        try:
            sighting = as_sighting_input(sighting)
            with self._lock:
                records = self._load()
                index = self._index_of(records, sighting_id)
                if index < 0:
                    return StoreResult.ok(changes=0)
                record = records[index]
                for name in EDITABLE_FIELDS:
                    setattr(record, name, getattr(sighting, name))
                record.updated_at = utc_now_text()
                self._save(records)
            return StoreResult.ok(changes=1)
        except (PayloadInvalidError, StorageError, TypeError, ValueError) as exc:
            return self._failed("update", exc)

    def delete_sighting(self, sighting_id: int) -> StoreResult:
        try:
            with self._lock:
                records = self._load()
                index = self._index_of(records, sighting_id)
                if index < 0:
                    return StoreResult.ok(changes=0)
                del records[index]
                self._save(records)
            return StoreResult.ok(changes=1)
        except (PayloadInvalidError, StorageError, TypeError, ValueError) as exc:
            return self._failed("delete", exc)

    def search_sightings(self, term: str) -> StoreResult:
        needle = (term or "").strip().casefold()
        if not needle:
            return self.get_all_sightings()
        try:
            with self._lock:
                records = self._load()
            matches = [
                record
                for record in records
                if needle in (record.species or "").casefold() or needle in (record.notes or "").casefold()
            ]
            return StoreResult.ok(data=order_records(matches))
        except (PayloadInvalidError, TypeError, ValueError) as exc:
            return self._failed("search", exc)

    def clear(self) -> None:
        """Remove the stored collection entirely."""

        with self._lock:
            self._settings.remove(self._key)
            self._settings.sync()
        _LOGGER.info("Cleared fallback sightings under %s", self._key)
