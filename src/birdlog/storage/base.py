"""Logical storage interface shared by every sighting backend."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from ..models.sighting import Sighting, SightingInput

_LOGGER = logging.getLogger(__name__)


def format_utc(moment: datetime) -> str:
    """Format *moment* as ISO-8601 UTC with milliseconds, matching the SQLite defaults."""

    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class StoreResult:
    """Envelope returned by every store operation.

    Callers must check :attr:`success` before trusting :attr:`data`,
    :attr:`id` or :attr:`changes`.  A missing record is reported as success
    with ``data=None`` or ``changes=0``.
    """

    success: bool
    data: Any = None
    id: Optional[int] = None
    changes: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, **values: Any) -> "StoreResult":
        return cls(success=True, **values)

    @classmethod
    def failure(cls, message: str) -> "StoreResult":
        return cls(success=False, error=message)


def order_records(records: Iterable[Sighting]) -> List[Sighting]:
    """Apply the shared ordering contract to *records*.

    ``datetime`` descending, then ``created_at`` descending, then ``id``
    descending, all compared as stored text so every backend agrees with the
    relational ``ORDER BY``.  Undated records (empty string) end up last.
    """

    return sorted(
        records,
        key=lambda record: (record.datetime or "", record.created_at or "", record.id),
        reverse=True,
    )


class SightingStore(ABC):
    """Persistence backend answering the logical sighting interface.

    Implementations never raise out of the public operations: failures are
    logged and returned as ``StoreResult.failure``.
    """

    kind: str = "unknown"
    """Short backend label (``"sqlite"`` or ``"settings"``)."""

    durable: bool = False
    """Whether records survive on disk in an application-owned database file."""

    def open(self) -> None:
        """Acquire backing resources.  Safe to call more than once."""

    def close(self) -> None:
        """Release backing resources.  Safe to call more than once."""

    def __enter__(self) -> "SightingStore":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def insert_sighting(self, sighting: SightingInput) -> StoreResult:
        """Persist *sighting* and return its new id in ``StoreResult.id``."""

    @abstractmethod
    def get_all_sightings(self) -> StoreResult:
        """Return every record in ``StoreResult.data`` using the ordering contract."""

    @abstractmethod
    def get_sighting_by_id(self, sighting_id: int) -> StoreResult:
        """Return the record or ``None`` in ``StoreResult.data``."""

    @abstractmethod
    def update_sighting(self, sighting_id: int, sighting: SightingInput) -> StoreResult:
        """Replace the editable fields of a record; ``changes`` is 0 or 1."""

    @abstractmethod
    def delete_sighting(self, sighting_id: int) -> StoreResult:
        """Remove a record; ``changes`` is 0 or 1."""

    @abstractmethod
    def search_sightings(self, term: str) -> StoreResult:
        """Case-insensitive substring search over species and notes.

        A blank term returns the same records as :meth:`get_all_sightings`.
        """

    def count(self) -> int:
        """Return the number of stored records, or ``0`` if they cannot be read."""

        result = self.get_all_sightings()
        if not result.success:
            _LOGGER.warning("Unable to count %s sightings: %s", self.kind, result.error)
            return 0
        return len(result.data)
