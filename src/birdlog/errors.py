"""Exception hierarchy shared across birdlog."""

from __future__ import annotations

from typing import Iterable, List


class BirdlogError(Exception):
    """Base class for every error raised by birdlog."""


class SightingValidationError(BirdlogError):
    """Raised when sighting input violates one or more schema rules.

    All violations are collected so the caller can present the complete list
    at once instead of fixing one field per round trip.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "invalid sighting")


class StorageError(BirdlogError):
    """Raised inside a backend; converted into a failed result at the store boundary."""


class StoreUnavailableError(BirdlogError):
    """Raised when the service is used before a storage backend has been resolved."""


class PayloadInvalidError(BirdlogError):
    """Raised when a persisted JSON payload cannot be read back."""
