"""Background worker helpers."""

from .store_worker import StoreTaskSignals, StoreTaskWorker

__all__ = ["StoreTaskSignals", "StoreTaskWorker"]
