"""Single initialisation point owning the session's sighting store."""

from __future__ import annotations

import atexit
from pathlib import Path
from typing import Any, Callable, Optional, Union

from PySide6.QtCore import QCoreApplication, QObject, QSettings, QThreadPool, Signal

from .config import PROBE_INTERVAL_MS, PROBE_MAX_ATTEMPTS, resolve_data_dir
from .errors import SightingValidationError, StoreUnavailableError
from .models.sighting import (
    SightingInput,
    SightingLike,
    create_sighting,
    normalize_coordinates,
    validate,
)
from .storage.base import SightingStore, StoreResult
from .storage.resolver import StoreProbe, StoreResolver, sqlite_probe
from .storage.seed import seed_if_empty
from .storage.settings_store import SettingsSightingStore
from .tasks.store_worker import StoreTaskSignals, StoreTaskWorker
from .utils.logging import get_logger

logger = get_logger("service")

_OPERATIONS = frozenset(
    {
        "insert_sighting",
        "get_all_sightings",
        "get_sighting_by_id",
        "update_sighting",
        "delete_sighting",
        "search_sightings",
    }
)


class SightingService(QObject):
    """Validate sighting input and forward it to the resolved backend.

    Views never talk to a store directly.  The service is constructed once at
    startup, decides the backend through :class:`StoreResolver` and closes the
    store again when the application quits.
    """

    ready = Signal(str)
    """Emitted with the backend kind once the store has been resolved."""

    sightingsChanged = Signal()
    """Emitted after an insert, update or delete changed stored data."""

    def __init__(
        self,
        data_dir: Union[str, Path, None] = None,
        *,
        settings: Optional[QSettings] = None,
        probe: Optional[StoreProbe] = None,
        seed_demo_data: bool = False,
        interval_ms: int = PROBE_INTERVAL_MS,
        max_attempts: int = PROBE_MAX_ATTEMPTS,
        thread_pool: Optional[QThreadPool] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._data_dir = Path(data_dir) if data_dir is not None else resolve_data_dir()
        self._settings = settings
        self._seed_demo_data = seed_demo_data
        self._pool = thread_pool or QThreadPool.globalInstance()
        self._atexit_registered = False
        self._closed = False

        self._resolver = StoreResolver(
            probe or sqlite_probe(self._data_dir),
            self._create_fallback,
            interval_ms=interval_ms,
            max_attempts=max_attempts,
            parent=self,
        )
        self._resolver.resolved.connect(self._on_resolved)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def is_ready(self) -> bool:
        return self._resolver.is_resolved

    @property
    def backend_kind(self) -> Optional[str]:
        return self._resolver.backend_kind

    @property
    def store(self) -> SightingStore:
        store = self._resolver.store
        if store is None or self._closed:
            raise StoreUnavailableError("The sighting store has not been resolved yet")
        return store

    def start(self) -> None:
        """Begin backend detection without blocking the event loop."""

        self._register_shutdown()
        self._resolver.start()

    def resolve_now(self) -> SightingStore:
        """Resolve the backend synchronously and return it."""

        self._register_shutdown()
        return self._resolver.resolve_now()

    def shutdown(self) -> None:
        """Wait for pending store tasks and close the store.  Safe to call twice."""

        if self._closed:
            return
        self._closed = True
        self._pool.waitForDone()
        store = self._resolver.store
        if store is not None:
            store.close()
            logger.info("Closed %s sighting store", store.kind)

    def _register_shutdown(self) -> None:
        if self._atexit_registered:
            return
        self._atexit_registered = True
        atexit.register(self.shutdown)
        app = QCoreApplication.instance()
        if app is not None:
            app.aboutToQuit.connect(self.shutdown)

    def _create_fallback(self) -> SightingStore:
        return SettingsSightingStore(self._settings)

    def _on_resolved(self, store: SightingStore) -> None:
        if self._seed_demo_data and seed_if_empty(store):
            self.sightingsChanged.emit()
        self.ready.emit(store.kind)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    @staticmethod
    def prepare(sighting: SightingLike) -> SightingInput:
        """Return a complete, validated :class:`SightingInput` for *sighting*.

        Raw mappings (form input) have their coordinates normalised first;
        typed inputs are taken as they are.  Raises
        :class:`SightingValidationError` listing every violated rule.
        """

        if isinstance(sighting, SightingInput):
            candidate = sighting.editable()
        else:
            candidate = create_sighting(**normalize_coordinates(sighting))
        result = validate(candidate)
        if not result:
            raise SightingValidationError(result.errors)
        return candidate

    def insert_sighting(self, sighting: SightingLike) -> StoreResult:
        result = self.store.insert_sighting(self.prepare(sighting))
        if result.success:
            self.sightingsChanged.emit()
        return result

    def get_all_sightings(self) -> StoreResult:
        return self.store.get_all_sightings()

    def get_sighting_by_id(self, sighting_id: int) -> StoreResult:
        return self.store.get_sighting_by_id(sighting_id)

    def update_sighting(self, sighting_id: int, sighting: SightingLike) -> StoreResult:
        result = self.store.update_sighting(sighting_id, self.prepare(sighting))
        if result.success and result.changes:
            self.sightingsChanged.emit()
        return result

    def delete_sighting(self, sighting_id: int) -> StoreResult:
        result = self.store.delete_sighting(sighting_id)
        if result.success and result.changes:
            self.sightingsChanged.emit()
        return result

    def search_sightings(self, term: str) -> StoreResult:
        return self.store.search_sightings(term)

    def submit(
        self,
        operation: Union[str, Callable[..., Any]],
        *args: Any,
        on_finished: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> StoreTaskSignals:
        """Run *operation* on the thread pool and return the worker's signals.

        *operation* is the name of one of the operations above or any
        callable.  The callbacks are connected before the worker is queued so
        a fast task cannot finish unobserved.
        """

        if self._closed:
            raise StoreUnavailableError("The sighting service has been shut down")
        if isinstance(operation, str):
            if operation not in _OPERATIONS:
                raise ValueError(f"Unknown store operation: {operation}")
            operation = getattr(self, operation)
        signals = StoreTaskSignals()
        if on_finished is not None:
            signals.finished.connect(on_finished)
        if on_error is not None:
            signals.error.connect(on_error)
        self._pool.start(StoreTaskWorker(operation, *args, signals=signals))
        return signals
