"""Background worker running a storage call off the GUI thread."""

from __future__ import annotations

from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, Signal

from ..errors import BirdlogError
from ..utils.logging import get_logger

logger = get_logger("tasks")


class StoreTaskSignals(QObject):
    """Signals emitted by :class:`StoreTaskWorker`."""

    finished = Signal(object)
    """Emitted with the operation's return value (usually a ``StoreResult``)."""

    error = Signal(str)
    """Emitted when the operation raised instead of returning."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class StoreTaskWorker(QRunnable):
    """Execute one storage operation in a :class:`QThreadPool` worker.

    Stores never raise for storage failures, so :attr:`StoreTaskSignals.error`
    only fires for caller mistakes such as validation errors.
    """

    def __init__(self, operation: Callable[..., Any], *args: Any, signals: StoreTaskSignals | None = None) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._operation = operation
        self._args = args
        self.signals = signals or StoreTaskSignals()

    def run(self) -> None:  # type: ignore[override]
        name = getattr(self._operation, "__name__", repr(self._operation))
        logger.debug("Running store task %s", name)
        try:
            result = self._operation(*self._args)
        except BirdlogError as exc:
            self.signals.error.emit(str(exc))
            return
        except Exception as exc:  # noqa: BLE001 - report to the caller instead of killing the pool thread
            logger.exception("Store task %s crashed", name)
            self.signals.error.emit(str(exc))
            return
        self.signals.finished.emit(result)
