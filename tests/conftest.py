import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Headless Qt for the ``qapp`` fixture provided by pytest-qt.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSettings, QThreadPool  # noqa: E402

from birdlog.storage import SettingsSightingStore, SqliteSightingStore  # noqa: E402


@pytest.fixture
def sqlite_store(tmp_path: Path):
    store = SqliteSightingStore(tmp_path / "data" / "sightings.db")
    store.open()
    yield store
    store.close()


@pytest.fixture
def settings(tmp_path: Path) -> QSettings:
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def settings_store(settings: QSettings) -> SettingsSightingStore:
    return SettingsSightingStore(settings)


@pytest.fixture(params=["sqlite", "settings"])
def any_store(request):
    """Run a test once against each backend."""

    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def thread_pool():
    pool = QThreadPool()
    yield pool
    pool.waitForDone()
