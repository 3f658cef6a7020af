from __future__ import annotations

import sqlite3
from pathlib import Path

from birdlog.models import create_sighting
from birdlog.storage import SqliteSightingStore


def test_schema_bootstrap_is_idempotent(tmp_path: Path) -> None:
    db_path = tmp_path / "sightings.db"
    store = SqliteSightingStore(db_path)
    store.open()
    new_id = store.insert_sighting(create_sighting(file_path="a.jpg", species="Robin")).id
    store.close()

    reopened = SqliteSightingStore(db_path)
    reopened.open()
    try:
        assert reopened.get_sighting_by_id(new_id).data.species == "Robin"
    finally:
        reopened.close()

    with sqlite3.connect(db_path) as conn:
        indexes = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        version = conn.execute("PRAGMA user_version").fetchone()[0]
    assert {"idx_sightings_datetime", "idx_sightings_species"} <= indexes
    assert version == 1


def test_open_and_close_are_safe_to_repeat(sqlite_store: SqliteSightingStore) -> None:
    sqlite_store.open()
    assert sqlite_store.is_open
    sqlite_store.close()
    sqlite_store.close()
    assert not sqlite_store.is_open


def test_operations_on_a_closed_store_fail_without_raising(tmp_path: Path) -> None:
    store = SqliteSightingStore(tmp_path / "sightings.db")

    result = store.get_all_sightings()
    insert = store.insert_sighting(create_sighting(file_path="a.jpg"))

    assert not result.success
    assert "not open" in result.error
    assert not insert.success
    assert store.count() == 0


def test_search_treats_wildcards_literally(sqlite_store: SqliteSightingStore) -> None:
    sqlite_store.insert_sighting(create_sighting(file_path="a.jpg", notes="100% sure it was a hawk"))
    sqlite_store.insert_sighting(create_sighting(file_path="b.jpg", notes="Probably a falcon"))

    percent = sqlite_store.search_sightings("%")
    underscore = sqlite_store.search_sightings("_")

    assert [s.notes for s in percent.data] == ["100% sure it was a hawk"]
    assert underscore.data == []


def test_update_refreshes_updated_at(sqlite_store: SqliteSightingStore) -> None:
    new_id = sqlite_store.insert_sighting(create_sighting(file_path="a.jpg")).id
    with sqlite3.connect(sqlite_store.db_path) as conn:
        conn.execute("UPDATE sightings SET updated_at = '2000-01-01T00:00:00.000Z' WHERE id = ?", (new_id,))

    sqlite_store.update_sighting(new_id, create_sighting(file_path="a.jpg", species="Wren"))

    stored = sqlite_store.get_sighting_by_id(new_id).data
    assert stored.updated_at > "2000-01-01T00:00:00.000Z"
    assert stored.updated_at.endswith("Z")


def test_context_manager_opens_and_closes(tmp_path: Path) -> None:
    with SqliteSightingStore(tmp_path / "sightings.db") as store:
        assert store.is_open
        assert store.insert_sighting(create_sighting(file_path="a.jpg")).success
    assert not store.is_open
