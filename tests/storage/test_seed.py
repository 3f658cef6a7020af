from __future__ import annotations

from datetime import datetime, timezone

import pytest

from birdlog.models import create_sighting, validate
from birdlog.storage import clear_seed_data, create_seed_sightings, seed_if_empty

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def test_seed_sightings_are_deterministic_and_valid() -> None:
    first = create_seed_sightings(NOW)
    second = create_seed_sightings(NOW)

    assert first == second
    assert len(first) == 8
    assert first[0].species == "American Robin"
    assert first[0].datetime == "2024-05-10T12:00:00.000Z"
    assert first[-1].datetime == "2024-05-03T12:00:00.000Z"
    assert all(validate(sighting).is_valid for sighting in first)


def test_empty_fallback_store_is_seeded_once(settings_store) -> None:
    ids = seed_if_empty(settings_store, now=NOW)
    again = seed_if_empty(settings_store, now=NOW)

    assert len(ids) == 8
    assert again == []
    listing = [s.species for s in settings_store.get_all_sightings().data]
    assert listing[:2] == ["American Robin", "Northern Cardinal"]
    assert listing[-1] == "American Crow"


def test_store_with_data_is_left_alone(settings_store) -> None:
    settings_store.insert_sighting(create_sighting(file_path="mine.jpg"))

    assert seed_if_empty(settings_store, now=NOW) == []
    assert settings_store.count() == 1


def test_relational_store_is_never_seeded(sqlite_store) -> None:
    assert seed_if_empty(sqlite_store, now=NOW) == []
    assert sqlite_store.count() == 0


def test_clear_seed_data_empties_the_fallback(settings_store) -> None:
    seed_if_empty(settings_store, now=NOW)

    clear_seed_data(settings_store)

    assert settings_store.count() == 0


def test_clear_seed_data_refuses_the_relational_store(sqlite_store) -> None:
    with pytest.raises(ValueError):
        clear_seed_data(sqlite_store)
