from __future__ import annotations

from datetime import date, timedelta, timezone

import pytest

from birdlog.models import Sighting
from birdlog.query import SortMode, group_by_day, sort_newest_first, sort_sightings

UTC = timezone.utc
HONOLULU = timezone(timedelta(hours=-10))


def _sighting(sighting_id: int, moment: str, created_at: str = "") -> Sighting:
    return Sighting(id=sighting_id, file_path=f"{sighting_id}.jpg", datetime=moment, created_at=created_at)


SIGHTINGS = [
    _sighting(1, "2024-03-10T08:00:00Z"),
    _sighting(2, ""),
    _sighting(3, "2024-03-10T23:30:00Z"),
    _sighting(4, "not a date"),
]


def test_groups_follow_the_local_calendar_day_in_utc() -> None:
    groups = group_by_day(SIGHTINGS, tz=UTC)

    assert [g.key for g in groups] == ["2024-03-10", "no-date"]
    assert [s.id for s in groups[0].sightings] == [3, 1]
    assert groups[0].day == date(2024, 3, 10)
    assert groups[-1].is_undated
    assert len(groups[-1]) == 2


def test_groups_shift_with_the_time_zone() -> None:
    groups = group_by_day(SIGHTINGS, tz=HONOLULU)

    assert [g.key for g in groups] == ["2024-03-10", "2024-03-09", "no-date"]
    assert [s.id for s in groups[0].sightings] == [3]
    assert [s.id for s in groups[1].sightings] == [1]


def test_naive_datetimes_are_wall_clock_time() -> None:
    groups = group_by_day([_sighting(1, "2024-03-10T23:30:00")], tz=HONOLULU)

    assert [g.key for g in groups] == ["2024-03-10"]


def test_no_date_group_is_last_even_when_alone() -> None:
    groups = group_by_day([_sighting(1, "")])

    assert [g.key for g in groups] == ["no-date"]
    assert group_by_day([]) == []


def test_sort_breaks_ties_by_creation_then_id() -> None:
    ordered = sort_newest_first(
        [
            _sighting(1, "2024-03-10T08:00:00Z", created_at="2024-03-10T09:00:00.000Z"),
            _sighting(2, "2024-03-10T08:00:00Z", created_at="2024-03-10T10:00:00.000Z"),
            _sighting(3, "2024-03-10T08:00:00Z", created_at="2024-03-10T10:00:00.000Z"),
            _sighting(4, "2024-03-11T08:00:00Z"),
            _sighting(5, ""),
        ]
    )

    assert [s.id for s in ordered] == [4, 3, 2, 1, 5]


def _named(sighting_id: int, species: str, moment: str) -> Sighting:
    return Sighting(id=sighting_id, file_path=f"{sighting_id}.jpg", species=species, datetime=moment)


GALLERY = [
    _named(1, "blue jay", "2024-03-10T08:00:00Z"),
    _named(2, "American Robin", ""),
    _named(3, "Northern Cardinal", "2024-05-01T08:00:00Z"),
    _named(4, "Blue Jay", "2023-12-24T08:00:00Z"),
]


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        (SortMode.NEWEST, [3, 1, 4, 2]),
        ("oldest", [2, 4, 1, 3]),
        ("species", [2, 1, 4, 3]),
    ],
)
def test_gallery_sort_modes(mode, expected) -> None:
    assert [s.id for s in sort_sightings(GALLERY, mode)] == expected


def test_gallery_sort_treats_undated_as_the_epoch() -> None:
    sightings = [_named(1, "Wren", "1969-07-20T20:00:00Z"), _named(2, "Wren", "")]

    assert [s.id for s in sort_sightings(sightings, SortMode.OLDEST)] == [1, 2]
    assert [s.id for s in sort_sightings(sightings)] == [2, 1]


def test_gallery_sort_rejects_unknown_modes() -> None:
    with pytest.raises(ValueError):
        sort_sightings(GALLERY, "random")
