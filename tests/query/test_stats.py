from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from birdlog.models import Sighting
from birdlog.query import Intensity, compute_stats, heatmap_calendar, intensity_for, monthly_timeline, species_summary
from birdlog.query.stats import available_years, species_sightings, year_stats

UTC = timezone.utc


def _sighting(sighting_id: int, species: str, moment: str, latitude=None, longitude=None) -> Sighting:
    return Sighting(
        id=sighting_id,
        file_path=f"{sighting_id}.jpg",
        species=species,
        datetime=moment,
        latitude=latitude,
        longitude=longitude,
    )


@pytest.mark.parametrize(
    ("count", "expected"),
    [
        (0, Intensity.EMPTY),
        (1, Intensity.LOW),
        (2, Intensity.MEDIUM),
        (3, Intensity.MEDIUM),
        (4, Intensity.HIGH),
        (6, Intensity.HIGH),
        (7, Intensity.HIGHEST),
    ],
)
def test_intensity_bands(count: int, expected: Intensity) -> None:
    assert intensity_for(count) is expected


def test_compute_stats_picks_the_busiest_day() -> None:
    sightings = [
        _sighting(1, "Robin", "2024-03-10T08:00:00Z"),
        _sighting(2, "Robin", "2024-03-10T09:00:00Z"),
        _sighting(3, "Wren", "2024-03-12T09:00:00Z"),
        _sighting(4, "", ""),
    ]

    stats = compute_stats(sightings, tz=UTC)

    assert stats.total == 4
    assert stats.unique_species == 2
    assert stats.active_days == 2
    assert stats.best_day == date(2024, 3, 10)
    assert stats.best_day_count == 2


def test_best_day_ties_go_to_the_most_recent_day() -> None:
    sightings = [_sighting(1, "Robin", "2024-03-10T08:00:00Z"), _sighting(2, "Wren", "2024-03-12T08:00:00Z")]

    assert compute_stats(sightings, tz=UTC).best_day == date(2024, 3, 12)


def test_empty_collection_stats() -> None:
    stats = compute_stats([])

    assert (stats.total, stats.active_days, stats.best_day, stats.best_day_count) == (0, 0, None, 0)


def test_heatmap_covers_whole_weeks_around_the_year() -> None:
    sightings = [
        _sighting(1, "Robin", "2023-12-31T12:00:00Z"),
        _sighting(2, "Robin", "2024-03-10T08:00:00Z"),
        _sighting(3, "Wren", "2024-03-10T09:00:00Z"),
    ]

    cells = heatmap_calendar(sightings, 2024, tz=UTC)

    assert len(cells) == 371
    assert cells[0].day == date(2023, 12, 31)
    assert cells[0].day.weekday() == 6
    assert cells[-1].day == date(2025, 1, 4)
    assert cells[0].count == 0 and not cells[0].in_year
    by_day = {cell.day: cell for cell in cells}
    assert by_day[date(2024, 3, 10)].count == 2
    assert by_day[date(2024, 3, 10)].intensity is Intensity.MEDIUM
    assert by_day[date(2024, 3, 11)].intensity is Intensity.EMPTY


def test_year_stats_and_available_years() -> None:
    sightings = [
        _sighting(1, "Robin", "2023-06-01T12:00:00Z"),
        _sighting(2, "Robin", "2024-03-10T08:00:00Z"),
        _sighting(3, "Wren", "2024-03-10T09:00:00Z"),
        _sighting(4, "Wren", "2024-04-01T09:00:00Z"),
    ]

    stats = year_stats(sightings, 2024, tz=UTC)

    assert (stats.total, stats.active_days, stats.max_day) == (3, 2, 2)
    assert available_years(sightings, today=date(2025, 2, 1), tz=UTC) == [2025, 2024, 2023]
    assert available_years([], today=date(2025, 2, 1)) == [2025]


def test_species_summary() -> None:
    sightings = [
        _sighting(1, "American Robin", "2024-01-01T08:00:00", 40.7128, -74.006),
        _sighting(2, "american robin", "2024-01-31T08:00:00", 40.7128, -74.006),
        _sighting(3, "American Robin", "2024-03-01T08:00:00", 41.0, -73.5),
        _sighting(4, "Blue Jay", "2024-03-02T08:00:00", 40.0, -74.0),
        _sighting(5, "American Robin", ""),
    ]

    summary = species_summary(sightings, "American Robin")

    assert summary.total == 4
    assert summary.first_seen == datetime(2024, 1, 1, 8, 0)
    assert summary.last_seen == datetime(2024, 3, 1, 8, 0)
    assert summary.total_locations == 2
    assert summary.most_active_location == "40.7128,-74.0060"
    assert summary.average_per_month == 2.0
    assert summary.latest.id == 3
    assert [s.id for s in species_sightings(sightings, "AMERICAN ROBIN")] == [3, 2, 1, 5]


def test_species_summary_for_unknown_species() -> None:
    summary = species_summary([], "Dodo")

    assert summary.total == 0
    assert summary.latest is None


def test_monthly_timeline_newest_month_first() -> None:
    sightings = [
        _sighting(1, "Robin", "2024-01-05T08:00:00"),
        _sighting(2, "Robin", "2024-03-01T08:00:00"),
        _sighting(3, "Robin", "2024-01-20T08:00:00"),
        _sighting(4, "Robin", ""),
    ]

    timeline = monthly_timeline(sightings)

    assert [group.key for group in timeline] == ["2024-03", "2024-01"]
    assert [s.id for s in timeline[1].sightings] == [3, 1]
