from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from birdlog.io import PhotoMetadata, collect_images, draft_sighting, is_supported_image, read_photo_metadata
from birdlog.models import validate

EXIF_IFD = 0x8769
GPS_IFD = 0x8825


def _write_jpeg(path: Path, exif: Image.Exif | None = None) -> Path:
    image = Image.new("RGB", (8, 8), "white")
    if exif is None:
        image.save(path)
    else:
        image.save(path, exif=exif)
    return path


@pytest.mark.parametrize("name", ["a.jpg", "b.JPEG", "c.png", "d.gif", "e.bmp", "f.webp"])
def test_supported_extensions(name: str) -> None:
    assert is_supported_image(name)


@pytest.mark.parametrize("name", ["clip.mov", "notes.txt", "raw.cr2", "noext"])
def test_unsupported_extensions(name: str) -> None:
    assert not is_supported_image(name)


def test_collect_images_expands_folders_without_recursing(tmp_path: Path) -> None:
    album = tmp_path / "album"
    (album / "nested").mkdir(parents=True)
    for name in ("b.PNG", "a.jpg", "notes.txt", "nested/c.jpg"):
        (album / name).write_bytes(b"")
    single = tmp_path / "single.webp"
    single.write_bytes(b"")

    images = collect_images([album, single, album / "a.jpg", tmp_path / "video.mov"])

    assert images == [album / "a.jpg", album / "b.PNG", single]


def test_capture_time_prefers_date_time_original(tmp_path: Path) -> None:
    exif = Image.Exif()
    exif[0x0132] = "2020:01:01 00:00:00"
    exif[EXIF_IFD] = {0x9003: "2024:05:01 07:45:30"}
    path = _write_jpeg(tmp_path / "robin.jpg", exif)

    assert read_photo_metadata(path).datetime == "2024-05-01T07:45:30"


def test_capture_time_falls_back_to_image_date(tmp_path: Path) -> None:
    exif = Image.Exif()
    exif[0x0132] = "2023:11:02 16:20:00"
    path = _write_jpeg(tmp_path / "wren.jpg", exif)

    assert read_photo_metadata(path).datetime == "2023-11-02T16:20:00"


def test_gps_position_becomes_signed_decimal_degrees(tmp_path: Path) -> None:
    exif = Image.Exif()
    exif[GPS_IFD] = {
        1: "N",
        2: (40.0, 42.0, 46.08),
        3: "W",
        4: (74.0, 0.0, 21.6),
    }
    path = _write_jpeg(tmp_path / "hawk.jpg", exif)

    metadata = read_photo_metadata(path)

    assert metadata.latitude == pytest.approx(40.7128, abs=1e-4)
    assert metadata.longitude == pytest.approx(-74.006, abs=1e-4)


def test_images_without_exif_give_empty_metadata(tmp_path: Path) -> None:
    path = tmp_path / "plain.png"
    Image.new("RGB", (4, 4)).save(path)

    assert read_photo_metadata(path) == PhotoMetadata()


def test_unreadable_files_give_empty_metadata(tmp_path: Path) -> None:
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"definitely not a jpeg")

    assert read_photo_metadata(broken) == PhotoMetadata()
    assert read_photo_metadata(tmp_path / "missing.jpg") == PhotoMetadata()


def test_draft_sighting_is_prefilled_and_valid(tmp_path: Path) -> None:
    exif = Image.Exif()
    exif[0x0132] = "2023:11:02 16:20:00"
    path = _write_jpeg(tmp_path / "wren.jpg", exif)

    draft = draft_sighting(path)

    assert draft.file_path == str(path)
    assert draft.datetime == "2023-11-02T16:20:00"
    assert draft.species == ""
    assert draft.latitude is None
    assert validate(draft).is_valid
