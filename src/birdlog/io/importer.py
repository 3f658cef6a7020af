"""Photo import helpers: extension filtering and EXIF prefill for new sightings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from PIL import Image

from ..config import IMAGE_EXTENSIONS
from ..models.sighting import SightingInput, create_sighting

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

# EXIF tag numbers
EXIF_IFD = 0x8769
GPS_IFD = 0x8825
EXIF_DATETIME = 0x0132  # 306, IFD0
EXIF_DATETIME_ORIGINAL = 0x9003  # 36867, Exif IFD
GPS_LATITUDE_REF = 1
GPS_LATITUDE = 2
GPS_LONGITUDE_REF = 3
GPS_LONGITUDE = 4

_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


@dataclass(frozen=True)
class PhotoMetadata:
    """Subset of a photo's EXIF data used to prefill a sighting."""

    datetime: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


def is_supported_image(path: PathLike) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def collect_images(paths: Iterable[PathLike]) -> List[Path]:
    """Return the supported image files among *paths*.

    Directories contribute their direct children in name order; nested
    folders are not descended into.  Order is preserved and duplicates are
    dropped.
    """

    seen = set()
    images: List[Path] = []
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            candidates = sorted(child for child in path.iterdir() if child.is_file())
        else:
            candidates = [path]
        for candidate in candidates:
            if not is_supported_image(candidate) or candidate in seen:
                continue
            seen.add(candidate)
            images.append(candidate)
    return images


def _exif_datetime(raw: Any) -> str:
    if not isinstance(raw, str):
        return ""
    try:
        return datetime.strptime(raw.strip().rstrip("\x00"), _EXIF_DATE_FORMAT).isoformat()
    except ValueError:
        return ""


def _rational(value: Any) -> float:
    # Pillow hands back IFDRational values; older writers store (num, den) pairs.
    if isinstance(value, tuple):
        numerator, denominator = value
        return numerator / denominator
    return float(value)


def _to_degrees(values: Any, ref: Any) -> Optional[float]:
    if not values or len(values) != 3:
        return None
    try:
        degrees, minutes, seconds = (_rational(part) for part in values)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    result = degrees + minutes / 60 + seconds / 3600
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", "ignore")
    if isinstance(ref, str) and ref.strip().upper() in {"S", "W"}:
        result = -result
    return result


def read_photo_metadata(path: PathLike) -> PhotoMetadata:
    """Read the capture time and GPS position embedded in *path*.

    Unreadable or EXIF-less files yield empty metadata; the failure is logged
    and never raised.
    """

    try:
        with Image.open(path) as image:
            exif = image.getexif()
            taken = _exif_datetime(exif.get_ifd(EXIF_IFD).get(EXIF_DATETIME_ORIGINAL))
            if not taken:
                taken = _exif_datetime(exif.get(EXIF_DATETIME))
            gps = exif.get_ifd(GPS_IFD)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Unable to read EXIF from %s: %s", path, exc)
        return PhotoMetadata()

    latitude = longitude = None
    if gps:
        latitude = _to_degrees(gps.get(GPS_LATITUDE), gps.get(GPS_LATITUDE_REF))
        longitude = _to_degrees(gps.get(GPS_LONGITUDE), gps.get(GPS_LONGITUDE_REF))
        if latitude is None or longitude is None:
            latitude = longitude = None
    return PhotoMetadata(datetime=taken, latitude=latitude, longitude=longitude)


def draft_sighting(path: PathLike) -> SightingInput:
    """Return a new, unsaved sighting for *path* prefilled from its EXIF data."""

    metadata = read_photo_metadata(path)
    return create_sighting(
        file_path=str(path),
        datetime=metadata.datetime,
        latitude=metadata.latitude,
        longitude=metadata.longitude,
    )
