"""Sighting record schema, defaults, validation and coordinate normalisation."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Union

from ..query.dates import parse_datetime

EDITABLE_FIELDS = ("file_path", "species", "datetime", "latitude", "longitude", "notes")

# Logical (camelCase) names accepted when reading external payloads.
_ALIASES = {"filePath": "file_path", "createdAt": "created_at", "updatedAt": "updated_at"}

_STRING_DEFAULTS = ("file_path", "species", "datetime", "notes")


@dataclass
class SightingInput:
    """Editable part of a sighting, as supplied by the user or an importer."""

    file_path: str = ""
    species: str = ""
    datetime: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def editable(self) -> "SightingInput":
        """Return only the editable fields as a fresh :class:`SightingInput`."""

        return SightingInput(**{name: getattr(self, name) for name in EDITABLE_FIELDS})

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]):
        """Build an instance from *mapping*, keeping values as given.

        Unknown keys are ignored.  Values are not coerced so :func:`validate`
        can still report type errors.
        """

        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in mapping.items():
            name = _ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)


@dataclass
class Sighting(SightingInput):
    """A persisted sighting with its backend-assigned identity and timestamps."""

    id: int = 0
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: List[str]

    def __bool__(self) -> bool:
        return self.is_valid


SightingLike = Union[SightingInput, Mapping[str, Any]]


def _as_mapping(value: SightingLike) -> Mapping[str, Any]:
    if isinstance(value, SightingInput):
        return value.to_dict()
    return {_ALIASES.get(key, key): item for key, item in value.items()}


def create_sighting(**partial: Any) -> SightingInput:
    """Return a complete :class:`SightingInput` with empty defaults for omitted fields.

    Strings default to ``""`` and coordinates to ``None`` so every field is
    always present when the record is serialised.
    """

    data = dict(_as_mapping(partial))
    for name in _STRING_DEFAULTS:
        if data.get(name) is None:
            data[name] = ""
    for name in ("latitude", "longitude"):
        data.setdefault(name, None)
    return SightingInput.from_mapping(data)


def as_sighting_input(value: SightingLike) -> SightingInput:
    """Return *value* as a :class:`SightingInput`, filling defaults for a mapping.

    Raises :class:`TypeError` for anything else so stores can report it.
    """

    if isinstance(value, SightingInput):
        return value
    if isinstance(value, Mapping):
        return create_sighting(**value)
    raise TypeError(f"Expected a sighting or mapping, got {type(value).__name__}")


def _is_real_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate(sighting: SightingLike) -> ValidationResult:
    """Check *sighting* against the schema and report every violated rule."""

    data = _as_mapping(sighting)
    errors: List[str] = []

    file_path = data.get("file_path")
    if not isinstance(file_path, str) or not file_path:
        errors.append("filePath is required and must be a string")

    if not isinstance(data.get("species"), str):
        errors.append("species must be a string")

    moment = data.get("datetime")
    if not isinstance(moment, str):
        errors.append("datetime must be a string")
    elif moment.strip() and parse_datetime(moment) is None:
        errors.append("datetime must be a valid ISO date string")

    latitude = data.get("latitude")
    if latitude is not None and not (_is_real_number(latitude) and -90 <= latitude <= 90):
        errors.append("latitude must be null or a number between -90 and 90")

    longitude = data.get("longitude")
    if longitude is not None and not (_is_real_number(longitude) and -180 <= longitude <= 180):
        errors.append("longitude must be null or a number between -180 and 180")

    if not isinstance(data.get("notes"), str):
        errors.append("notes must be a string")

    return ValidationResult(is_valid=not errors, errors=errors)


def _coerce_coordinate(value: object) -> Optional[float]:
    if not value:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        # Left for the validator to reject.
        return math.nan


def normalize_coordinates(metadata: SightingLike) -> Dict[str, Any]:
    """Convert user-entered latitude/longitude strings to floats or ``None``.

    Range checks are not performed here; run :func:`validate` afterwards.
    """

    data = dict(_as_mapping(metadata))
    data["latitude"] = _coerce_coordinate(data.get("latitude"))
    data["longitude"] = _coerce_coordinate(data.get("longitude"))
    return data
