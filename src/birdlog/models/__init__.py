"""Domain models for birdlog."""

from .sighting import (
    EDITABLE_FIELDS,
    Sighting,
    SightingInput,
    ValidationResult,
    as_sighting_input,
    create_sighting,
    normalize_coordinates,
    validate,
)

__all__ = [
    "EDITABLE_FIELDS",
    "Sighting",
    "SightingInput",
    "ValidationResult",
    "as_sighting_input",
    "create_sighting",
    "normalize_coordinates",
    "validate",
]
