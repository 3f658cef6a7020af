"""Photo import and JSON export helpers."""

from .export import export_file_name, export_species
from .importer import (
    PhotoMetadata,
    collect_images,
    draft_sighting,
    is_supported_image,
    read_photo_metadata,
)

__all__ = [
    "PhotoMetadata",
    "collect_images",
    "draft_sighting",
    "export_file_name",
    "export_species",
    "is_supported_image",
    "read_photo_metadata",
]
