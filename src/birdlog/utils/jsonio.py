"""JSON helpers: array payloads for key-value storage and atomic file writes."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

from ..errors import PayloadInvalidError


def decode_array(payload: str) -> list[dict[str, Any]]:
    """Decode a serialised array of objects, treating an empty payload as ``[]``."""

    if not payload or not payload.strip():
        return []
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise PayloadInvalidError(f"Invalid JSON array payload: {exc}") from exc
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise PayloadInvalidError("JSON payload is not an array of objects")
    return data


def encode_array(items: list[dict[str, Any]]) -> str:
    """Serialise *items* compactly for key-value storage."""

    return json.dumps(items, ensure_ascii=False, separators=(",", ":"))


def atomic_write_text(path: Path, data: str) -> None:
    """Atomically write *data* into *path*."""

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    with tmp_path.open("w", encoding="utf-8") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    # ``Path.replace`` can fail transiently on Windows while another process
    # (antivirus, indexer) holds a handle on either file, so retry briefly.
    for attempt in range(5):
        try:
            tmp_path.replace(path)
            break
        except PermissionError:
            if attempt == 4:
                tmp_path.unlink(missing_ok=True)
                raise
            time.sleep(0.05 * (attempt + 1))


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Write *data* into *path* atomically as indented JSON."""

    payload = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True, default=str)
    atomic_write_text(path, payload)
