from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping


def load_document(path: Path) -> Mapping[str, Any]:
    """Read a local SDMX-JSON message."""
    if path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported document file type: {path.suffix}")
    with path.open("r", encoding="utf-8-sig") as handle:
        payload = json.load(handle)
    if not isinstance(payload, Mapping):
        raise ValueError(f"SDMX-JSON document must be an object: {path}")
    return payload
