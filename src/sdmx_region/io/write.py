from __future__ import annotations

import logging
from pathlib import Path

from sdmx_region.table import TableStructure

LOGGER = logging.getLogger(__name__)

TABLE_FORMATS = ("csv", "parquet")


def write_table(table: TableStructure, path: Path, fmt: str = "csv") -> Path:
    """Write the region table with region codes kept as text."""
    if fmt not in TABLE_FORMATS:
        raise ValueError(f"Unsupported table format: {fmt}")
    if not table.columns:
        raise ValueError(f"Table {table.name!r} has no columns to write")
    frame = table.to_frame()
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        frame.to_parquet(path, index=False)
    else:
        frame.to_csv(path, index=False)
    LOGGER.info("Wrote %d rows x %d columns to %s", len(frame), len(frame.columns), path)
    return path
