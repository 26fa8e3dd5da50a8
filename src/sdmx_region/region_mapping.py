from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol, Sequence

from sdmx_region.table import TableStructure

LOGGER = logging.getLogger(__name__)

# csv-geo-au region types recognised by default.
DEFAULT_REGION_TYPES = ["AUS", "STE", "SA4", "SA3", "SA2", "SA1", "CED", "LGA", "POA", "SED"]


@dataclass(frozen=True)
class RegionDetails:
    region_type: str
    column_name: str
    column_index: int


class RegionMapping(Protocol):
    def load_region_details(self, table: TableStructure) -> RegionDetails | None: ...

    def set_region_column_type(self, table: TableStructure, details: RegionDetails) -> None: ...


class CsvGeoRegionMapping:
    """Recognise csv-geo-au style region columns for a list of region types."""

    def __init__(self, region_types: Sequence[str] | None = None) -> None:
        self.region_types = [code.lower() for code in (region_types or DEFAULT_REGION_TYPES)]
        # Accepts lga_code, lga_code_2013 and lga2013_code.
        self._patterns = [
            (code, re.compile(rf"^{re.escape(code)}(\d{{4}})?_code(_\d{{4}})?$"))
            for code in self.region_types
        ]

    def match_region_type(self, column_name: str) -> str | None:
        lowered = column_name.lower()
        for code, pattern in self._patterns:
            if pattern.match(lowered):
                return code
        return None

    def load_region_details(self, table: TableStructure) -> RegionDetails | None:
        for column_index, column in enumerate(table.columns):
            if column.kind != "region":
                continue
            region_type = self.match_region_type(column.name)
            if region_type is not None:
                return RegionDetails(
                    region_type=region_type,
                    column_name=column.name,
                    column_index=column_index,
                )
        if table.columns:
            LOGGER.info("No recognised region column among %s", table.column_names())
        return None

    def set_region_column_type(self, table: TableStructure, details: RegionDetails) -> None:
        column = table.columns[details.column_index]
        column.region_type = details.region_type
        column.is_active = False
