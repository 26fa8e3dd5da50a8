from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sdmx_region.catalogue.dimensions import DimensionDescriptor

DEFAULT_REGION_DIMENSION_ID = "REGION"
DEFAULT_REGION_TYPE_DIMENSION_ID = "REGIONTYPE"
DEFAULT_TIME_PERIOD_DIMENSION_ID = "TIME_PERIOD"
DEFAULT_FREQUENCY_DIMENSION_ID = "FREQUENCY"


@dataclass(frozen=True)
class RoleIds:
    region: str = DEFAULT_REGION_DIMENSION_ID
    region_type: str = DEFAULT_REGION_TYPE_DIMENSION_ID
    time_period: str = DEFAULT_TIME_PERIOD_DIMENSION_ID
    frequency: str = DEFAULT_FREQUENCY_DIMENSION_ID


@dataclass(frozen=True)
class SpecialRoles:
    region_dimension_index: int | None = None
    region_type_dimension_index: int | None = None
    time_period_dimension_index: int | None = None
    frequency_dimension_index: int | None = None
    region_count: int = 0
    region_type_count: int = 0

    @property
    def has_regions(self) -> bool:
        return (
            self.region_dimension_index is not None
            and self.region_type_dimension_index is not None
        )

    def fixed_dimensions(self) -> frozenset[int]:
        """keyPositions held at their first value while enumerating columns."""
        return frozenset(
            index
            for index in (
                self.region_dimension_index,
                self.region_type_dimension_index,
                self.time_period_dimension_index,
                self.frequency_dimension_index,
            )
            if index is not None
        )


def resolve_special_roles(
    descriptors: Sequence[DimensionDescriptor],
    role_ids: RoleIds | None = None,
) -> SpecialRoles:
    # Assumes only one region type's regions are present in a dataset.
    role_ids = role_ids or RoleIds()
    found: dict[str, DimensionDescriptor] = {}
    wanted = {
        "region": role_ids.region,
        "region_type": role_ids.region_type,
        "time_period": role_ids.time_period,
        "frequency": role_ids.frequency,
    }
    for descriptor in descriptors:
        for role, dimension_id in wanted.items():
            if role not in found and descriptor.id == dimension_id:
                found[role] = descriptor

    region = found.get("region")
    region_type = found.get("region_type")
    time_period = found.get("time_period")
    frequency = found.get("frequency")
    return SpecialRoles(
        region_dimension_index=region.key_position if region else None,
        region_type_dimension_index=region_type.key_position if region_type else None,
        time_period_dimension_index=time_period.key_position if time_period else None,
        frequency_dimension_index=frequency.key_position if frequency else None,
        region_count=len(region.values) if region else 0,
        region_type_count=len(region_type.values) if region_type else 0,
    )
