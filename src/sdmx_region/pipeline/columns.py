from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from sdmx_region.catalogue.dimensions import DimensionDescriptor
from sdmx_region.catalogue.roles import SpecialRoles
from sdmx_region.combinatorics import array_product, encode_key
from sdmx_region.pipeline.combinations import CombinationSet
from sdmx_region.pipeline.concepts import DisplayVariablesConcept
from sdmx_region.table import Column, sum_values

LOGGER = logging.getLogger(__name__)

TOTAL_COLUMN_NAME = "Total selected"
# Only the first time index is read; multi-period datasets are not expanded.
OBSERVATION_TIME_INDEX = "0"


def region_column_name(region_type_id: str) -> str:
    """Map a region-type id to its csv-geo-au column name.

    ``LGA_2013 -> lga_code_2013``; ``LGA -> lga_code``.
    """
    lowered = region_type_id.lower()
    underscore_index = lowered.rfind("_")
    if underscore_index >= 0:
        return f"{lowered[:underscore_index]}_code{lowered[underscore_index:]}"
    return f"{lowered}_code"


def _descriptor_at(
    descriptors: Sequence[DimensionDescriptor], key_position: int
) -> DimensionDescriptor:
    for descriptor in descriptors:
        if descriptor.key_position == key_position:
            return descriptor
    raise ValueError(f"no dimension at key position {key_position}")


def build_region_column(
    descriptors: Sequence[DimensionDescriptor],
    roles: SpecialRoles,
) -> Column | None:
    if not roles.has_regions:
        return None
    region = _descriptor_at(descriptors, roles.region_dimension_index)
    region_type = _descriptor_at(descriptors, roles.region_type_dimension_index)
    if not region_type.values:
        return None
    # Only the first region type is used.
    name = region_column_name(region_type.values[0].id)
    return Column(name=name, values=[value.id for value in region.values], kind="region")


def first_observation(entry: Any) -> Any:
    if not isinstance(entry, Mapping):
        return None
    observations = entry.get("observations")
    if not isinstance(observations, Mapping):
        return None
    observation = observations.get(OBSERVATION_TIME_INDEX)
    if isinstance(observation, (list, tuple)) and observation:
        return observation[0]
    return None


def build_value_columns(
    combinations: CombinationSet,
    series: Mapping[str, Any],
    roles: SpecialRoles,
) -> list[Column]:
    """One column per combination, one cell per region; absent keys become ``None``."""
    region_slot = roles.region_dimension_index
    columns: list[Column] = []
    for combination_index, combination in enumerate(combinations.values):
        indices = list(combination)
        values: list[Any] = []
        for region_index in range(roles.region_count):
            if region_slot is not None:
                indices[region_slot] = region_index
            values.append(first_observation(series.get(encode_key(indices))))
        columns.append(
            Column(
                name=combinations.display_name(combination_index),
                values=values,
                is_active=combinations.is_pre_active(combination_index),
            )
        )
    return columns


def build_total_columns(
    concepts: Sequence[DisplayVariablesConcept],
    registry: Sequence[Sequence[int]],
    value_columns: Sequence[Column],
    *,
    row_count: int,
) -> list[Column]:
    """Sum the value columns whose combination is fully active, one cell per region."""
    if not concepts:
        return []
    active_combinations = array_product([concept.active_indices() for concept in concepts])
    if not active_combinations:
        return []
    positions = {encode_key(entry): position for position, entry in enumerate(registry)}
    included = sorted(
        {
            positions[key]
            for key in (encode_key(combination) for combination in active_combinations)
            if key in positions
        }
    )
    LOGGER.debug("Total over %d of %d value columns", len(included), len(value_columns))
    if included:
        values = sum_values([value_columns[position] for position in included])
    else:
        values = [None] * row_count
    total = Column(name=TOTAL_COLUMN_NAME, values=values, is_active=True)
    return [total]
