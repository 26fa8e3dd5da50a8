from __future__ import annotations

from typing import Sequence

from sdmx_region.catalogue.dimensions import DimensionInfo
from sdmx_region.catalogue.roles import SpecialRoles
from sdmx_region.pipeline.concepts import DisplayVariablesConcept

DIMENSION_SEPARATOR = "."
VALUE_SEPARATOR = "+"


def build_filter_expression(
    info: DimensionInfo,
    roles: SpecialRoles,
    concepts: Sequence[DisplayVariablesConcept],
) -> str:
    """SDMX key filter for the current selection, e.g. ``BD_2+BD_4.A``.

    The region dimension is left blank so every region is returned; the
    time-period dimension is not part of the series key and is skipped.
    """
    by_dimension = {concept.dimension_index: concept for concept in concepts}
    tokens: list[str] = []
    for index in range(info.dimension_count):
        if index == roles.time_period_dimension_index:
            continue
        if index == roles.region_dimension_index:
            tokens.append("")
        elif len(info.ids[index]) == 1:
            tokens.append(info.ids[index][0])
        elif index in by_dimension:
            tokens.append(
                VALUE_SEPARATOR.join(item.value_id for item in by_dimension[index].active_items())
            )
        else:
            tokens.append(VALUE_SEPARATOR.join(info.ids[index]))
    return DIMENSION_SEPARATOR.join(tokens)


def has_empty_selection(concepts: Sequence[DisplayVariablesConcept]) -> bool:
    return any(not concept.active_items() for concept in concepts)
