from __future__ import annotations

from dataclasses import dataclass, replace
from typing import AbstractSet

from sdmx_region.catalogue.dimensions import DimensionInfo
from sdmx_region.catalogue.roles import SpecialRoles
from sdmx_region.combinatorics import array_product

UNIQUE_VALUE_COLUMN_NAME = "Value"


@dataclass(frozen=True)
class CombinationSet:
    values: tuple[tuple[int, ...], ...]
    names: tuple[tuple[str, ...], ...]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_unique(self) -> bool:
        return len(self.values) <= 1

    def _joined_name(self, combination_index: int) -> str:
        return " ".join(name for name in self.names[combination_index] if name)

    def display_name(self, combination_index: int) -> str:
        if self.is_unique:
            return UNIQUE_VALUE_COLUMN_NAME
        return self._joined_name(combination_index) or UNIQUE_VALUE_COLUMN_NAME

    def is_pre_active(self, combination_index: int) -> bool:
        return self.is_unique or not self._joined_name(combination_index)


def narrow_special_dimensions(info: DimensionInfo, roles: SpecialRoles) -> DimensionInfo:
    """Hold region, region-type, frequency and time dimensions at their first value.

    Region values are substituted per row later, so only slot 0 is enumerated.
    """
    fixed = roles.fixed_dimensions()
    if not fixed:
        return info
    values = list(info.values)
    names = list(info.names)
    ids = list(info.ids)
    for index in fixed:
        if index >= info.dimension_count:
            continue
        values[index] = values[index][:1]
        names[index] = ("",) * len(values[index])
        ids[index] = ids[index][:1]
    return replace(info, values=tuple(values), names=tuple(names), ids=tuple(ids))


def enumerate_combinations(
    info: DimensionInfo,
    fixed_dimensions: AbstractSet[int] = frozenset(),
) -> CombinationSet:
    value_arrays = []
    name_arrays = []
    for index in range(info.dimension_count):
        if index in fixed_dimensions:
            value_arrays.append(info.values[index][:1])
            name_arrays.append(("",) * len(info.values[index][:1]))
        else:
            value_arrays.append(info.values[index])
            name_arrays.append(info.names[index])
    return CombinationSet(
        values=tuple(array_product(value_arrays)),
        names=tuple(array_product(name_arrays)),
    )
