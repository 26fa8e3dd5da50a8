from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from sdmx_region.combinatorics import value_range
from sdmx_region.diagnostics import StructuralDefect, report_defect

SERIES_DIMENSIONS = "series"
OBSERVATION_DIMENSIONS = "observation"
KEY_POSITION_DEFECTS = frozenset(
    {"key_position_out_of_range", "duplicate_key_position", "missing_key_position"}
)


@dataclass(frozen=True)
class DimensionValue:
    id: str
    name: str


@dataclass(frozen=True)
class DimensionDescriptor:
    id: str
    name: str
    key_position: int
    values: tuple[DimensionValue, ...]

    @property
    def value_ids(self) -> tuple[str, ...]:
        return tuple(value.id for value in self.values)


@dataclass(frozen=True)
class DimensionInfo:
    """Per-dimension arrays, all indexed by keyPosition."""

    values: tuple[tuple[int, ...], ...]
    names: tuple[tuple[str, ...], ...]
    ids: tuple[tuple[str, ...], ...]
    dimension_names: tuple[str, ...]
    dimension_ids: tuple[str, ...]
    defects: tuple[StructuralDefect, ...] = field(default=())

    @property
    def dimension_count(self) -> int:
        return len(self.values)

    def is_trivial(self, dimension_index: int) -> bool:
        return len(self.values[dimension_index]) <= 1

    @property
    def is_dense(self) -> bool:
        """Every keyPosition slot is filled by exactly one dimension."""
        return not any(defect.code in KEY_POSITION_DEFECTS for defect in self.defects)


def _parse_value(raw: Any) -> DimensionValue:
    if not isinstance(raw, Mapping):
        raise ValueError("dimension values must be objects with 'id' and 'name'")
    value_id = str(raw.get("id", ""))
    return DimensionValue(id=value_id, name=str(raw.get("name", value_id)))


def parse_dimension_descriptors(raw_dimensions: Sequence[Any]) -> tuple[DimensionDescriptor, ...]:
    descriptors: list[DimensionDescriptor] = []
    for position, raw in enumerate(raw_dimensions):
        if not isinstance(raw, Mapping):
            raise ValueError(f"dimension entry {position} must be an object")
        dimension_id = str(raw.get("id", ""))
        # Entries without keyPosition fall back to their array position.
        key_position = int(raw.get("keyPosition", position))
        descriptors.append(
            DimensionDescriptor(
                id=dimension_id,
                name=str(raw.get("name", dimension_id)),
                key_position=key_position,
                values=tuple(_parse_value(value) for value in raw.get("values") or []),
            )
        )
    return tuple(descriptors)


def structure_dimensions(document: Mapping[str, Any], kind: str = SERIES_DIMENSIONS) -> list[Any]:
    try:
        dimensions = document["structure"]["dimensions"]
    except (KeyError, TypeError) as exc:
        raise ValueError("SDMX-JSON document has no structure.dimensions") from exc
    raw = dimensions.get(kind) if isinstance(dimensions, Mapping) else None
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"structure.dimensions.{kind} must be a list")
    return raw


def decode_dimension_catalogue(descriptors: Sequence[DimensionDescriptor]) -> DimensionInfo:
    count = len(descriptors)
    values: list[tuple[int, ...] | None] = [None] * count
    names: list[tuple[str, ...]] = [()] * count
    ids: list[tuple[str, ...]] = [()] * count
    dimension_names = [""] * count
    dimension_ids = [""] * count
    defects: list[StructuralDefect] = []

    for descriptor in descriptors:
        slot = descriptor.key_position
        if slot < 0 or slot >= count:
            report_defect(
                defects,
                "key_position_out_of_range",
                f"dimension {descriptor.id!r} has keyPosition {slot} outside 0..{count - 1}",
                dimension_index=slot,
            )
            continue
        if values[slot] is not None:
            report_defect(
                defects,
                "duplicate_key_position",
                f"dimension {descriptor.id!r} reuses keyPosition {slot}",
                dimension_index=slot,
            )
        values[slot] = value_range(len(descriptor.values))
        ids[slot] = descriptor.value_ids
        dimension_names[slot] = descriptor.name
        dimension_ids[slot] = descriptor.id
        if len(descriptor.values) > 1:
            names[slot] = tuple(value.name for value in descriptor.values)
        else:
            # Forced single choices carry no information for a selection UI.
            names[slot] = ("",) * len(descriptor.values)

    for slot, slot_values in enumerate(values):
        if slot_values is None:
            report_defect(
                defects,
                "missing_key_position",
                f"missing dimension at key position {slot}",
                dimension_index=slot,
            )

    return DimensionInfo(
        values=tuple(slot_values or () for slot_values in values),
        names=tuple(names),
        ids=tuple(ids),
        dimension_names=tuple(dimension_names),
        dimension_ids=tuple(dimension_ids),
        defects=tuple(defects),
    )
