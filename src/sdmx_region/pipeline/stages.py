from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from sdmx_region.catalogue.dimensions import (
    OBSERVATION_DIMENSIONS,
    SERIES_DIMENSIONS,
    DimensionDescriptor,
    DimensionInfo,
    decode_dimension_catalogue,
    parse_dimension_descriptors,
    structure_dimensions,
)
from sdmx_region.catalogue.roles import RoleIds, SpecialRoles, resolve_special_roles
from sdmx_region.diagnostics import StructuralDefect, report_defect
from sdmx_region.pipeline.columns import (
    build_region_column,
    build_total_columns,
    build_value_columns,
)
from sdmx_region.pipeline.combinations import (
    CombinationSet,
    enumerate_combinations,
    narrow_special_dimensions,
)
from sdmx_region.pipeline.concepts import DisplayVariablesConcept, build_concept_bridge
from sdmx_region.table import Column

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogueStage:
    descriptors: tuple[DimensionDescriptor, ...]
    roles: SpecialRoles
    info: DimensionInfo
    concepts: tuple[DisplayVariablesConcept, ...] = ()
    defects: tuple[StructuralDefect, ...] = field(default=())

    @property
    def is_usable(self) -> bool:
        return self.roles.has_regions and self.info.is_dense


@dataclass(frozen=True)
class TableStage:
    catalogue: CatalogueStage
    combinations: CombinationSet
    registry: tuple[tuple[int, ...], ...]
    region_column: Column | None
    value_columns: tuple[Column, ...]
    total_columns: tuple[Column, ...]

    @property
    def concepts(self) -> tuple[DisplayVariablesConcept, ...]:
        return self.catalogue.concepts

    def columns(self) -> list[Column]:
        if self.region_column is None:
            return []
        return [self.region_column, *self.value_columns, *self.total_columns]


def dataset_series(document: Mapping[str, Any]) -> Mapping[str, Any]:
    data_sets = document.get("dataSets")
    if not isinstance(data_sets, list) or not data_sets:
        raise ValueError("SDMX-JSON document has no dataSets")
    if len(data_sets) > 1:
        LOGGER.info("Using the first of %d dataSets", len(data_sets))
    series = data_sets[0].get("series") if isinstance(data_sets[0], Mapping) else None
    return series if isinstance(series, Mapping) else {}


def decode_catalogue(
    raw_dimensions: list[Any],
    role_ids: RoleIds,
) -> CatalogueStage:
    descriptors = parse_dimension_descriptors(raw_dimensions)
    roles = resolve_special_roles(descriptors, role_ids)
    info = decode_dimension_catalogue(descriptors)
    defects = list(info.defects)
    if not roles.has_regions:
        report_defect(
            defects,
            "missing_region_dimension",
            f"no {role_ids.region!r} or {role_ids.region_type!r} dimension defined",
        )
    stage = CatalogueStage(descriptors=descriptors, roles=roles, info=info, defects=tuple(defects))
    if not stage.is_usable:
        return stage
    return replace(stage, info=narrow_special_dimensions(info, roles))


def build_metadata_catalogue(
    document: Mapping[str, Any],
    role_ids: RoleIds | None = None,
) -> CatalogueStage:
    """Decode a dataflow (metadata only) response into concepts for selection."""
    role_ids = role_ids or RoleIds()
    raw = structure_dimensions(document, OBSERVATION_DIMENSIONS) or structure_dimensions(
        document, SERIES_DIMENSIONS
    )
    stage = decode_catalogue(raw, role_ids)
    if not stage.is_usable:
        return stage
    combinations = enumerate_combinations(stage.info, stage.roles.fixed_dimensions())
    _, concepts = build_concept_bridge(stage.info, combinations)
    return replace(stage, concepts=concepts)


def build_region_table(
    document: Mapping[str, Any],
    role_ids: RoleIds | None = None,
) -> TableStage | None:
    """Run the full decode -> enumerate -> synthesize -> bridge pipeline.

    Returns ``None`` when the region dimensions cannot be resolved or a
    keyPosition slot is missing.
    """
    role_ids = role_ids or RoleIds()
    stage = decode_catalogue(structure_dimensions(document, SERIES_DIMENSIONS), role_ids)
    if not stage.is_usable:
        return None
    series = dataset_series(document)

    combinations = enumerate_combinations(stage.info, stage.roles.fixed_dimensions())
    region_column = build_region_column(stage.descriptors, stage.roles)
    value_columns = build_value_columns(combinations, series, stage.roles)
    registry, concepts = build_concept_bridge(stage.info, combinations)
    total_columns = build_total_columns(
        concepts, registry, value_columns, row_count=stage.roles.region_count
    )
    LOGGER.info(
        "Built %d value columns for %d regions (%d concepts)",
        len(value_columns),
        stage.roles.region_count,
        len(concepts),
    )
    return TableStage(
        catalogue=replace(stage, concepts=concepts),
        combinations=combinations,
        registry=registry,
        region_column=region_column,
        value_columns=tuple(value_columns),
        total_columns=tuple(total_columns),
    )
