from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence

from sdmx_region.catalogue.roles import RoleIds
from sdmx_region.config import AppConfig
from sdmx_region.io.fetch import JsonFetcher, build_fetcher
from sdmx_region.io.urls import (
    DEFAULT_AGENCY,
    Topology,
    clean_url,
    data_url,
    dataflow_url,
    detect_topology,
    proxy_url,
)
from sdmx_region.pipeline.columns import build_total_columns
from sdmx_region.pipeline.concepts import ConceptTree, DisplayVariablesConcept, VariableConcept
from sdmx_region.pipeline.filters import build_filter_expression, has_empty_selection
from sdmx_region.pipeline.stages import (
    CatalogueStage,
    TableStage,
    build_metadata_catalogue,
    build_region_table,
)
from sdmx_region.region_mapping import CsvGeoRegionMapping, RegionMapping
from sdmx_region.table import Column, TableStructure

LOGGER = logging.getLogger(__name__)


class LoadState(str, Enum):
    UNINITIALIZED = "uninitialized"
    METADATA_ONLY = "metadata_only"
    DATA_LOADED = "data_loaded"


class SdmxRegionCatalogItem:
    """Region-mapped table built from an SDMX-JSON endpoint.

    The topology is chosen once, when ``load`` is called. Afterwards every change
    to the concept tree either recomputes the total column in place (data
    already loaded) or fetches data filtered to the active selection
    (metadata-first, before any data has arrived).
    """

    type = "sdmx-json"
    type_name = "SDMX JSON"

    def __init__(
        self,
        url: str | None = None,
        *,
        name: str = "",
        fetch_json: JsonFetcher | None = None,
        region_mapping: RegionMapping | None = None,
        role_ids: RoleIds | None = None,
        proxy: str | None = None,
        agency: str = DEFAULT_AGENCY,
    ) -> None:
        self.url = url
        self.role_ids = role_ids or RoleIds()
        self.proxy = proxy
        self.agency = agency
        self.table = TableStructure(name=name)
        self.region_mapping = region_mapping or CsvGeoRegionMapping()
        self.topology: Topology | None = None
        self.state = LoadState.UNINITIALIZED
        self._fetch_json = fetch_json or build_fetcher()
        self._catalogue: CatalogueStage | None = None
        self._stage: TableStage | None = None
        self._generation = 0
        self._batch_depth = 0
        self._pending_change = False
        self._concept_tree = ConceptTree()
        self._concept_tree.subscribe(self._changed_active_items)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        url: str | None = None,
        name: str = "",
        fetch_json: JsonFetcher | None = None,
    ) -> SdmxRegionCatalogItem:
        return cls(
            url or config.source.url,
            name=name,
            fetch_json=fetch_json
            or build_fetcher(timeout=config.http.timeout_seconds, user_agent=config.http.user_agent),
            region_mapping=CsvGeoRegionMapping(config.regions.region_types),
            role_ids=config.dimensions.role_ids(),
            proxy=config.http.proxy_url,
            agency=config.source.agency,
        )

    @property
    def concepts(self) -> tuple[DisplayVariablesConcept, ...]:
        return self._concept_tree.concepts

    @property
    def concept_tree(self) -> ConceptTree:
        return self._concept_tree

    @property
    def active_concepts(self) -> list[list[VariableConcept]]:
        return self._concept_tree.active_items()

    @property
    def combinations(self) -> tuple[tuple[int, ...], ...]:
        return self._stage.registry if self._stage is not None else ()

    @property
    def filter_expression(self) -> str | None:
        if self._catalogue is None:
            return None
        return build_filter_expression(
            self._catalogue.info, self._catalogue.roles, self._concept_tree.concepts
        )

    def load(self) -> None:
        if not self.url:
            raise ValueError("url must be set before loading")
        self.topology = detect_topology(self.url)
        LOGGER.info("Loading %s as %s", self.url, self.topology.value)
        if self.topology is Topology.METADATA_FIRST:
            self._apply_metadata(self._fetch(dataflow_url(self.url)))
        else:
            self._apply_data(self._fetch(self.url))

    def load_document(self, document: Mapping[str, Any]) -> None:
        """Build the table from an already decoded data message."""
        self.topology = Topology.DIRECT_DATA
        self._apply_data(document)

    def _fetch(self, url: str) -> Mapping[str, Any]:
        return self._fetch_json(proxy_url(clean_url(url), self.proxy))

    def _update_columns(self, columns: Sequence[Column]) -> None:
        self.table.replace_columns(columns)
        if not self.table.columns:
            LOGGER.info("Table %r has no columns to show", self.table.name)

    def _apply_metadata(self, document: Mapping[str, Any]) -> None:
        catalogue = build_metadata_catalogue(document, self.role_ids)
        if not catalogue.is_usable:
            self._update_columns([])
            return
        self._catalogue = catalogue
        self._stage = None
        self._update_columns([])
        self._concept_tree.replace(catalogue.concepts)
        self.state = LoadState.METADATA_ONLY

    def _apply_data(self, document: Mapping[str, Any]) -> None:
        stage = build_region_table(document, self.role_ids)
        if stage is None:
            self._update_columns([])
            return
        self._stage = stage
        # Concepts and columns are both in place before any total is recomputed.
        self._concept_tree.replace(stage.concepts)
        self._update_columns(stage.columns())
        self.state = LoadState.DATA_LOADED

        details = self.region_mapping.load_region_details(self.table)
        if details is not None:
            self.region_mapping.set_region_column_type(self.table, details)

    @contextmanager
    def batched_changes(self) -> Iterator[None]:
        """Apply several selection changes and react to them once on exit.

        Before data is loaded this turns a run of toggles into a single
        filtered request instead of one request per toggle.
        """
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            pending = self._batch_depth == 0 and self._pending_change
            if self._batch_depth == 0:
                self._pending_change = False
        if pending:
            self._changed_active_items()

    def _changed_active_items(self) -> None:
        if self._batch_depth:
            self._pending_change = True
            return
        if self.state is LoadState.DATA_LOADED:
            self.recompute_totals()
        elif self.state is LoadState.METADATA_ONLY:
            self.reload_selection()

    def recompute_totals(self) -> None:
        stage = self._stage
        if stage is None or not self.table.columns:
            return
        keep = len(stage.registry) + 1
        totals = build_total_columns(
            self._concept_tree.concepts,
            stage.registry,
            self.table.columns[1:keep],
            row_count=self.table.row_count,
        )
        self.table.splice_trailing(keep, totals)

    def reload_selection(self) -> None:
        catalogue = self._catalogue
        if catalogue is None or not self.url:
            return
        if has_empty_selection(self._concept_tree.concepts):
            LOGGER.info("A concept has no active items; not requesting data")
            self._update_columns([])
            return
        expression = build_filter_expression(
            catalogue.info, catalogue.roles, self._concept_tree.concepts
        )
        self._generation += 1
        generation = self._generation
        document = self._fetch(data_url(self.url, expression, self.agency))
        if generation != self._generation:
            LOGGER.info("Discarding response for superseded filter %s", expression)
            return
        self._apply_data(document)
