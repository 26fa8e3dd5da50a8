from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import typer

from sdmx_region.config import AppConfig, load_config
from sdmx_region.controller import LoadState, SdmxRegionCatalogItem
from sdmx_region.io.read import load_document
from sdmx_region.io.write import write_table
from sdmx_region.logging import configure_logging

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    return load_config(config_path)


def _parse_selection(raw: str) -> tuple[str, str]:
    dimension_id, separator, value_id = raw.partition("=")
    if not separator or not dimension_id.strip() or not value_id.strip():
        raise typer.BadParameter(f"Expected DIMENSION=VALUE, got {raw!r}")
    return dimension_id.strip(), value_id.strip()


def _load_item(
    cfg: AppConfig,
    url: str | None,
    input_path: Path | None,
) -> SdmxRegionCatalogItem:
    if input_path is not None and url is not None:
        raise typer.BadParameter("Use either --url or --input, not both")
    if input_path is not None:
        document: Mapping[str, Any] = load_document(input_path)
        item = SdmxRegionCatalogItem.from_config(cfg, name=input_path.stem)
        item.load_document(document)
        return item
    resolved_url = url or cfg.source.url
    if not resolved_url:
        raise typer.BadParameter("Missing --url or --input (or source.url in the config)")
    item = SdmxRegionCatalogItem.from_config(cfg, url=resolved_url)
    item.load()
    return item


def _apply_deselections(item: SdmxRegionCatalogItem, deselect: list[str]) -> None:
    for raw in deselect:
        dimension_id, value_id = _parse_selection(raw)
        concept = item.concept_tree.concept_by_dimension_id(dimension_id)
        if concept is None:
            raise typer.BadParameter(f"No selectable dimension {dimension_id!r}")
        selected = concept.item_by_id(value_id)
        if selected is None:
            raise typer.BadParameter(f"Dimension {dimension_id!r} has no value {value_id!r}")
        selected.is_active = False


@app.command()
def convert(
    out: Path = typer.Option(..., resolve_path=True, help="Output table path."),
    url: str | None = typer.Option(None, help="SDMX-JSON data or dataset URL."),
    input_path: Path | None = typer.Option(
        None, "--input", exists=True, readable=True, resolve_path=True
    ),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    deselect: list[str] = typer.Option(
        [], help="Deactivate a selection item, as DIMENSION=VALUE. Repeatable."
    ),
    fmt: str | None = typer.Option(None, "--format", help="csv or parquet."),
) -> None:
    """Convert an SDMX-JSON dataset into a region table."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging.level)
    item = _load_item(cfg, url=url, input_path=input_path)
    with item.batched_changes():
        _apply_deselections(item, deselect)
    if item.state is LoadState.METADATA_ONLY:
        # No data request has been made yet, so ask for the current selection.
        item.reload_selection()
    if not item.table.columns:
        typer.echo("No region table could be built from this dataset.", err=True)
        raise typer.Exit(code=1)
    path = write_table(item.table, out, fmt=fmt or cfg.outputs.tables_format)
    typer.echo(
        f"Wrote {item.table.row_count} regions x {len(item.table.columns)} columns to: {path}"
    )


@app.command()
def concepts(
    url: str | None = typer.Option(None, help="SDMX-JSON data or dataset URL."),
    input_path: Path | None = typer.Option(
        None, "--input", exists=True, readable=True, resolve_path=True
    ),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """List the selectable dimensions and their values."""
    cfg = _load_app_config(config)
    configure_logging(cfg.logging.level)
    item = _load_item(cfg, url=url, input_path=input_path)
    if not item.concepts:
        typer.echo("No selectable dimensions.")
        return
    for concept in item.concepts:
        typer.echo(f"{concept.dimension_id}: {concept.name}")
        for value in concept.items:
            marker = "x" if value.is_active else " "
            typer.echo(f"  [{marker}] {value.value_id}: {value.name}")
