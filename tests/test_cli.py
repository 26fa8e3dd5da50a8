from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from sdmx_region.cli import app

DATASET_URL = "http://stat.example.org/sdmx-json/data/DS"
DATAFLOW_URL = "http://stat.example.org/sdmx-json/dataflow/DS"


def _dimension(key_position: int, dimension_id: str, *values: tuple[str, str]) -> dict:
    return {
        "keyPosition": key_position,
        "id": dimension_id,
        "name": dimension_id.title(),
        "values": [{"id": value_id, "name": name} for value_id, name in values],
    }


def _data_document() -> dict:
    return {
        "structure": {
            "dimensions": {
                "series": [
                    _dimension(0, "REGION", ("R1", "Region 1"), ("R2", "Region 2")),
                    _dimension(1, "REGIONTYPE", ("LGA", "LGA")),
                    _dimension(2, "MEASURE", ("BD_2", "Births"), ("BD_4", "Deaths")),
                ]
            }
        },
        "dataSets": [
            {
                "series": {
                    "0:0:0": {"observations": {"0": [10]}},
                    "1:0:0": {"observations": {"0": [20]}},
                    "1:0:1": {"observations": {"0": [3]}},
                }
            }
        ],
    }


def _write_document(tmp_path: Path, document: dict) -> Path:
    path = tmp_path / "births.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _no_proxy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SDMX_REGION_PROXY_URL", raising=False)


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "convert" in result.stdout
    assert "concepts" in result.stdout


def test_convert_writes_region_table_from_local_document(tmp_path: Path) -> None:
    input_path = _write_document(tmp_path, _data_document())
    out_path = tmp_path / "out" / "births.csv"

    runner = CliRunner()
    result = runner.invoke(app, ["convert", "--input", str(input_path), "--out", str(out_path)])

    assert result.exit_code == 0, result.stdout
    assert "Wrote 2 regions x 4 columns" in result.stdout
    frame = pd.read_csv(out_path)
    assert list(frame.columns) == ["lga_code", "Births", "Deaths", "Total selected"]
    assert frame["lga_code"].tolist() == ["R1", "R2"]
    assert frame["Total selected"].tolist() == [10.0, 23.0]


def test_convert_deselect_changes_total(tmp_path: Path) -> None:
    input_path = _write_document(tmp_path, _data_document())
    out_path = tmp_path / "births.csv"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "convert",
            "--input",
            str(input_path),
            "--out",
            str(out_path),
            "--deselect",
            "MEASURE=BD_4",
        ],
    )

    assert result.exit_code == 0, result.stdout
    frame = pd.read_csv(out_path)
    assert frame["Total selected"].tolist() == [10.0, 20.0]
    assert frame["Deaths"].isna().tolist() == [True, False]


@pytest.mark.parametrize("selection", ["MEASURE", "UNKNOWN=BD_2", "MEASURE=BD_9"])
def test_convert_rejects_bad_deselection(tmp_path: Path, selection: str) -> None:
    input_path = _write_document(tmp_path, _data_document())
    out_path = tmp_path / "births.csv"

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["convert", "--input", str(input_path), "--out", str(out_path), "--deselect", selection],
    )

    assert result.exit_code != 0
    assert not out_path.exists()


def test_convert_without_region_dimension_fails(tmp_path: Path) -> None:
    document = _data_document()
    document["structure"]["dimensions"]["series"][0]["id"] = "STATE"
    input_path = _write_document(tmp_path, document)
    out_path = tmp_path / "births.csv"

    runner = CliRunner()
    result = runner.invoke(app, ["convert", "--input", str(input_path), "--out", str(out_path)])

    assert result.exit_code == 1
    assert not out_path.exists()


def test_concepts_lists_selectable_dimensions(tmp_path: Path) -> None:
    input_path = _write_document(tmp_path, _data_document())

    runner = CliRunner()
    result = runner.invoke(app, ["concepts", "--input", str(input_path)])

    assert result.exit_code == 0, result.stdout
    assert "MEASURE: Measure" in result.stdout
    assert "  [x] BD_2: Births" in result.stdout
    assert "  [x] BD_4: Deaths" in result.stdout


def test_convert_metadata_first_url_requests_default_selection(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    dataflow = {
        "structure": {
            "dimensions": {
                "observation": [
                    _dimension(0, "REGION", ("R1", "Region 1"), ("R2", "Region 2")),
                    _dimension(1, "REGIONTYPE", ("LGA", "LGA")),
                    _dimension(2, "MEASURE", ("BD_2", "Births"), ("BD_4", "Deaths")),
                ]
            }
        }
    }
    data_url = f"{DATASET_URL}/.LGA.BD_2+BD_4/all"
    responses = {DATAFLOW_URL: dataflow, data_url: _data_document()}
    calls: list[str] = []

    def _fake_build_fetcher(**_kwargs):
        def _fetch(url: str) -> dict:
            calls.append(url)
            return responses[url]

        return _fetch

    monkeypatch.setattr("sdmx_region.controller.build_fetcher", _fake_build_fetcher)
    out_path = tmp_path / "births.csv"

    runner = CliRunner()
    result = runner.invoke(app, ["convert", "--url", DATASET_URL, "--out", str(out_path)])

    assert result.exit_code == 0, result.stdout
    assert calls == [DATAFLOW_URL, data_url]
    frame = pd.read_csv(out_path)
    assert frame["Total selected"].tolist() == [10.0, 23.0]


def test_convert_requires_a_source(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app, ["convert", "--out", str(tmp_path / "out.csv"), "--config", str(config_path)]
    )

    assert result.exit_code != 0


def test_convert_metadata_first_url_applies_all_deselections_before_fetching(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    dataflow = {
        "structure": {
            "dimensions": {
                "observation": [
                    _dimension(0, "REGION", ("R1", "Region 1"), ("R2", "Region 2")),
                    _dimension(1, "REGIONTYPE", ("LGA", "LGA")),
                    _dimension(
                        2, "MEASURE", ("BD_2", "Births"), ("BD_4", "Deaths"), ("BD_6", "Migrants")
                    ),
                ]
            }
        }
    }
    births_only = _data_document()
    births_only["structure"]["dimensions"]["series"][2]["values"] = [
        {"id": "BD_2", "name": "Births"}
    ]
    births_only["dataSets"][0]["series"] = {
        "0:0:0": {"observations": {"0": [10]}},
        "1:0:0": {"observations": {"0": [20]}},
    }
    data_url = f"{DATASET_URL}/.LGA.BD_2/all"
    responses = {DATAFLOW_URL: dataflow, data_url: births_only}
    calls: list[str] = []

    def _fake_build_fetcher(**_kwargs):
        def _fetch(url: str) -> dict:
            calls.append(url)
            return responses[url]

        return _fetch

    monkeypatch.setattr("sdmx_region.controller.build_fetcher", _fake_build_fetcher)
    out_path = tmp_path / "births.csv"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "convert",
            "--url",
            DATASET_URL,
            "--out",
            str(out_path),
            "--deselect",
            "MEASURE=BD_4",
            "--deselect",
            "MEASURE=BD_6",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert calls == [DATAFLOW_URL, data_url]
    frame = pd.read_csv(out_path)
    assert list(frame.columns) == ["lga_code", "Value"]
    assert frame["Value"].tolist() == [10, 20]
