from __future__ import annotations

import math

from sdmx_region.table import Column, TableStructure, sum_values


def test_sum_values_treats_missing_as_zero_unless_all_missing() -> None:
    totals = sum_values(
        [
            Column("Births", [10, None, 5, None]),
            Column("Deaths", [1, None, None, 2.5]),
        ]
    )

    assert totals == [11.0, None, 5.0, 2.5]


def test_sum_values_of_no_columns_is_empty() -> None:
    assert sum_values([]) == []


def test_splice_trailing_keeps_leading_columns() -> None:
    region = Column("lga_code", ["R1", "R2"], kind="region")
    births = Column("Births", [1, 2])
    table = TableStructure(name="t", columns=[region, births, Column("Total selected", [0, 0])])

    table.splice_trailing(2, [Column("Total selected", [1, 2], is_active=True)])

    assert table.columns[0] is region
    assert table.columns[1] is births
    assert table.column_names() == ["lga_code", "Births", "Total selected"]
    assert [column.name for column in table.active_columns()] == ["Total selected"]
    assert table.row_count == 2


def test_to_frame_keeps_region_ids_and_coerces_values() -> None:
    table = TableStructure(
        columns=[
            Column("lga_code", ["10050", "10110"], kind="region"),
            Column("Births", [10, None]),
        ]
    )
    frame = table.to_frame()

    assert list(frame.columns) == ["lga_code", "Births"]
    assert frame["lga_code"].tolist() == ["10050", "10110"]
    assert frame["Births"].iloc[0] == 10
    assert math.isnan(frame["Births"].iloc[1])
    assert TableStructure().to_frame().empty
