from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

import pandas as pd

ColumnKind = Literal["scalar", "region"]


@dataclass
class Column:
    name: str
    values: list[Any]
    is_active: bool = False
    kind: ColumnKind = "scalar"
    region_type: str | None = None

    def __len__(self) -> int:
        return len(self.values)

    def to_series(self) -> pd.Series:
        return pd.Series(self.values, name=self.name, dtype=object)


def _none_if_missing(value: Any) -> Any:
    if value is None or pd.isna(value):
        return None
    return float(value)


def sum_values(columns: Sequence[Column]) -> list[float | None]:
    """Element-wise sum of numeric columns.

    Missing cells count as zero unless every summand in that row is missing,
    in which case the row sum is missing too.
    """
    if not columns:
        return []
    frame = pd.concat(
        [pd.to_numeric(pd.Series(column.values, dtype=object), errors="coerce") for column in columns],
        axis=1,
        ignore_index=True,
    )
    totals = frame.sum(axis=1, min_count=1)
    return [_none_if_missing(value) for value in totals.tolist()]


@dataclass
class TableStructure:
    name: str = ""
    columns: list[Column] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    def replace_columns(self, columns: Sequence[Column]) -> None:
        self.columns = list(columns)

    def splice_trailing(self, keep: int, trailing: Sequence[Column]) -> None:
        """Keep the first ``keep`` columns and replace everything after them."""
        self.columns = self.columns[:keep] + list(trailing)

    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def active_columns(self) -> list[Column]:
        return [column for column in self.columns if column.is_active]

    def to_frame(self) -> pd.DataFrame:
        if not self.columns:
            return pd.DataFrame()
        series = []
        for column in self.columns:
            values = column.to_series()
            if column.kind == "scalar":
                values = pd.to_numeric(values, errors="coerce")
            series.append(values)
        return pd.concat(series, axis=1)
