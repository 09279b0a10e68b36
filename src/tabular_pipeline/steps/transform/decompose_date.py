"""Step canônico: transform.decompose_date (v1).

Interpreta uma coluna textual como data e a decompõe em componentes.

Efeitos:
- a coluna original é substituída, na mesma posição, por uma coluna `date`
- são adicionadas ao final as colunas numéricas `<col>_year`,
  `<col>_month` e `<col>_day`

Regras:
- Parsing via pandas (`pd.to_datetime`) com `date_format` explícito
  (default `%Y-%m-%d`), sem inferência.
- Fail-fast: o primeiro valor não interpretável gera DateParseError com
  coluna, valor e linha; nenhum Dataset parcial é produzido.
- Células MISSING permanecem MISSING em todas as colunas geradas.
- Coluna já tipada como `date` é apenas decomposta.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from tabular_pipeline.core.dataset import MISSING, Column, ColumnType, Dataset
from tabular_pipeline.core.exceptions import ColumnTypeError, DateParseError
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep

DEFAULT_DATE_FORMAT = "%Y-%m-%d"

COMPONENTS = ("year", "month", "day")


def parse_dates(column: Column, date_format: str = DEFAULT_DATE_FORMAT) -> List[Any]:
    """Converte os valores de uma coluna categórica em `datetime.date` (ou MISSING)."""
    if column.ctype is ColumnType.DATE:
        return list(column.values)
    if column.ctype is not ColumnType.CATEGORICAL:
        raise ColumnTypeError(
            f"Column '{column.name}' must hold date strings, got {column.ctype.value}",
            details={"column": column.name, "type": column.ctype.value},
        )

    raw = pd.Series([None if v is MISSING else v for v in column.values], dtype=object)
    parsed = pd.to_datetime(raw, format=date_format, errors="coerce")

    out: List[Any] = []
    for row, (value, ts) in enumerate(zip(column.values, parsed)):
        if value is MISSING:
            out.append(MISSING)
            continue
        if pd.isna(ts):
            raise DateParseError(
                f"Cannot parse {value!r} in column '{column.name}' with format {date_format!r}",
                details={"column": column.name, "value": value, "row": row, "format": date_format},
            )
        out.append(ts.date())
    return out


def decompose_date(dataset: Dataset, column: str, date_format: str = DEFAULT_DATE_FORMAT) -> Dataset:
    source = dataset.column(column)
    dates = parse_dates(source, date_format)

    out = dataset.replace_column(source.with_values(dates, ColumnType.DATE))
    for part in COMPONENTS:
        values = tuple(MISSING if d is MISSING else getattr(d, part) for d in dates)
        out = out.with_column(Column(f"{column}_{part}", ColumnType.NUMERIC, values))
    return out


@dataclass
class TransformDecomposeDateStep(DatasetTransformStep):
    id: str = "transform.decompose_date"
    column: str = ""
    date_format: str = DEFAULT_DATE_FORMAT

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return decompose_date(dataset, self.column, self.date_format)

    def params(self) -> Dict[str, Any]:
        return {"column": self.column, "date_format": self.date_format}

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        return {"columns_added": [n for n in after.names if n not in before]}
