"""Step canônico: audit.describe (v1).

Responsabilidades:
- Produzir um `Summary` do Dataset: número de linhas, tipo declarado e
  contagem de ausentes por coluna e, para colunas numéricas, min/max/mean
  calculados apenas sobre valores observados.
- Publicar o Summary como artifact `summary.<step_id>` e como payload.

Limites explícitos (v1):
- NÃO muta o dataset.
- NÃO falha em dataset bem formado (coluna numérica sem valores observados
  produz estatísticas `None`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from tabular_pipeline.core.dataset import ColumnType, Dataset
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.exceptions import TabularException
from tabular_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from tabular_pipeline.steps.base import INPUT_KEY, failed_result, read_dataset


@dataclass(frozen=True)
class ColumnSummary:
    name: str
    ctype: ColumnType
    missing: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "type": self.ctype.value, "missing": self.missing}
        if self.ctype is ColumnType.NUMERIC:
            out.update({"min": self.min, "max": self.max, "mean": self.mean})
        return out


@dataclass(frozen=True)
class Summary:
    rows: int
    columns: Tuple[ColumnSummary, ...] = field(default_factory=tuple)

    def column(self, name: str) -> ColumnSummary:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)

    @property
    def missing_total(self) -> int:
        return sum(c.missing for c in self.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "columns": [c.to_dict() for c in self.columns],
        }


def _numeric_stats(values: List[Any]) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    if not values:
        return None, None, None
    arr = np.asarray(values, dtype=float)
    return float(arr.min()), float(arr.max()), float(arr.mean())


def describe(dataset: Dataset) -> Summary:
    cols = []
    for c in dataset.columns:
        if c.ctype is ColumnType.NUMERIC:
            lo, hi, mean = _numeric_stats(c.observed())
            cols.append(ColumnSummary(c.name, c.ctype, c.missing_count(), lo, hi, mean))
        else:
            cols.append(ColumnSummary(c.name, c.ctype, c.missing_count()))
    return Summary(rows=dataset.n_rows, columns=tuple(cols))


@dataclass
class AuditDescribeStep:
    """Resumo estatístico do Dataset (sem mutações)."""

    id: str = "audit.describe"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]
    input_key: str = INPUT_KEY

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    @property
    def output_key(self) -> str:
        return f"summary.{self.id}"

    def run(self, ctx: RunContext) -> StepResult:
        try:
            dataset = read_dataset(ctx, self.input_key)
        except TabularException as e:
            return failed_result(ctx, self.id, self.kind, e)

        summary = describe(dataset)
        ctx.set_artifact(self.output_key, summary)

        ctx.log(
            step_id=self.id,
            level="info",
            message="summary computed",
            rows=summary.rows,
            columns=len(summary.columns),
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="summary computed",
            metrics={
                "rows": summary.rows,
                "columns": len(summary.columns),
                "missing_total": summary.missing_total,
            },
            artifacts={"input": self.input_key, "summary": self.output_key},
            payload={"summary": summary.to_dict()},
        )
