"""Step canônico: transform.derive_column (v1).

Adiciona uma coluna derivada de uma coluna numérica existente.

Expressões suportadas:
- ZScore(source): (x - média) / desvio padrão amostral → numérica
- MinMax(source): (x - min) / (max - min) → numérica em [0, 1]
- Categorize(source, thresholds, default): rótulo do primeiro limiar com
  `x <= upper`; acima de todos os limiares, o rótulo `default` → categórica

Regras:
- Estatísticas calculadas apenas sobre valores observados.
- Entradas MISSING permanecem MISSING na coluna derivada.
- Nome já existente → DuplicateColumn.
- max == min (ou desvio nulo) → DegenerateRangeError.
- Coluna de origem sem valores observados → EmptyColumnError.

Em YAML, a expressão é um mapping com `kind`:

    expr: {kind: minmax, source: price}
    expr: {kind: categorize, source: age, thresholds: [[17, minor], [64, adult]], default: senior}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from tabular_pipeline.core.dataset import MISSING, Column, ColumnType, Dataset
from tabular_pipeline.core.exceptions import (
    ColumnTypeError,
    DegenerateRangeError,
    DuplicateColumn,
    EmptyColumnError,
    PipelineConfigError,
)
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep


def _numeric_source(dataset: Dataset, source: str) -> Tuple[Column, np.ndarray]:
    column = dataset.column(source)
    if column.ctype is not ColumnType.NUMERIC:
        raise ColumnTypeError(
            f"Column '{source}' must be numeric, got {column.ctype.value}",
            details={"column": source, "type": column.ctype.value},
        )
    observed = column.observed()
    if not observed:
        raise EmptyColumnError(
            f"Column '{source}' has no observed values",
            details={"column": source},
        )
    return column, np.asarray(observed, dtype=float)


def _map_observed(column: Column, fn) -> List[Any]:
    return [MISSING if v is MISSING else fn(v) for v in column.values]


@dataclass(frozen=True)
class ZScore:
    source: str

    ctype = ColumnType.NUMERIC

    def evaluate(self, dataset: Dataset) -> List[Any]:
        column, arr = _numeric_source(dataset, self.source)
        std = float(arr.std(ddof=1)) if arr.size > 1 else 0.0
        if std == 0.0:
            raise DegenerateRangeError(
                f"Column '{self.source}' has zero standard deviation",
                details={"column": self.source, "observed": int(arr.size)},
                hint="Z-score needs at least two distinct observed values.",
            )
        mean = float(arr.mean())
        return _map_observed(column, lambda v: (v - mean) / std)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "zscore", "source": self.source}


@dataclass(frozen=True)
class MinMax:
    source: str

    ctype = ColumnType.NUMERIC

    def evaluate(self, dataset: Dataset) -> List[Any]:
        column, arr = _numeric_source(dataset, self.source)
        lo, hi = float(arr.min()), float(arr.max())
        if hi == lo:
            raise DegenerateRangeError(
                f"Column '{self.source}' has max == min ({lo})",
                details={"column": self.source, "value": lo},
            )
        span = hi - lo
        return _map_observed(column, lambda v: (v - lo) / span)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "minmax", "source": self.source}


@dataclass(frozen=True)
class Categorize:
    source: str
    thresholds: Tuple[Tuple[float, str], ...] = field(default_factory=tuple)
    default: str = "other"

    ctype = ColumnType.CATEGORICAL

    def __post_init__(self) -> None:
        pairs = []
        for item in self.thresholds:
            if isinstance(item, Mapping):
                item = (item.get("upper"), item.get("label"))
            try:
                upper, label = item
            except (TypeError, ValueError) as e:
                raise PipelineConfigError(
                    f"Invalid threshold: {item!r}",
                    details={"column": self.source, "value": repr(item)},
                    hint="Thresholds are (upper, label) pairs.",
                ) from e
            if not ColumnType.NUMERIC.accepts(upper) or not isinstance(label, str):
                raise PipelineConfigError(
                    f"Invalid threshold: {item!r}",
                    details={"column": self.source, "value": repr(item)},
                    hint="Thresholds are (upper, label) pairs with a numeric upper bound.",
                )
            pairs.append((upper, label))
        if not isinstance(self.default, str):
            raise PipelineConfigError(
                "Categorize default label must be a string",
                details={"column": self.source, "value": repr(self.default)},
            )
        object.__setattr__(self, "thresholds", tuple(pairs))

    def label_for(self, value: Any) -> str:
        for upper, label in self.thresholds:
            if value <= upper:
                return label
        return self.default

    def evaluate(self, dataset: Dataset) -> List[Any]:
        column, _ = _numeric_source(dataset, self.source)
        return _map_observed(column, self.label_for)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "categorize",
            "source": self.source,
            "thresholds": [[u, label] for u, label in self.thresholds],
            "default": self.default,
        }


Expression = Union[ZScore, MinMax, Categorize]

EXPRESSIONS = {"zscore": ZScore, "minmax": MinMax, "categorize": Categorize}


def parse_expression(spec: Union[Expression, Mapping[str, Any]]) -> Expression:
    """Constrói uma expressão a partir de um mapping declarativo (`kind` + campos)."""
    if isinstance(spec, (ZScore, MinMax, Categorize)):
        return spec
    if not isinstance(spec, Mapping) or "kind" not in spec:
        raise PipelineConfigError(
            "Derive expression must be a mapping with 'kind'",
            details={"received": repr(spec)},
        )
    kind = str(spec["kind"]).strip().lower().replace("_", "").replace("-", "")
    cls = EXPRESSIONS.get(kind)
    if cls is None:
        raise PipelineConfigError(
            f"Unknown derive expression: {spec['kind']!r}",
            details={"kind": spec["kind"], "supported": list(EXPRESSIONS)},
        )
    fields = {k: v for k, v in spec.items() if k != "kind"}
    try:
        return cls(**fields)
    except TypeError as e:
        raise PipelineConfigError(
            f"Invalid parameters for {kind}: {e}",
            details={"kind": kind, "params": sorted(fields)},
        ) from e


def derive_column(dataset: Dataset, name: str, expr: Union[Expression, Mapping[str, Any]]) -> Dataset:
    expr = parse_expression(expr)
    if name in dataset:
        raise DuplicateColumn(
            f"Column already exists: {name}",
            details={"column": name},
        )
    values = expr.evaluate(dataset)
    return dataset.with_column(Column(name, expr.ctype, tuple(values)))


@dataclass
class TransformDeriveColumnStep(DatasetTransformStep):
    id: str = "transform.derive_column"
    name: str = ""
    expr: Optional[Any] = None

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return derive_column(dataset, self.name, self.expr)

    def params(self) -> Dict[str, Any]:
        expr = self.expr.to_dict() if hasattr(self.expr, "to_dict") else self.expr
        return {"name": self.name, "expr": expr}
