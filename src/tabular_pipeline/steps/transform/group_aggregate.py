"""Step canônico: transform.group_aggregate (v1).

Particiona o Dataset pelas tuplas distintas das colunas-chave e aplica
reducers sobre cada grupo, produzindo uma linha por grupo.

Regras:
- Grupos seguem a ordem de primeira aparição; MISSING é um valor de chave
  válido (forma seu próprio grupo).
- Reducers ignoram valores ausentes.
- count sem `source` conta as linhas do grupo; com `source`, conta as
  células não ausentes.
- sum de grupo sem valores observados é 0; mean/min/max resultam MISSING.
- sum/mean exigem coluna numérica; min/max aceitam numérica ou data.
- Colunas de saída: chaves (mesmo nome e tipo), depois agregações na ordem
  declarada. Nome repetido → DuplicateColumn.

`Aggregation(output, source, reducer)`: sem `source`, o reducer padrão é
count (contagem de linhas).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from tabular_pipeline.core.dataset import ColumnType, Dataset
from tabular_pipeline.core.exceptions import (
    ColumnTypeError,
    DuplicateColumn,
    PipelineConfigError,
)
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep

REDUCERS = ("mean", "max", "min", "count", "sum")

_REDUCER_TYPES = {
    "mean": (ColumnType.NUMERIC,),
    "sum": (ColumnType.NUMERIC,),
    "min": (ColumnType.NUMERIC, ColumnType.DATE),
    "max": (ColumnType.NUMERIC, ColumnType.DATE),
}


@dataclass(frozen=True)
class Aggregation:
    output: str
    source: Optional[str] = None
    reducer: str = "count"

    def __post_init__(self) -> None:
        if self.reducer not in REDUCERS:
            raise PipelineConfigError(
                f"Unknown reducer: {self.reducer!r}",
                details={"column": self.output, "reducer": self.reducer, "supported": list(REDUCERS)},
            )
        if self.source is None and self.reducer != "count":
            raise PipelineConfigError(
                f"Reducer '{self.reducer}' requires a source column",
                details={"column": self.output, "reducer": self.reducer},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"output": self.output, "source": self.source, "reducer": self.reducer}


@dataclass(frozen=True)
class AggregationSpec:
    keys: Tuple[str, ...]
    aggregations: Tuple[Aggregation, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        keys = (self.keys,) if isinstance(self.keys, str) else tuple(self.keys)
        if not keys:
            raise PipelineConfigError("group_aggregate requires at least one key column")
        aggs = tuple(
            a if isinstance(a, Aggregation) else Aggregation(**a)
            for a in self.aggregations
        )
        object.__setattr__(self, "keys", keys)
        object.__setattr__(self, "aggregations", aggs)

    @classmethod
    def coerce(cls, spec: Union["AggregationSpec", Mapping[str, Any]]) -> "AggregationSpec":
        if isinstance(spec, AggregationSpec):
            return spec
        if not isinstance(spec, Mapping) or "keys" not in spec:
            raise PipelineConfigError(
                "Aggregation spec must be a mapping with 'keys' and 'aggregations'",
                details={"received": repr(spec)},
            )
        try:
            return cls(keys=spec["keys"], aggregations=spec.get("aggregations", ()))
        except TypeError as e:
            raise PipelineConfigError(
                f"Invalid aggregation: {e}",
                details={"received": repr(spec)},
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        return {"keys": list(self.keys), "aggregations": [a.to_dict() for a in self.aggregations]}


def _check_columns(dataset: Dataset, spec: AggregationSpec) -> None:
    dataset.require(list(spec.keys) + [a.source for a in spec.aggregations if a.source is not None])

    outputs = list(spec.keys) + [a.output for a in spec.aggregations]
    seen = set()
    for name in outputs:
        if name in seen:
            raise DuplicateColumn(
                f"Output column defined more than once: {name}",
                details={"column": name},
            )
        seen.add(name)

    for agg in spec.aggregations:
        allowed = _REDUCER_TYPES.get(agg.reducer)
        if allowed is None:
            continue
        ctype = dataset.column(agg.source).ctype
        if ctype not in allowed:
            raise ColumnTypeError(
                f"Reducer '{agg.reducer}' not supported for {ctype.value} column '{agg.source}'",
                details={"column": agg.source, "reducer": agg.reducer, "type": ctype.value},
            )



def _alias(position: int) -> str:
    return f"__source_{position}"


def _frame(dataset: Dataset, spec: AggregationSpec) -> pd.DataFrame:
    # chaves sem conversão (inteiros seguem inteiros); fontes tipadas para os reducers
    df = dataset.select(list(spec.keys)).to_frame(typed=False)
    typed = dataset.to_frame()
    for pos, agg in enumerate(spec.aggregations):
        if agg.source is not None:
            df[_alias(pos)] = typed[agg.source]
    return df


def _output_type(dataset: Dataset, agg: Aggregation) -> ColumnType:
    if agg.reducer in ("min", "max"):
        return dataset.column(agg.source).ctype
    return ColumnType.NUMERIC


def group_aggregate(dataset: Dataset, spec: Union[AggregationSpec, Mapping[str, Any]]) -> Dataset:
    spec = AggregationSpec.coerce(spec)
    _check_columns(dataset, spec)

    grouped = _frame(dataset, spec).groupby(list(spec.keys), sort=False, dropna=False)
    sizes = grouped.size()
    named = {
        agg.output: (_alias(pos), agg.reducer)
        for pos, agg in enumerate(spec.aggregations)
        if agg.source is not None
    }
    reduced = grouped.agg(**named) if named else None

    out = sizes.index.to_frame(index=False)
    for agg in spec.aggregations:
        column = sizes if agg.source is None else reduced[agg.output]
        out[agg.output] = column.to_numpy()

    schema: Dict[str, Any] = {k: dataset.column(k).ctype for k in spec.keys}
    schema.update({a.output: _output_type(dataset, a) for a in spec.aggregations})
    return Dataset.from_frame(out, schema)


@dataclass
class TransformGroupAggregateStep(DatasetTransformStep):
    id: str = "transform.group_aggregate"
    keys: List[str] = field(default_factory=list)
    aggregations: List[Any] = field(default_factory=list)

    def _spec(self) -> AggregationSpec:
        return AggregationSpec.coerce({"keys": self.keys, "aggregations": self.aggregations})

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return group_aggregate(dataset, self._spec())

    def params(self) -> Dict[str, Any]:
        return self._spec().to_dict()

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        return {"groups": after.n_rows}
