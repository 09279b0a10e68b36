"""Step canônico: transform.pivot (v1).

Converte entre os formatos largo (wide) e longo (long), via pandas
(`pd.melt` e `unstack`).

wide_to_long:
- `value_columns` são explodidas em pares (key, value): uma linha por linha
  original por coluna de valor, em ordem row-major.
- Demais colunas (identificadoras) são repetidas sem alteração e vêm
  primeiro; depois a coluna `key` (categórica, nome da coluna de origem) e
  a coluna `value`.
- As colunas de valor devem compartilhar o mesmo tipo (ColumnTypeError).

long_to_wide:
- Agrupa por todas as colunas exceto `key` e `value`, na ordem de primeira
  aparição; cria uma coluna por valor distinto de `key` (também em ordem de
  primeira aparição), preenchida com MISSING quando a combinação não existe.
- Par (grupo, chave) repetido → AmbiguousPivotError.
- Chave ausente (MISSING) não pode nomear coluna → AmbiguousPivotError.

Ida e volta (wide → long → wide) reproduz o Dataset original, a menos da
ordem, sempre que as linhas identificadoras forem únicas e houver ao menos
uma linha. Com zero linhas a coluna `key` não tem valores para nomear
colunas, e o long_to_wide devolve apenas as colunas de grupo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Tuple, Union

import pandas as pd

from tabular_pipeline.core.dataset import ColumnType, Dataset
from tabular_pipeline.core.exceptions import (
    AmbiguousPivotError,
    ColumnTypeError,
    DuplicateColumn,
    PipelineConfigError,
)
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep

WIDE_TO_LONG = "wide_to_long"
LONG_TO_WIDE = "long_to_wide"
DIRECTIONS = (WIDE_TO_LONG, LONG_TO_WIDE)

_ROW = "__row"
_GROUP = "__group"
@dataclass(frozen=True)
class PivotSpec:
    direction: str
    key: str = "variable"
    value: str = "value"
    value_columns: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise PipelineConfigError(
                f"Unknown pivot direction: {self.direction!r}",
                details={"direction": self.direction, "supported": list(DIRECTIONS)},
            )
        cols = (self.value_columns,) if isinstance(self.value_columns, str) else tuple(self.value_columns)
        if self.direction == WIDE_TO_LONG and not cols:
            raise PipelineConfigError(
                "wide_to_long requires at least one value column",
                details={"direction": self.direction},
            )
        object.__setattr__(self, "value_columns", cols)

    @classmethod
    def coerce(cls, spec: Union["PivotSpec", Mapping[str, Any]]) -> "PivotSpec":
        if isinstance(spec, PivotSpec):
            return spec
        if not isinstance(spec, Mapping) or "direction" not in spec:
            raise PipelineConfigError(
                "Pivot spec must be a mapping with 'direction'",
                details={"received": repr(spec)},
            )
        try:
            return cls(**spec)
        except TypeError as e:
            raise PipelineConfigError(
                f"Invalid pivot spec: {e}",
                details={"received": repr(spec)},
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction,
            "key": self.key,
            "value": self.value,
            "value_columns": list(self.value_columns),
        }


def _check_new_names(existing: List[str], new: List[str]) -> None:
    seen = set(existing)
    for name in new:
        if name in seen:
            raise DuplicateColumn(
                f"Pivot output column already exists: {name}",
                details={"column": name},
            )
        seen.add(name)


def _wide_to_long(dataset: Dataset, spec: PivotSpec) -> Dataset:
    dataset.require(spec.value_columns)
    value_cols = [dataset.column(n) for n in spec.value_columns]
    types = {c.ctype for c in value_cols}
    if len(types) > 1:
        raise ColumnTypeError(
            "Value columns must share one type",
            details={"columns": {c.name: c.ctype.value for c in value_cols}},
        )
    id_cols = [c for c in dataset.columns if c.name not in spec.value_columns]
    id_names = [c.name for c in id_cols]
    _check_new_names(id_names, [spec.key, spec.value])

    df = dataset.to_frame(typed=False)
    df.insert(0, _ROW, range(dataset.n_rows))
    long = pd.melt(
        df,
        id_vars=[_ROW] + id_names,
        value_vars=list(spec.value_columns),
        var_name=spec.key,
        value_name=spec.value,
    )
    # melt empilha coluna a coluna; a ordenação estável devolve row-major
    long = long.sort_values(_ROW, kind="stable").drop(columns=_ROW).reset_index(drop=True)

    schema: Dict[str, Any] = {c.name: c.ctype for c in id_cols}
    schema[spec.key] = ColumnType.CATEGORICAL
    schema[spec.value] = types.pop()
    return Dataset.from_frame(long, schema)


def _key_name(value: Any) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _long_to_wide(dataset: Dataset, spec: PivotSpec) -> Dataset:
    value_type = dataset.column(spec.value).ctype
    dataset.require([spec.key])
    group_cols = [c for c in dataset.columns if c.name not in (spec.key, spec.value)]
    group_names = [c.name for c in group_cols]

    df = dataset.to_frame(typed=False)
    blank = df.index[df[spec.key].isna()]
    if len(blank):
        raise AmbiguousPivotError(
            f"Missing value in key column '{spec.key}' cannot name a column",
            details={"column": spec.key, "row": int(blank[0])},
        )
    if dataset.n_rows == 0:
        return dataset.select(group_names)

    df[spec.key] = df[spec.key].map(_key_name)
    dup = df.index[df.duplicated(subset=group_names + [spec.key])]
    if len(dup):
        row = int(dup[0])
        name = df.at[row, spec.key]
        raise AmbiguousPivotError(
            f"Duplicate ({', '.join(group_names) or 'group'}, {spec.key}) pair for key {name!r}",
            details={"column": spec.key, "value": name, "row": row},
            hint="Aggregate duplicates first (transform.group_aggregate).",
        )

    names = list(pd.unique(df[spec.key]))
    _check_new_names(group_names, names)

    if group_names:
        df[_GROUP] = df.groupby(group_names, sort=False, dropna=False).ngroup()
    else:
        df[_GROUP] = 0
    wide = df.set_index([_GROUP, spec.key])[spec.value].unstack(spec.key).reindex(columns=names)
    firsts = df.drop_duplicates(_GROUP)[group_names]
    out = pd.concat([firsts.reset_index(drop=True), wide.reset_index(drop=True)], axis=1)

    schema: Dict[str, Any] = {c.name: c.ctype for c in group_cols}
    schema.update({name: value_type for name in names})
    return Dataset.from_frame(out, schema)

def pivot(dataset: Dataset, spec: Union[PivotSpec, Mapping[str, Any]]) -> Dataset:
    spec = PivotSpec.coerce(spec)
    if spec.direction == WIDE_TO_LONG:
        return _wide_to_long(dataset, spec)
    return _long_to_wide(dataset, spec)


@dataclass
class TransformPivotStep(DatasetTransformStep):
    id: str = "transform.pivot"
    direction: str = WIDE_TO_LONG
    key: str = "variable"
    value: str = "value"
    value_columns: List[str] = field(default_factory=list)

    def _spec(self) -> PivotSpec:
        return PivotSpec(
            direction=self.direction,
            key=self.key,
            value=self.value,
            value_columns=tuple(self.value_columns),
        )

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return pivot(dataset, self._spec())

    def params(self) -> Dict[str, Any]:
        return self._spec().to_dict()

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        return {"rows_before": before.n_rows, "rows_after": after.n_rows}
