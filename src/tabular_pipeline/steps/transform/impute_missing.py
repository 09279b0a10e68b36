"""\
Step canônico: transform.impute_missing (v1).

Responsabilidades:
- Substituir células MISSING por um valor de preenchimento, coluna a coluna.
- Validar a coerência entre estratégia e tipo declarado da coluna.
- Produzir auditoria de impacto (valores imputados por coluna).

Estratégias suportadas (v1):
- Numéricas: mean | median
- Categóricas: placeholder (rótulo configurável, default "Unknown")
- Qualquer tipo: constant (o valor deve pertencer ao tipo da coluna)
- auto: mean para numéricas, placeholder para categóricas; demais tipos
  permanecem intactos

`strategy` pode ser uma string (aplicada a `columns`, ou a todas as colunas
compatíveis quando `columns` é omitido) ou um mapping coluna → estratégia.

Princípios:
- Média/mediana calculadas apenas sobre valores observados.
- Coluna numérica inteiramente ausente falha com EmptyColumnError (nunca NaN).
- Idempotente: após a primeira aplicação não restam ausentes nas colunas alvo.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from tabular_pipeline.core.dataset import MISSING, Column, ColumnType, Dataset
from tabular_pipeline.core.exceptions import EmptyColumnError, InvalidStrategy
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep

DEFAULT_PLACEHOLDER = "Unknown"

NUMERIC_STRATEGIES = ("mean", "median")
CATEGORICAL_STRATEGIES = ("placeholder",)
KNOWN_STRATEGIES = NUMERIC_STRATEGIES + CATEGORICAL_STRATEGIES + ("constant", "auto")

StrategySpec = Union[str, Mapping[str, str]]


def _check_known(strategy: Any, column: Optional[str] = None) -> str:
    if not isinstance(strategy, str) or strategy not in KNOWN_STRATEGIES:
        raise InvalidStrategy(
            f"Unknown imputation strategy: {strategy!r}",
            details={"strategy": repr(strategy), "column": column, "supported": list(KNOWN_STRATEGIES)},
        )
    return strategy


def _compatible(strategy: str, column: Column, value: Any) -> bool:
    if strategy in NUMERIC_STRATEGIES:
        return column.ctype is ColumnType.NUMERIC
    if strategy in CATEGORICAL_STRATEGIES:
        return column.ctype is ColumnType.CATEGORICAL
    if strategy == "constant":
        return value is not MISSING and column.ctype.accepts(value)
    return column.ctype in (ColumnType.NUMERIC, ColumnType.CATEGORICAL)


def _resolve_auto(strategy: str, column: Column) -> str:
    if strategy != "auto":
        return strategy
    return "mean" if column.ctype is ColumnType.NUMERIC else "placeholder"


def _plan(
    dataset: Dataset,
    strategy: StrategySpec,
    columns: Optional[Sequence[str]],
    value: Any,
) -> List[Tuple[Column, str]]:
    """Resolve (coluna, estratégia concreta) para cada coluna alvo."""
    requested = list(strategy.values()) if isinstance(strategy, Mapping) else [strategy]
    if "constant" in requested and (value is MISSING or value is None):
        raise InvalidStrategy(
            "Strategy 'constant' requires a fill value",
            details={"strategy": "constant"},
            hint="Pass value=... (or 'value' in the step params).",
        )
    if isinstance(strategy, Mapping):
        explicit = [(name, _check_known(s, name)) for name, s in strategy.items()]
    elif columns is not None:
        s = _check_known(strategy)
        explicit = [(name, s) for name in columns]
    else:
        s = _check_known(strategy)
        return [
            (c, _resolve_auto(s, c))
            for c in dataset.columns
            if _compatible(s, c, value)
        ]

    plan = []
    for name, s in explicit:
        col = dataset.column(name)
        if not _compatible(s, col, value):
            raise InvalidStrategy(
                f"Strategy '{s}' not allowed for {col.ctype.value} column '{name}'",
                details={"column": name, "strategy": s, "type": col.ctype.value},
            )
        plan.append((col, _resolve_auto(s, col)))
    return plan


def _fill_value(column: Column, strategy: str, placeholder: str, value: Any) -> Any:
    if strategy in NUMERIC_STRATEGIES:
        observed = column.observed()
        if not observed:
            raise EmptyColumnError(
                f"Cannot compute {strategy} of column '{column.name}': no observed values",
                details={"column": column.name, "strategy": strategy},
                hint="Drop the column or impute it with strategy=constant.",
            )
        arr = np.asarray(observed, dtype=float)
        return float(arr.mean()) if strategy == "mean" else float(np.median(arr))
    if strategy == "placeholder":
        return placeholder
    return value


def impute_missing(
    dataset: Dataset,
    strategy: StrategySpec = "auto",
    columns: Optional[Sequence[str]] = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
    value: Any = MISSING,
) -> Dataset:
    if not isinstance(placeholder, str):
        raise InvalidStrategy(
            "Placeholder label must be a string",
            details={"placeholder": repr(placeholder)},
        )

    out = dataset
    for column, s in _plan(dataset, strategy, columns, value):
        if column.missing_count() == 0:
            continue
        fill = _fill_value(column, s, placeholder, value)
        out = out.replace_column(
            column.with_values(fill if v is MISSING else v for v in column.values)
        )
    return out


@dataclass
class TransformImputeMissingStep(DatasetTransformStep):
    """Imputa valores ausentes de forma declarativa e auditável (v1)."""

    id: str = "transform.impute_missing"
    strategy: StrategySpec = "auto"
    columns: Optional[List[str]] = None
    placeholder: Optional[str] = None
    value: Any = MISSING

    def _placeholder(self, ctx: RunContext) -> str:
        if self.placeholder is not None:
            return self.placeholder
        pipeline_cfg = (ctx.config or {}).get("pipeline", {}) or {}
        return pipeline_cfg.get("missing_placeholder", DEFAULT_PLACEHOLDER)

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return impute_missing(
            dataset,
            strategy=self.strategy,
            columns=self.columns,
            placeholder=self._placeholder(ctx),
            value=self.value,
        )

    def params(self) -> Dict[str, Any]:
        return {
            "strategy": dict(self.strategy) if isinstance(self.strategy, Mapping) else self.strategy,
            "columns": self.columns,
            "placeholder": self.placeholder,
        }

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        before_missing = before.missing_counts()
        after_missing = after.missing_counts()
        values_imputed = {
            name: before_missing[name] - after_missing[name]
            for name in before.names
            if before_missing[name] != after_missing[name]
        }
        return {
            "columns_affected": list(values_imputed),
            "values_imputed": values_imputed,
        }
