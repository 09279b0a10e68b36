"""Step canônico: transform.filter_rows (v1).

Mantém as linhas que satisfazem uma conjunção de comparações simples
`(coluna, operador, literal)`, com operador em {<, <=, >, >=, ==, !=}.

Regras:
- A ordem relativa das linhas é preservada.
- Resultado vazio é válido (não é erro).
- Célula MISSING nunca satisfaz uma comparação (inclusive `!=`).
- O literal deve pertencer ao tipo declarado da coluna (ColumnTypeError);
  para colunas de data, strings ISO (`2020-01-31`) são aceitas.

Comparações podem ser declaradas como texto (`"x > 4"`, `"country == NO"`).
O literal textual só ganha tipo contra a coluna: categórica usa o texto
(sem aspas externas), numérica usa int/float, booleana usa escalar YAML
(`true`, `no`, ...), data usa ISO 8601. Assim `NO` ou `01234` continuam
rótulos em colunas categóricas.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Sequence, Union

import yaml

from tabular_pipeline.core.dataset import MISSING, ColumnType, Dataset
from tabular_pipeline.core.exceptions import ColumnTypeError, PipelineConfigError
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep

OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

_EXPR = re.compile(r"^\s*(?P<column>.+?)\s*(?P<op><=|>=|==|!=|<|>)\s*(?P<literal>.+?)\s*$")


@dataclass(frozen=True)
class Comparison:
    column: str
    op: str
    literal: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise PipelineConfigError(
                f"Unsupported comparison operator: {self.op!r}",
                details={"column": self.column, "op": self.op, "supported": list(OPERATORS)},
            )

    @classmethod
    def parse(cls, text: str) -> "Comparison":
        m = _EXPR.match(text)
        if m is None:
            raise PipelineConfigError(
                f"Cannot parse comparison: {text!r}",
                details={"expression": text},
                hint="Use the form '<column> <op> <literal>', e.g. 'x > 4'.",
            )
        return cls(m.group("column"), m.group("op"), m.group("literal"))

    @classmethod
    def coerce(cls, spec: Union["Comparison", str, Mapping[str, Any]]) -> "Comparison":
        if isinstance(spec, Comparison):
            return spec
        if isinstance(spec, str):
            return cls.parse(spec)
        if isinstance(spec, Mapping) and {"column", "op", "value"} <= set(spec):
            return cls(spec["column"], spec["op"], spec["value"])
        raise PipelineConfigError(
            "Comparison must be a string or a mapping with column/op/value",
            details={"received": repr(spec)},
        )

    def to_dict(self) -> Dict[str, Any]:
        literal = self.literal.isoformat() if isinstance(self.literal, date) else self.literal
        return {"column": self.column, "op": self.op, "value": literal}


def _parse_text(text: str, ctype: ColumnType) -> Any:
    if ctype is ColumnType.CATEGORICAL:
        if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
            return text[1:-1]
        return text
    if ctype is ColumnType.NUMERIC:
        try:
            return int(text)
        except ValueError:
            return float(text)
    if ctype is ColumnType.DATE:
        return date.fromisoformat(text)
    return yaml.safe_load(text)


def _typed_literal(comparison: Comparison, ctype: ColumnType) -> Any:
    literal = comparison.literal
    if isinstance(literal, str):
        try:
            literal = _parse_text(literal, ctype)
        except (ValueError, yaml.YAMLError) as e:
            raise ColumnTypeError(
                f"Literal {comparison.literal!r} cannot be read as {ctype.value} for column '{comparison.column}'",
                details={"column": comparison.column, "value": comparison.literal, "type": ctype.value},
            ) from e
    if not ctype.accepts(literal):
        raise ColumnTypeError(
            f"Literal {comparison.literal!r} is not comparable with {ctype.value} column '{comparison.column}'",
            details={"column": comparison.column, "value": repr(comparison.literal), "type": ctype.value},
        )
    return literal


Predicate = Sequence[Union[Comparison, str, Mapping[str, Any]]]


def filter_rows(dataset: Dataset, predicate: Predicate) -> Dataset:
    comparisons = [Comparison.coerce(p) for p in predicate]
    checks = []
    for cmp in comparisons:
        column = dataset.column(cmp.column)
        checks.append((column.values, OPERATORS[cmp.op], _typed_literal(cmp, column.ctype)))

    keep = [
        i
        for i in range(dataset.n_rows)
        if all(values[i] is not MISSING and op(values[i], literal) for values, op, literal in checks)
    ]
    return dataset.take(keep)


@dataclass
class TransformFilterRowsStep(DatasetTransformStep):
    id: str = "transform.filter_rows"
    where: List[Any] = field(default_factory=list)

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return filter_rows(dataset, self.where)

    def params(self) -> Dict[str, Any]:
        return {"where": [Comparison.coerce(p).to_dict() for p in self.where]}

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        return {"rows_removed": before.n_rows - after.n_rows}
