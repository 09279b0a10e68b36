"""
Coluna tipada e imutável.

Uma `Column` associa um nome, um `ColumnType` declarado e uma tupla de
valores. Cada valor é um escalar aceito pelo tipo ou a sentinela MISSING.

Invariantes:
    - `values` é sempre uma tupla (nunca mutada após a construção)
    - todo valor não ausente é aceito por `ctype`
    - `name` é uma string não vazia
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from tabular_pipeline.core.exceptions import SchemaError

from .missing import MISSING
from .types import ColumnType


@dataclass(frozen=True)
class Column:
    name: str
    ctype: ColumnType
    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaError(
                "Column name must be a non-empty string",
                details={"column": repr(self.name)},
            )
        try:
            ctype = ColumnType.parse(self.ctype)
        except ValueError as e:
            raise SchemaError(str(e), details={"column": self.name, "type": repr(self.ctype)}) from e
        values = tuple(self.values)
        for row, v in enumerate(values):
            if v is MISSING:
                continue
            if not ctype.accepts(v):
                raise SchemaError(
                    f"Value {v!r} in column '{self.name}' is not {ctype.value}",
                    details={"column": self.name, "row": row, "value": repr(v), "type": ctype.value},
                    hint="Use MISSING for absent cells; None/NaN are not stored in a Column.",
                )
        object.__setattr__(self, "ctype", ctype)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return len(self.values)

    def observed(self) -> List[Any]:
        """Valores não ausentes, na ordem original."""
        return [v for v in self.values if v is not MISSING]

    def missing_count(self) -> int:
        return sum(1 for v in self.values if v is MISSING)

    def with_values(self, values: Iterable[Any], ctype: Optional[ColumnType] = None) -> "Column":
        return Column(self.name, ctype or self.ctype, tuple(values))

    def renamed(self, name: str) -> "Column":
        return Column(name, self.ctype, self.values)
