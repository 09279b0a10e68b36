"""
Tipos semânticos de coluna.

Cada coluna de um Dataset declara exatamente um `ColumnType`. O tipo é
carregado junto com os dados e validado em toda fronteira de
transformação, em vez de ser inferido a cada operação.

Tipos definidos:
    - NUMERIC: int ou float (bool e NaN não são aceitos)
    - CATEGORICAL: str
    - DATE: datetime.date
    - BOOLEAN: bool

Limites explícitos:
    - Não realiza coerção de valores (isso é papel do loader)
    - Não conhece a sentinela MISSING (a Column trata ausências)
"""

from __future__ import annotations

import math
from datetime import date
from enum import Enum
from typing import Any, Iterable


_ALIASES = {
    "numeric": "numeric",
    "number": "numeric",
    "float": "numeric",
    "int": "numeric",
    "integer": "numeric",
    "categorical": "categorical",
    "category": "categorical",
    "string": "categorical",
    "str": "categorical",
    "text": "categorical",
    "date": "date",
    "datetime": "date",
    "boolean": "boolean",
    "bool": "boolean",
}


class ColumnType(str, Enum):
    """
    Tipo semântico declarado de uma coluna.

    Os valores são strings para facilitar serialização em JSON, YAML de
    configuração e payloads de diagnóstico.
    """

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"
    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, value: Any) -> "ColumnType":
        """Resolve um tipo a partir do enum ou de um alias textual (ex.: "float", "string")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            canonical = _ALIASES.get(value.strip().lower())
            if canonical is not None:
                return cls(canonical)
        raise ValueError(f"Unknown column type: {value!r}")

    def accepts(self, value: Any) -> bool:
        if self is ColumnType.NUMERIC:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return False
            return not (isinstance(value, float) and math.isnan(value))
        if self is ColumnType.CATEGORICAL:
            return isinstance(value, str)
        if self is ColumnType.DATE:
            return isinstance(value, date)
        return isinstance(value, bool)

    @classmethod
    def infer(cls, values: Iterable[Any]) -> "ColumnType":
        """
        Infere o tipo a partir de valores já observados (sem ausências).

        Usado apenas na fronteira de interop (ex.: DataFrame sem schema).
        Coluna sem valores observados é tratada como CATEGORICAL.
        Valores de tipos mistos resultam em ValueError.
        """
        found = set()
        for v in values:
            for candidate in (cls.BOOLEAN, cls.NUMERIC, cls.DATE, cls.CATEGORICAL):
                if candidate.accepts(v):
                    found.add(candidate)
                    break
            else:
                raise ValueError(f"Cannot infer column type for value {v!r}")
        if not found:
            return cls.CATEGORICAL
        if len(found) > 1:
            raise ValueError(f"Mixed value types: {sorted(t.value for t in found)}")
        return found.pop()
