"""
Dataset imutável: sequência ordenada de colunas tipadas.

O `Dataset` é o valor que circula entre os Steps do pipeline. Nenhuma
operação o altera in-place: toda transformação devolve uma nova instância,
o que permite reexecutar o pipeline a partir de qualquer checkpoint.

Invariantes:
    - nomes de coluna são únicos
    - todas as colunas têm o mesmo número de linhas
    - células ausentes são sempre MISSING (nunca None/NaN)

Interop:
    - `from_records` / `to_records`: lista de dicts (None/NaN ↔ MISSING)
    - `from_frame` / `to_frame`: pandas.DataFrame
    - `to_json_dict` / `from_json_dict`: forma serializável que preserva MISSING
"""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from tabular_pipeline.core.exceptions import DuplicateColumn, SchemaError, UnknownColumn

from .column import Column
from .missing import MISSING, is_json_missing
from .types import ColumnType


def _is_null(value: Any) -> bool:
    if value is None or value is MISSING:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT or value is pd.NA


def _to_python(value: Any) -> Any:
    """Converte escalares numpy/pandas em tipos nativos."""
    if _is_null(value):
        return MISSING
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return MISSING
    if isinstance(value, datetime):
        return value.date()
    return value


def _jsonable(value: Any) -> Any:
    if value is MISSING:
        return MISSING.to_json()
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class Dataset:
    columns: Tuple[Column, ...] = ()

    def __post_init__(self) -> None:
        columns = tuple(self.columns)
        seen = set()
        for col in columns:
            if not isinstance(col, Column):
                raise SchemaError(
                    "Dataset columns must be Column instances",
                    details={"received": type(col).__name__},
                )
            if col.name in seen:
                raise SchemaError(
                    f"Duplicate column name: {col.name}",
                    details={"column": col.name},
                )
            seen.add(col.name)

        lengths = {col.name: len(col) for col in columns}
        if len(set(lengths.values())) > 1:
            raise SchemaError(
                "All columns must have the same length",
                details={"lengths": lengths},
            )
        object.__setattr__(self, "columns", columns)

    # -----------------------------
    # Shape
    # -----------------------------
    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def n_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    @property
    def n_columns(self) -> int:
        return len(self.columns)

    @property
    def schema(self) -> Dict[str, ColumnType]:
        return {c.name: c.ctype for c in self.columns}

    def __contains__(self, name: object) -> bool:
        return any(c.name == name for c in self.columns)

    def __len__(self) -> int:
        return self.n_rows

    # -----------------------------
    # Access
    # -----------------------------
    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise UnknownColumn(
            f"Unknown column: {name}",
            details={"column": name, "available": self.names},
        )

    def require(self, names: Iterable[str]) -> None:
        """Falha com UnknownColumn no primeiro nome ausente."""
        for name in names:
            self.column(name)

    def index_of(self, name: str) -> int:
        self.column(name)
        return self.names.index(name)

    def row(self, index: int) -> Dict[str, Any]:
        return {c.name: c.values[index] for c in self.columns}

    def rows(self) -> Iterator[Dict[str, Any]]:
        for i in range(self.n_rows):
            yield self.row(i)

    def missing_counts(self) -> Dict[str, int]:
        return {c.name: c.missing_count() for c in self.columns}

    # -----------------------------
    # Derivação (sempre nova instância)
    # -----------------------------
    def take(self, indices: Sequence[int]) -> "Dataset":
        return Dataset(tuple(c.with_values(c.values[i] for i in indices) for c in self.columns))

    def select(self, names: Sequence[str]) -> "Dataset":
        return Dataset(tuple(self.column(n) for n in names))

    def with_column(self, column: Column, position: Optional[int] = None) -> "Dataset":
        if column.name in self:
            raise DuplicateColumn(
                f"Column already exists: {column.name}",
                details={"column": column.name},
            )
        cols = list(self.columns)
        cols.insert(len(cols) if position is None else position, column)
        return Dataset(tuple(cols))

    def replace_column(self, column: Column) -> "Dataset":
        idx = self.index_of(column.name)
        cols = list(self.columns)
        cols[idx] = column
        return Dataset(tuple(cols))

    # -----------------------------
    # Interop
    # -----------------------------
    @classmethod
    def from_columns(
        cls,
        data: Mapping[str, Sequence[Any]],
        schema: Mapping[str, Any],
    ) -> "Dataset":
        """Constrói a partir de `{nome: valores}` com tipos declarados em `schema`.

        None/NaN são traduzidos para MISSING; demais valores são validados
        estritamente contra o tipo declarado.
        """
        missing_types = [n for n in data if n not in schema]
        if missing_types:
            raise SchemaError(
                f"No declared type for column(s): {missing_types}",
                details={"columns": missing_types},
            )
        return cls(
            tuple(
                Column(name, schema[name], tuple(_to_python(v) for v in values))
                for name, values in data.items()
            )
        )

    @classmethod
    def from_records(
        cls,
        rows: Sequence[Mapping[str, Any]],
        schema: Mapping[str, Any],
    ) -> "Dataset":
        """Constrói a partir de uma lista de dicts; a ordem das colunas segue `schema`."""
        data = {name: [r.get(name) for r in rows] for name in schema}
        return cls.from_columns(data, schema)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, schema: Optional[Mapping[str, Any]] = None) -> "Dataset":
        """Constrói a partir de um DataFrame; sem schema, o tipo é inferido por coluna."""
        columns = []
        for name in df.columns:
            values = [_to_python(v) for v in df[name].tolist()]
            if schema is not None and name in schema:
                ctype = ColumnType.parse(schema[name])
            else:
                try:
                    ctype = ColumnType.infer(v for v in values if v is not MISSING)
                except ValueError as e:
                    raise SchemaError(str(e), details={"column": str(name)}) from e
            columns.append(Column(str(name), ctype, tuple(values)))
        return cls(tuple(columns))

    def to_records(self, missing: Any = None) -> List[Dict[str, Any]]:
        return [
            {k: (missing if v is MISSING else v) for k, v in r.items()}
            for r in self.rows()
        ]

    def to_frame(self, typed: bool = True) -> pd.DataFrame:
        """Exporta para DataFrame (MISSING → None/NaN/NaT).

        Com `typed=False` todas as colunas ficam `object`, preservando os
        escalares originais (ex.: inteiros não viram float).
        """
        data = {}
        for c in self.columns:
            values = [None if v is MISSING else v for v in c.values]
            if not typed:
                data[c.name] = pd.Series(values, dtype="object")
            elif c.ctype is ColumnType.NUMERIC:
                data[c.name] = pd.Series(values, dtype="float64")
            elif c.ctype is ColumnType.DATE:
                data[c.name] = pd.to_datetime(pd.Series(values, dtype="object"))
            else:
                data[c.name] = pd.Series(values, dtype="object")
        return pd.DataFrame(data, columns=self.names)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "columns": [
                {"name": c.name, "type": c.ctype.value, "values": [_jsonable(v) for v in c.values]}
                for c in self.columns
            ]
        }

    @classmethod
    def from_json_dict(cls, payload: Mapping[str, Any]) -> "Dataset":
        columns = []
        for spec in payload.get("columns", []):
            ctype = ColumnType.parse(spec["type"])
            values = []
            for v in spec.get("values", []):
                if is_json_missing(v):
                    values.append(MISSING)
                elif ctype is ColumnType.DATE and isinstance(v, str):
                    values.append(date.fromisoformat(v))
                else:
                    values.append(v)
            columns.append(Column(spec["name"], ctype, tuple(values)))
        return cls(tuple(columns))

    def fingerprint(self) -> str:
        """sha256 da forma JSON canônica (identidade estrutural + conteúdo)."""
        canonical = json.dumps(
            self.to_json_dict(),
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
