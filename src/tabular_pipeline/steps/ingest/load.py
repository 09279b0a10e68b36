"""Step canônico: ingest.load (v1).

Responsabilidades:
- ler dataset de arquivo (CSV / Parquet) via pandas, de forma determinística
- coagir valores brutos para os tipos declarados em `schema`
- registrar origem (path + tipo) e fingerprint (sha256) no StepResult
- publicar o Dataset como artifact `data.input`

Coerções (strings vindas de CSV são o caso comum):
- numeric: int/float; texto numérico → int quando inteiro, senão float
- categorical: texto (com espaços externos removidos)
- boolean: true/false, yes/no, 1/0 (case-insensitive)
- date: `datetime.date`, Timestamp ou texto ISO (`YYYY-MM-DD`)
- vazio, None, NaN → MISSING

Qualquer falha (arquivo, formato, coerção, schema) vira `LoadError` com a
coluna, o valor e a linha ofensores em `details`.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from tabular_pipeline.core.dataset import MISSING, Column, ColumnType, Dataset
from tabular_pipeline.core.exceptions import LoadError, SchemaError, TabularException
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from tabular_pipeline.steps.base import INPUT_KEY, dataset_diagnostics, failed_result

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}


# -----------------------------
# Helpers — coercions
# -----------------------------

def _is_blank(v: Any) -> bool:
    if v is None or v is MISSING:
        return True
    if isinstance(v, str) and v.strip() == "":
        return True
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def _coerce_numeric(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("boolean is not numeric")
    if isinstance(v, (int, float)):
        return v
    if hasattr(v, "item"):
        return _coerce_numeric(v.item())
    s = str(v).strip()
    try:
        return int(s)
    except ValueError:
        return float(s)


def _coerce_categorical(v: Any) -> Any:
    return str(v).strip()


def _coerce_boolean(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"not a boolean: {v!r}")


def _coerce_date(v: Any) -> Any:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v).strip())


_COERCIONS: Dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.NUMERIC: _coerce_numeric,
    ColumnType.CATEGORICAL: _coerce_categorical,
    ColumnType.BOOLEAN: _coerce_boolean,
    ColumnType.DATE: _coerce_date,
}


def _coerce_column(name: str, ctype: ColumnType, raw: Sequence[Any]) -> Column:
    coerce = _COERCIONS[ctype]
    values: List[Any] = []
    for row, v in enumerate(raw):
        if _is_blank(v):
            values.append(MISSING)
            continue
        try:
            values.append(coerce(v))
        except (TypeError, ValueError) as e:
            raise LoadError(
                f"Cannot convert {v!r} in column '{name}' to {ctype.value}",
                details={"column": name, "value": repr(v), "row": row, "type": ctype.value},
            ) from e
    try:
        return Column(name, ctype, tuple(values))
    except SchemaError as e:
        raise LoadError(e.message, details=e.details, hint=e.hint) from e


def _parse_schema(schema: Mapping[str, Any]) -> Dict[str, ColumnType]:
    out = {}
    for name, t in schema.items():
        try:
            out[str(name)] = ColumnType.parse(t)
        except ValueError as e:
            raise LoadError(str(e), details={"column": str(name), "type": repr(t)}) from e
    return out


# -----------------------------
# Public API
# -----------------------------

def load_records(rows: Sequence[Mapping[str, Any]], schema: Mapping[str, Any]) -> Dataset:
    """Constrói um Dataset a partir de registros brutos; colunas na ordem de `schema`."""
    types = _parse_schema(schema)
    for i, r in enumerate(rows):
        if not isinstance(r, Mapping):
            raise LoadError(
                f"Record {i} is not a mapping",
                details={"row": i, "value": type(r).__name__},
            )
    return Dataset(
        tuple(
            _coerce_column(name, ctype, [r.get(name) for r in rows])
            for name, ctype in types.items()
        )
    )


def load_frame(df: pd.DataFrame, schema: Optional[Mapping[str, Any]] = None) -> Dataset:
    """Constrói um Dataset a partir de um DataFrame.

    Com `schema`, apenas as colunas declaradas são carregadas (na ordem do
    schema) e cada uma é coagida ao tipo declarado. Sem schema, o tipo é
    inferido coluna a coluna.
    """
    if schema is None:
        try:
            return Dataset.from_frame(df)
        except SchemaError as e:
            raise LoadError(e.message, details=e.details, hint=e.hint) from e

    types = _parse_schema(schema)
    absent = [n for n in types if n not in df.columns]
    if absent:
        raise LoadError(
            f"Declared column(s) not found in source: {absent}",
            details={"columns": absent, "available": [str(c) for c in df.columns]},
        )
    return Dataset(
        tuple(_coerce_column(name, ctype, df[name].tolist()) for name, ctype in types.items())
    )


def _resolve_path(path_value: Any) -> Path:
    if not isinstance(path_value, str) or not path_value.strip():
        raise LoadError(
            "Missing required config: path",
            details={"value": repr(path_value)},
            hint="Set steps.ingest.load.path in the config.",
        )
    p = Path(path_value).expanduser().absolute()
    if not p.is_file():
        raise LoadError(f"File not found: {p}", details={"path": str(p)})
    return p


def _sha256_and_bytes(path: Path) -> Tuple[str, int]:
    h = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
            size += len(chunk)
    return h.hexdigest(), size


def read_source(path: Path) -> Tuple[pd.DataFrame, str]:
    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            return pd.read_csv(path, dtype=str, keep_default_na=True), "csv"
        if suffix == ".parquet":
            return pd.read_parquet(path), "parquet"
    except (OSError, ValueError, ImportError) as e:
        raise LoadError(
            f"Cannot read {path.name}: {e}",
            details={"path": str(path)},
        ) from e
    raise LoadError(f"Unsupported file extension: {suffix}", details={"path": str(path)})


@dataclass
class IngestLoadStep:
    """Carrega dados de um arquivo (CSV/Parquet), registra origem + fingerprint."""

    id: str = "ingest.load"
    kind: StepKind = StepKind.INGEST
    depends_on: List[str] = None  # type: ignore[assignment]
    path: Optional[str] = None
    schema: Optional[Dict[str, Any]] = None
    output_key: str = INPUT_KEY

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def _step_config(self, ctx: RunContext) -> Dict[str, Any]:
        steps_cfg = (ctx.config or {}).get("steps") or {}
        step_cfg = steps_cfg.get(self.id) if isinstance(steps_cfg, dict) else None
        return step_cfg if isinstance(step_cfg, dict) else {}

    def run(self, ctx: RunContext) -> StepResult:
        step_cfg = self._step_config(ctx)
        try:
            path = _resolve_path(self.path if self.path is not None else step_cfg.get("path"))
            schema = self.schema if self.schema is not None else step_cfg.get("schema")
            sha256, size_bytes = _sha256_and_bytes(path)
            df, source_type = read_source(path)
            dataset = load_frame(df, schema)
        except TabularException as e:
            return failed_result(ctx, self.id, self.kind, e)

        ctx.set_artifact(self.output_key, dataset)
        ctx.log(
            step_id=self.id,
            level="info",
            message="dataset loaded",
            source_type=source_type,
            source_path=str(path),
            rows=dataset.n_rows,
            columns=dataset.n_columns,
        )
        if schema is None:
            ctx.add_warning(
                step_id=self.id,
                message="no schema declared; column types were inferred",
            )

        source = {"path": str(path), "type": source_type, "sha256": sha256, "bytes": size_bytes}
        diagnostics = dataset_diagnostics(dataset)
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="dataset loaded",
            metrics={
                "rows": diagnostics["rows"],
                "columns": diagnostics["columns"],
                "missing_total": diagnostics["missing_total"],
                "bytes": size_bytes,
            },
            artifacts={"output": self.output_key, "source_path": str(path)},
            payload={"source": source, "diagnostics": diagnostics},
        )
