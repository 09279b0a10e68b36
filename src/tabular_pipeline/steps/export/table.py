"""Step canônico: export.table (v1).

Entrega o Dataset de `input_key` a um arquivo CSV ou Parquet (via pandas).

- O caminho vem do próprio Step ou de `steps.<id>.path` na config.
- Diretórios intermediários são criados.
- Células MISSING são gravadas como vazio (CSV) / null (Parquet).
- O arquivo gerado é registrado com sha256 e tamanho.

Não altera o Dataset nem publica novos checkpoints.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from tabular_pipeline.core.dataset import Dataset
from tabular_pipeline.core.exceptions import PipelineConfigError, TabularException
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from tabular_pipeline.steps.base import INPUT_KEY, failed_result, read_dataset

FORMATS = {".csv": "csv", ".parquet": "parquet"}


def write_table(dataset: Dataset, path: Path) -> str:
    """Grava o Dataset e retorna o formato utilizado."""
    fmt = FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise PipelineConfigError(
            f"Unsupported export extension: {path.suffix}",
            details={"path": str(path), "supported": sorted(FORMATS)},
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    df = dataset.to_frame()
    if fmt == "csv":
        df.to_csv(path, index=False)
    else:
        df.to_parquet(path, index=False)
    return fmt


@dataclass
class ExportTableStep:
    id: str = "export.table"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]
    input_key: str = INPUT_KEY
    path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def _target(self, ctx: RunContext) -> Path:
        value: Any = self.path
        if value is None:
            step_cfg = ((ctx.config or {}).get("steps") or {}).get(self.id) or {}
            value = step_cfg.get("path") if isinstance(step_cfg, dict) else None
        if not isinstance(value, str) or not value.strip():
            raise PipelineConfigError(
                "Missing required config: path",
                details={"step_id": self.id},
                hint=f"Set steps.{self.id}.path in the config.",
            )
        return Path(value).expanduser()

    def run(self, ctx: RunContext) -> StepResult:
        try:
            dataset = read_dataset(ctx, self.input_key)
            target = self._target(ctx)
            fmt = write_table(dataset, target)
        except TabularException as e:
            return failed_result(ctx, self.id, self.kind, e)

        data = target.read_bytes()
        sha256 = hashlib.sha256(data).hexdigest()

        ctx.log(
            step_id=self.id,
            level="info",
            message="dataset exported",
            path=str(target),
            format=fmt,
            rows=dataset.n_rows,
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"exported {dataset.n_rows} rows to {target.name}",
            metrics={"rows": dataset.n_rows, "columns": dataset.n_columns, "bytes": len(data)},
            artifacts={"input": self.input_key, "path": str(target)},
            payload={"export": {"path": str(target), "format": fmt, "sha256": sha256, "bytes": len(data)}},
        )
