"""Base comum dos Steps que transformam um Dataset.

Convenção de execução:
- ler o Dataset de `input_key` (default: `data.input`)
- aplicar a operação pura (`apply`) e obter um NOVO Dataset
- publicar em `data.<step_id>` (nunca sobrescreve o checkpoint de entrada)
- emitir diagnóstico (rows, columns, missing) e log estruturado

Falhas tipadas (`TabularException`) viram StepResult FAILED com
`payload["error"]`; nenhum artifact é publicado nesse caso, de modo que o
último Dataset válido continua sendo o checkpoint de entrada. Demais
exceções sobem para o Engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tabular_pipeline.core.dataset import Dataset
from tabular_pipeline.core.errors import exception_to_payload
from tabular_pipeline.core.exceptions import PipelineConfigError, TabularException
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus

INPUT_KEY = "data.input"


def dataset_diagnostics(dataset: Dataset) -> Dict[str, Any]:
    """Diagnóstico leve emitido após cada Step que publica um Dataset."""
    missing = dataset.missing_counts()
    return {
        "rows": dataset.n_rows,
        "columns": dataset.n_columns,
        "missing_total": int(sum(missing.values())),
        "missing_by_column": missing,
        "fingerprint": dataset.fingerprint(),
    }


def read_dataset(ctx: RunContext, key: str) -> Dataset:
    if not ctx.has_artifact(key):
        raise PipelineConfigError(
            f"Missing required artifact: {key}",
            details={"artifact": key, "available": ctx.artifact_keys()},
        )
    dataset = ctx.get_artifact(key)
    if not isinstance(dataset, Dataset):
        raise PipelineConfigError(
            f"Artifact {key} is not a Dataset",
            details={"artifact": key, "received": type(dataset).__name__},
        )
    return dataset


def failed_result(ctx: RunContext, step_id: str, kind: StepKind, exc: TabularException) -> StepResult:
    error = exception_to_payload(exc)
    ctx.log(
        step_id=step_id,
        level="error",
        message=f"{step_id} failed",
        error_type=error.type,
        error_message=error.message,
        **{k: v for k, v in error.details.items() if k in ("column", "value", "row")},
    )
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.FAILED,
        summary=error.message,
        payload={"error": error.to_dict()},
    )


@dataclass
class DatasetTransformStep:
    """Step de transformação: Dataset de entrada → novo Dataset publicado."""

    id: str = "transform"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]
    input_key: str = INPUT_KEY

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    @property
    def output_key(self) -> str:
        return f"data.{self.id}"

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        raise NotImplementedError

    def params(self) -> Dict[str, Any]:
        """Parâmetros serializáveis registrados no payload."""
        return {}

    def impact(self, before: Dataset, after: Dataset) -> Optional[Dict[str, Any]]:
        """Auditoria opcional de impacto da transformação."""
        return None

    def run(self, ctx: RunContext) -> StepResult:
        try:
            dataset = read_dataset(ctx, self.input_key)
            out = self.apply(dataset, ctx)
        except TabularException as e:
            return failed_result(ctx, self.id, self.kind, e)

        ctx.set_artifact(self.output_key, out)
        diagnostics = dataset_diagnostics(out)

        ctx.log(
            step_id=self.id,
            level="info",
            message="dataset transformed",
            rows_in=dataset.n_rows,
            rows_out=out.n_rows,
            columns_in=dataset.n_columns,
            columns_out=out.n_columns,
        )

        payload: Dict[str, Any] = {"diagnostics": diagnostics, "params": self.params()}
        impact = self.impact(dataset, out)
        if impact is not None:
            payload["impact"] = impact

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{out.n_rows} rows x {out.n_columns} columns",
            metrics={
                "rows": diagnostics["rows"],
                "columns": diagnostics["columns"],
                "missing_total": diagnostics["missing_total"],
            },
            artifacts={"input": self.input_key, "output": self.output_key},
            payload=payload,
        )
