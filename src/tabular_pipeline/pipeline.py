# src/tabular_pipeline/pipeline.py
"""
Fachada de execução do Tabular Pipeline.

`run_pipeline` monta o RunContext, publica o Dataset de entrada em
`data.input`, constrói/encadeia os Steps e delega a execução ao Engine.

O retorno (`PipelineRun`) reúne:
    - dataset: último Dataset publicado com sucesso (ou o de entrada)
    - diagnostics: diagnóstico por Step, em ordem de execução
    - result: RunResult do Engine (status por Step)
    - ctx: RunContext (artefatos, eventos de log, warnings)

Uma falha nunca descarta o trabalho anterior: `dataset` continua sendo o
último checkpoint válido e todos os checkpoints permanecem no contexto.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence

from tabular_pipeline.core.config import resolve_config
from tabular_pipeline.core.config.hashing import compute_config_hash
from tabular_pipeline.core.dataset import Dataset
from tabular_pipeline.core.engine.engine import Engine, RunResult
from tabular_pipeline.core.exceptions import PipelineConfigError
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.pipeline.step import Step
from tabular_pipeline.steps.base import INPUT_KEY
from tabular_pipeline.steps.catalog import build_from_config, build_steps


@dataclass(frozen=True)
class PipelineRun:
    dataset: Optional[Dataset]
    diagnostics: Dict[str, Dict[str, Any]]
    result: RunResult
    ctx: RunContext

    @property
    def ok(self) -> bool:
        return self.result.ok

    def dataset_at(self, step_id: str) -> Dataset:
        """Checkpoint publicado por um Step específico."""
        return self.ctx.get_artifact(f"data.{step_id}")


def _prepare_steps(steps: Optional[Sequence[Any]], config: Mapping[str, Any]) -> Sequence[Step]:
    if steps is None:
        return build_from_config(config)
    if all(isinstance(s, Step) for s in steps):
        return list(steps)
    if any(isinstance(s, Step) for s in steps):
        raise PipelineConfigError(
            "Do not mix Step instances and declarations in one pipeline",
            details={"received": [type(s).__name__ for s in steps]},
        )
    return build_steps(steps)


def run_pipeline(
    dataset: Optional[Dataset] = None,
    steps: Optional[Sequence[Any]] = None,
    *,
    config: Optional[Dict[str, Any]] = None,
    run_id: Optional[str] = None,
) -> PipelineRun:
    """
    Executa `steps` sobre `dataset` e devolve o resultado consolidado.

    Args:
        dataset: Dataset de entrada. Pode ser omitido quando o primeiro
            Step for um `ingest.load`.
        steps: Steps prontos ou declarações (`{"op": ..., **params}`).
            Quando omitido, usa `pipeline.steps` da configuração.
        config: overrides aplicados sobre `DEFAULT_CONFIG`.
        run_id: identificador da run (default: uuid4).

    Raises:
        PipelineConfigError: declaração de Steps inválida.
    """
    cfg = resolve_config(config)
    ctx = RunContext(
        run_id=run_id or uuid.uuid4().hex,
        created_at=datetime.now(timezone.utc),
        config=cfg,
        meta={"config_hash": compute_config_hash(cfg)},
    )
    if dataset is not None:
        ctx.set_artifact(INPUT_KEY, dataset)

    ordered = _prepare_steps(steps, cfg)
    ctx.log(step_id="pipeline", level="info", message="run started", steps=len(ordered))

    result = Engine(steps=ordered, ctx=ctx).run()

    key = result.last_output_key()
    if key is None and ctx.has_artifact(INPUT_KEY):
        key = INPUT_KEY
    final = ctx.get_artifact(key) if key is not None else None

    ctx.log(
        step_id="pipeline",
        level="info" if result.ok else "error",
        message="run finished",
        ok=result.ok,
        output_key=key,
    )
    return PipelineRun(dataset=final, diagnostics=result.diagnostics(), result=result, ctx=ctx)
