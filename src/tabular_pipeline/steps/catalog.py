"""
Catálogo de Steps e construção declarativa de pipelines.

Converte a lista `pipeline.steps` da configuração (ou uma lista Python
equivalente) em Steps concretos, encadeados linearmente:

    pipeline:
      steps:
        - op: impute_missing
          strategy: auto
        - op: filter_rows
          where: ["x > 4"]
        - op: describe

Regras de encadeamento:
    - o primeiro Step lê `input_key` (default `data.input`)
    - cada Step de transformação lê o Dataset publicado pelo anterior e
      passa a ser a nova fonte para os seguintes
    - Steps de diagnóstico e export leem a fonte corrente sem alterá-la
    - `depends_on` aponta sempre para o Step imediatamente anterior

Ids:
    - sem `id` explícito, usa o id canônico do Step (ex.: `transform.pivot`)
    - ops repetidas recebem sufixo numérico (`transform.pivot.2`)
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from tabular_pipeline.core.exceptions import PipelineConfigError
from tabular_pipeline.core.pipeline.registry import StepRegistry
from tabular_pipeline.core.pipeline.step import Step
from tabular_pipeline.core.pipeline.types import StepKind
from tabular_pipeline.steps.audit.describe import AuditDescribeStep
from tabular_pipeline.steps.base import INPUT_KEY
from tabular_pipeline.steps.export.table import ExportTableStep
from tabular_pipeline.steps.ingest.load import IngestLoadStep
from tabular_pipeline.steps.transform.decompose_date import TransformDecomposeDateStep
from tabular_pipeline.steps.transform.derive_column import TransformDeriveColumnStep
from tabular_pipeline.steps.transform.filter_rows import TransformFilterRowsStep
from tabular_pipeline.steps.transform.group_aggregate import TransformGroupAggregateStep
from tabular_pipeline.steps.transform.impute_missing import TransformImputeMissingStep
from tabular_pipeline.steps.transform.pivot import TransformPivotStep
from tabular_pipeline.steps.transform.select_columns import TransformSelectColumnsStep

STEP_TYPES: Dict[str, type] = {
    "load": IngestLoadStep,
    "describe": AuditDescribeStep,
    "impute_missing": TransformImputeMissingStep,
    "select_columns": TransformSelectColumnsStep,
    "filter_rows": TransformFilterRowsStep,
    "derive_column": TransformDeriveColumnStep,
    "group_aggregate": TransformGroupAggregateStep,
    "pivot": TransformPivotStep,
    "decompose_date": TransformDecomposeDateStep,
    "export": ExportTableStep,
}


def _unique_id(base: str, taken: set) -> str:
    if base not in taken:
        return base
    n = 2
    while f"{base}.{n}" in taken:
        n += 1
    return f"{base}.{n}"


def build_step(decl: Mapping[str, Any]) -> Step:
    """Instancia um único Step a partir de `{op: ..., **params}`."""
    if not isinstance(decl, Mapping) or "op" not in decl:
        raise PipelineConfigError(
            "Step declaration must be a mapping with 'op'",
            details={"received": repr(decl)},
        )
    op = decl["op"]
    cls = STEP_TYPES.get(op)
    if cls is None:
        raise PipelineConfigError(
            f"Unknown step op: {op!r}",
            details={"op": op, "supported": sorted(STEP_TYPES)},
        )
    params = {k: v for k, v in decl.items() if k not in ("op", "input_key", "depends_on")}
    try:
        return cls(**params)
    except TypeError as e:
        raise PipelineConfigError(
            f"Invalid parameters for op '{op}': {e}",
            details={"op": op, "params": sorted(params)},
        ) from e


def build_steps(
    declarations: Sequence[Any],
    *,
    input_key: str = INPUT_KEY,
) -> List[Step]:
    """Constrói e encadeia a lista de Steps declarada."""
    if isinstance(declarations, (str, bytes)) or not isinstance(declarations, Sequence):
        raise PipelineConfigError(
            "pipeline.steps must be a list",
            details={"received": type(declarations).__name__},
        )

    registry = StepRegistry()
    taken: set = set()
    current = input_key
    previous: Optional[str] = None

    for pos, decl in enumerate(declarations):
        if isinstance(decl, str):
            decl = {"op": decl}
        step = build_step(decl)
        if "id" not in decl:
            step.id = _unique_id(step.id, taken)

        if step.kind is StepKind.INGEST:
            current = step.output_key
        else:
            step.input_key = current
            if step.kind is StepKind.TRANSFORM:
                current = step.output_key
        step.depends_on = [previous] if previous is not None else []

        try:
            registry.add(step)
        except ValueError as e:
            raise PipelineConfigError(
                str(e),
                details={"step_id": step.id, "position": pos},
            ) from e
        taken.add(step.id)
        previous = step.id

    return registry.list()


def build_from_config(config: Mapping[str, Any], *, input_key: str = INPUT_KEY) -> List[Step]:
    """Atalho: lê `pipeline.steps` de uma configuração resolvida."""
    pipeline_cfg = (config or {}).get("pipeline") or {}
    return build_steps(pipeline_cfg.get("steps") or [], input_key=input_key)
