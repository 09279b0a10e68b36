# src/tabular_pipeline/core/engine/engine.py
"""
Engine de execução do pipeline do Tabular Pipeline.

Responsabilidades:
- Planejar a ordem de execução (planner) e executar cada Step uma vez.
- Respeitar `steps.<id>.enabled` e a política `engine.fail_fast`.
- Pular Steps cujas dependências falharam.
- Converter exceções em ErrorPayload (serializável, acionável) e
  devolver FAILED, sem stack trace cru para o operador.
- Nunca mutar StepResult in-place (frozen): enriquecimento via `replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from tabular_pipeline.core.errors import engine_configuration_error, exception_to_payload
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.core.pipeline.step import Step
from tabular_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline (em ordem de execução)."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.status != StepStatus.FAILED for r in self.steps.values())

    @property
    def failed(self) -> Optional[StepResult]:
        for r in self.steps.values():
            if r.status == StepStatus.FAILED:
                return r
        return None

    def diagnostics(self) -> Dict[str, Dict[str, Any]]:
        """Diagnósticos por Step (apenas Steps que produziram Dataset)."""
        return {
            sid: r.payload["diagnostics"]
            for sid, r in self.steps.items()
            if "diagnostics" in r.payload
        }

    def last_output_key(self) -> Optional[str]:
        """Chave do último Dataset publicado com sucesso."""
        key = None
        for r in self.steps.values():
            if r.status == StepStatus.SUCCESS and "output" in r.artifacts:
                key = r.artifacts["output"]
        return key


class Engine:
    """Engine canônico do Tabular Pipeline (planner + executor)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    def _ctx_warnings_for(self, step_id: str) -> List[str]:
        return list(self.ctx.warnings.get(step_id, []) or [])

    def _enrich(self, *, step: Step, result: StepResult) -> StepResult:
        """Retorna uma NOVA instância com warnings do RunContext incorporados (sem duplicatas)."""
        merged: List[str] = []
        for msg in list(result.warnings or []) + self._ctx_warnings_for(step.id):
            if msg not in merged:
                merged.append(msg)
        kind = result.kind or getattr(step, "kind", StepKind.DIAGNOSTIC) or StepKind.DIAGNOSTIC
        return replace(result, step_id=step.id, kind=kind, warnings=merged)

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        kind = getattr(step, "kind", StepKind.DIAGNOSTIC) or StepKind.DIAGNOSTIC
        r = StepResult(
            step_id=step.id,
            kind=kind,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich(step=step, result=r)

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                results[sid] = self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")
                self.ctx.log(step_id=sid, level="info", message="step skipped by config")
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            if any(results.get(d) and results[d].status != StepStatus.SUCCESS for d in deps):
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed or skipped dependency",
                )
                self.ctx.log(step_id=sid, level="warning", message="step skipped due to dependency")
                continue

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    error = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={
                            "step_id": sid,
                            "expected": "StepResult",
                            "received": type(step_result).__name__,
                        },
                        hint="Ajuste o Step para retornar StepResult",
                    )
                    results[sid] = self._mk_result(
                        step=step,
                        status=StepStatus.FAILED,
                        summary=error.message,
                        payload={"error": error.to_dict()},
                    )
                else:
                    results[sid] = self._enrich(step=step, result=step_result)

            except Exception as e:
                error = exception_to_payload(e)
                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message="step raised",
                    error_type=error.type,
                    error_message=error.message,
                )
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )

            if results[sid].status == StepStatus.FAILED and self._fail_fast():
                break

        return RunResult(steps=results)
