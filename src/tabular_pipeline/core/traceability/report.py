# src/tabular_pipeline/core/traceability/report.py
"""
Run Report v1 — registro auditável de uma execução do Tabular Pipeline.

Este módulo consolida, de forma determinística e serializável, o que
aconteceu em uma run:
    - identidade da execução (run_id, created_at, config_hash)
    - resultado de cada Step, em ordem de execução
    - Event Log estruturado produzido via `RunContext.log`
    - warnings agrupados por Step
    - chave do último Dataset válido

Princípios fundamentais:
    - O relatório é construído a partir de estado já existente
      (RunContext + RunResult); ele não executa nem decide nada
    - A persistência é JSON com ordenação de chaves estável
    - Round-trip: `load_run_report(save_run_report(r))` reproduz `r`

Limites explícitos:
    - Não serializa Datasets (apenas diagnósticos e fingerprints)
    - Não aplica versionamento ou migração de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tabular_pipeline.core.engine.engine import RunResult
from tabular_pipeline.core.pipeline.context import RunContext

REPORT_VERSION = "1"


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class RunReport:
    """
    Estrutura canônica do Run Report (v1).

    Campos:
        - run_id / created_at: identidade da execução
        - config_hash: sha256 da configuração efetiva (quando registrado)
        - ok: False se algum Step terminou FAILED
        - output_key: chave do último Dataset publicado com sucesso
        - steps: `StepResult.to_dict()` por Step, em ordem de execução
        - events: Event Log do RunContext (ordem de emissão)
        - warnings: avisos não fatais por step_id
    """

    run_id: str
    created_at: str
    ok: bool
    config_hash: Optional[str] = None
    output_key: Optional[str] = None
    steps: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    version: str = REPORT_VERSION

    def step(self, step_id: str) -> Dict[str, Any]:
        for s in self.steps:
            if s["step_id"] == step_id:
                return s
        raise KeyError(step_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "run": {
                "run_id": self.run_id,
                "created_at": self.created_at,
                "config_hash": self.config_hash,
            },
            "ok": self.ok,
            "output_key": self.output_key,
            "steps": list(self.steps),
            "events": list(self.events),
            "warnings": {k: list(v) for k, v in self.warnings.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunReport":
        run = data.get("run") or {}
        return cls(
            run_id=run["run_id"],
            created_at=run["created_at"],
            config_hash=run.get("config_hash"),
            ok=bool(data.get("ok", False)),
            output_key=data.get("output_key"),
            steps=list(data.get("steps") or []),
            events=list(data.get("events") or []),
            warnings={k: list(v) for k, v in (data.get("warnings") or {}).items()},
            version=str(data.get("version", REPORT_VERSION)),
        )


def build_run_report(ctx: RunContext, result: RunResult) -> RunReport:
    """
    Consolida RunContext + RunResult em um RunReport.

    O hash de configuração é lido de `ctx.meta["config_hash"]` quando a run
    foi iniciada pela fachada `run_pipeline`.
    """
    return RunReport(
        run_id=ctx.run_id,
        created_at=_iso(ctx.created_at),
        config_hash=(ctx.meta or {}).get("config_hash"),
        ok=result.ok,
        output_key=result.last_output_key(),
        steps=[r.to_dict() for r in result.steps.values()],
        events=[dict(e) for e in ctx.events],
        warnings={k: list(v) for k, v in ctx.warnings.items()},
    )


def save_run_report(report: Union[RunReport, Dict[str, Any]], path: Union[str, Path]) -> Path:
    """
    Persiste o relatório em JSON (chaves ordenadas, indentado).

    Diretórios intermediários são criados. Valores não nativos de JSON
    (ex.: datas em payloads) são gravados via `str`.

    Raises:
        OSError: falha ao criar diretórios ou escrever o arquivo.
    """
    data = report.to_dict() if isinstance(report, RunReport) else report
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )
    return target


def load_run_report(path: Union[str, Path]) -> RunReport:
    """
    Restaura um RunReport persistido.

    Raises:
        OSError: falha de leitura.
        json.JSONDecodeError: JSON inválido.
        KeyError: documento sem `run.run_id` / `run.created_at`.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return RunReport.from_dict(data)
