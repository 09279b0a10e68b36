"""
Tipos canônicos do pipeline do Tabular Pipeline.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, Engine e o relatório de execução.

Componentes principais:
    - StepStatus → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → enum de classificação semântica de Steps
    - StepResult → estrutura imutável de resultado de execução

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável e seguro contra mutação acidental
    - Tipos não dependem de engine, dataset ou UI
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline.

    Tipos definidos:
        - INGEST: materializa um Dataset a partir de uma fonte externa
        - DIAGNOSTIC: inspeções que não alteram o Dataset (ex.: describe)
        - TRANSFORM: produz um novo Dataset a partir do anterior
        - EXPORT: entrega o Dataset a um colaborador externo

    O tipo é puramente informativo: o Engine não decide execução com base nele.
    """
    INGEST = "ingest"
    DIAGNOSTIC = "diagnostic"
    TRANSFORM = "transform"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: execução pulada por decisão explícita (config ou dependência falha)
        - FAILED: execução interrompida por erro

    Estados intermediários (ex.: running) não pertencem a este enum.
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução do Step
        - summary: resumo textual da execução
        - metrics: métricas numéricas (rows, columns, missing_total, ...)
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: chaves de artefatos produzidos no RunContext
        - payload: dados adicionais (diagnostics, error, ...)

    Invariantes:
        - Uma instância de StepResult nunca é alterada após criada
        - `step_id`, `kind` e `status` estão sempre presentes
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "kind": self.kind.value if isinstance(self.kind, StepKind) else self.kind,
            "status": self.status.value,
            "summary": self.summary,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "artifacts": dict(self.artifacts),
            "payload": dict(self.payload),
        }
