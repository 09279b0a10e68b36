"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre Steps durante uma run.

O RunContext atua como o único meio permitido de:
    - troca indireta de Datasets entre Steps (artifact store)
    - registro de logs estruturados de execução
    - coleta de warnings não fatais associados a Steps

Convenção de artefatos:
    - cada Step de transformação lê o Dataset de uma chave explícita
      (`input_key`) e publica o resultado em uma chave nova
      (`data.<step_id>`); nenhum checkpoint anterior é sobrescrito
    - qualquer checkpoint pode ser relido para reexecutar o restante

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


@dataclass
class RunContext:
    """
    Contexto de execução de uma run do pipeline.

    Consolida identidade da execução (run_id, created_at), configuração
    resolvida, artefatos produzidos (Datasets, Summaries), eventos de log
    e warnings por Step.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    def artifact_keys(self) -> List[str]:
        return list(self._artifacts)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
