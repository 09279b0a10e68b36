"""
Contrato canônico de Step do Tabular Pipeline.

Um Step é a menor unidade executável do pipeline: lê um Dataset do
RunContext, aplica uma transformação pura e publica um novo Dataset.

Princípios fundamentais:
    - Steps não conhecem o Engine nem o planner
    - Steps não controlam ordem de execução
    - Comunicação entre Steps é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - Cada Step possui um `id` único
    - Cada Step declara explicitamente suas dependências
    - O método `run` é chamado no máximo uma vez por execução
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step.

    Atributos obrigatórios:
        - id: identificador único e estável do Step
        - kind: classificação semântica do Step (`StepKind`)
        - depends_on: lista de `id` dos Steps dos quais depende

    O protocolo não impõe herança, apenas conformidade estrutural.
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
