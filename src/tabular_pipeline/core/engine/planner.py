# src/tabular_pipeline/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Valida a estrutura do pipeline e produz uma ordem de execução topológica
determinística dos Steps declarados.

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn)
    - Empates são resolvidos pela ordem de declaração dos Steps, de modo
      que um pipeline linear executa exatamente na ordem declarada
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum Step é executado antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma declaração produz sempre a mesma ordem
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from tabular_pipeline.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um Step referencia uma dependência inexistente
    em `depends_on`. Nenhuma execução ocorre nesta condição.
    """


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de dependências contém um ciclo.
    Nenhuma ordem topológica válida pode ser produzida.
    """


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística de Steps.

    Sempre que múltiplos Steps estiverem prontos, o primeiro declarado é
    executado primeiro.

    Args:
        steps (Iterable[Step]): Steps na ordem de declaração.

    Returns:
        List[Step]: Steps em ordem de execução.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    step_list = list(steps)
    by_id: Dict[str, Step] = {}
    position: Dict[str, int] = {}
    for s in step_list:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s
        position[sid] = len(position)

    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d

    incoming_count: Dict[str, int] = {sid: len(d) for sid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(sid)

    ready: List[str] = sorted((sid for sid, c in incoming_count.items() if c == 0), key=position.get)
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in outgoing[sid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
        ready.sort(key=position.get)

    if len(order_ids) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order_ids]
