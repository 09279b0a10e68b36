# src/tabular_pipeline/core/engine/__init__.py
"""
Engine do Tabular Pipeline.

Componentes principais:
    - planner → ordenação topológica determinística e validações estruturais
    - engine  → execução coordenada de Steps com políticas explícitas
                (enabled por Step, fail-fast, skip por dependência falha)

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por run
    - O resultado reflete explicitamente o estado final de cada Step
"""
