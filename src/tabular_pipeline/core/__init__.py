# src/tabular_pipeline/core/__init__.py
"""
Core do Tabular Pipeline.

Reúne as responsabilidades independentes de operações concretas:

    - dataset      → modelo de dados imutável e tipado
    - exceptions   → hierarquia de exceções tipadas (TabularException)
    - errors       → forma serializável das falhas (ErrorPayload)
    - config       → resolução de configuração (merge, hashing)
    - pipeline     → protocolo de Step, RunContext e registry
    - engine       → planejamento (DAG) e execução controlada
    - traceability → Run Report para auditoria

Limites explícitos:
    - Não contém transformações concretas (ver `tabular_pipeline.steps`)
    - Não depende de notebooks nem de UI
"""
