# src/tabular_pipeline/core/traceability/__init__.py
"""
Pacote de rastreabilidade (traceability) do Tabular Pipeline — Run Report v1.

API pública exposta:
    - RunReport        → estrutura canônica do relatório de execução
    - build_run_report → consolida RunContext + RunResult
    - save_run_report  → persistência determinística em JSON
    - load_run_report  → restauração do relatório

Invariantes:
    - Steps aparecem na ordem real de execução
    - Eventos nunca são reordenados
    - A estrutura é serializável e reprodutível (round-trip)
"""

from .report import RunReport, build_run_report, load_run_report, save_run_report

__all__ = [
    "RunReport",
    "build_run_report",
    "save_run_report",
    "load_run_report",
]
