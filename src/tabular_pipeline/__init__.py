# src/tabular_pipeline/__init__.py
"""
Tabular Pipeline — pipelines declarativos de data wrangling sobre Datasets imutáveis.

O pacote expressa a parte de preparação de dados de uma análise
exploratória (reshape, imputação, derivação, agregação por grupo,
decomposição de datas) como uma sequência de Steps puros e auditáveis.

Princípios centrais:
    - Datasets são imutáveis: cada Step publica um novo checkpoint
    - Tipos de coluna são declarados e validados em toda fronteira
    - Ausência é explícita (sentinela MISSING), nunca None/NaN
    - Falhas são tipadas e nunca descartam o trabalho anterior

Arquitetura em alto nível:
    - core.dataset      → MISSING, ColumnType, Column, Dataset
    - core.config       → carregamento, merge e hashing de configuração
    - core.pipeline     → protocolo de Step, RunContext e registro
    - core.engine       → planejamento (DAG) e execução do pipeline
    - core.traceability → Run Report
    - steps             → operações canônicas (função pura + Step)
    - notebook_ui       → apresentação em notebooks (HTML/texto)
"""

from .core.dataset import MISSING, Column, ColumnType, Dataset, is_missing
from .notebook_ui import RenderResult, render_dataset, render_payload, render_summary
from .pipeline import PipelineRun, run_pipeline

__all__ = [
    "MISSING",
    "Column",
    "ColumnType",
    "Dataset",
    "is_missing",
    "PipelineRun",
    "run_pipeline",
    "RenderResult",
    "render_dataset",
    "render_payload",
    "render_summary",
]
