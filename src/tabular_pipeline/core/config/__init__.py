# src/tabular_pipeline/core/config/__init__.py

"""
Camada de configuração do Tabular Pipeline.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade da run

Chaves reconhecidas:
    - engine.fail_fast               → interrompe a run na primeira falha
    - pipeline.missing_placeholder   → rótulo usado na imputação categórica
    - pipeline.steps                 → declaração ordenada dos Steps
    - steps.<step_id>.enabled        → desabilita um Step específico

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro
"""

from .loader import DEFAULT_CONFIG, load_config, resolve_config

__all__ = ["DEFAULT_CONFIG", "load_config", "resolve_config"]
