# src/tabular_pipeline/core/config/loader.py
"""
Loader canônico de configuração do Tabular Pipeline.

A configuração efetiva é resolvida a partir de:
    - `DEFAULT_CONFIG` (embutido no pacote)
    - um arquivo de defaults do projeto (opcional)
    - um arquivo local de overrides (opcional)

Precedência: local > arquivo de defaults > DEFAULT_CONFIG.

Formatos suportados (v1): YAML (.yaml, .yml) e JSON (.json).

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - Um arquivo de defaults informado e inexistente é erro fatal
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "fail_fast": True,
    },
    "pipeline": {
        "missing_placeholder": "Unknown",
        "steps": [],
    },
    "steps": {},
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def resolve_config(override: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Aplica `override` (já em memória) sobre `DEFAULT_CONFIG`."""
    if override is None:
        return deepcopy(DEFAULT_CONFIG)
    if not isinstance(override, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(override).__name__}"
        )
    return deep_merge(DEFAULT_CONFIG, override)


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do pipeline.

    Política de resolução:
        - `defaults_path`, quando informado, deve existir
        - `local_path` é opcional; se o arquivo não existir é ignorado
        - o local sempre tem prioridade sobre os defaults

    Args:
        defaults_path (Optional[str]): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida do pipeline.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    effective = deepcopy(DEFAULT_CONFIG)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return effective
