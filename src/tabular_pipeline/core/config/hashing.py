"""
Hashing canônico de configuração do Tabular Pipeline.

O hash representa a identidade estrutural da configuração efetiva e é
registrado no relatório de execução da run.

Política (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 (64 caracteres hexadecimais)
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do pipeline.

    Configurações estruturalmente equivalentes (mesmo com ordem de chaves
    diferente) produzem o mesmo hash.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
