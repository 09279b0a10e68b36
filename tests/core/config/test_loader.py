# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config / resolve_config).

Os testes asseguram que:
- DEFAULT_CONFIG é a base de toda configuração resolvida
- o arquivo de defaults, quando informado, é obrigatório
- o arquivo local é opcional e tem prioridade sobre os defaults
- formatos não suportados e raízes não-dict são rejeitados

Limites explícitos:
    - Não valida hashing de configuração
    - Não valida integração com engine ou pipeline
"""

import json
from pathlib import Path

import pytest

from tabular_pipeline.core.config import DEFAULT_CONFIG, load_config, resolve_config
from tabular_pipeline.core.config.errors import (
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


def test_no_files_returns_builtin_defaults():
    out = load_config()
    assert out == DEFAULT_CONFIG
    assert out is not DEFAULT_CONFIG
    assert out["engine"]["fail_fast"] is True
    assert out["pipeline"]["missing_placeholder"] == "Unknown"


def test_missing_defaults_raises(tmp_path: Path):
    """
    Verifica que um arquivo de defaults informado e inexistente é erro fatal.

    Overrides locais nunca silenciam a ausência dos defaults.
    """
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "defaults.yaml"), local_path=None)


def test_missing_local_is_ok(tmp_path: Path, project_like_config_defaults_yaml):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))

    assert out["engine"]["fail_fast"] is True
    assert [s["op"] for s in out["pipeline"]["steps"]] == ["impute_missing", "describe"]


def test_load_defaults_and_local(tmp_path: Path, project_like_config_defaults_yaml, project_like_config_local_yaml):
    """
    Verifica o merge defaults + local.

    O resultado reflete os valores sobrescritos pelo local e preserva os
    demais valores dos defaults (inclusive a lista de Steps).
    """
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")
    local.write_text(project_like_config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["engine"]["fail_fast"] is False
    assert out["pipeline"]["missing_placeholder"] == "N/A"
    assert len(out["pipeline"]["steps"]) == 2
    assert out["steps"]["audit.describe"]["enabled"] is False
    assert out["steps"]["transform.impute_missing"]["enabled"] is True


def test_json_config_is_supported(tmp_path: Path):
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"engine": {"fail_fast": False}}), encoding="utf-8")

    out = load_config(defaults_path=str(defaults))

    assert out["engine"]["fail_fast"] is False


def test_empty_file_is_empty_dict(tmp_path: Path):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")

    assert load_config(defaults_path=str(defaults)) == DEFAULT_CONFIG


def test_invalid_root_type_raises(tmp_path: Path):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")

    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_unsupported_extension_raises(tmp_path: Path):
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("engine = { fail_fast = true }\n", encoding="utf-8")

    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_resolve_config_applies_in_memory_override():
    out = resolve_config({"pipeline": {"missing_placeholder": "?"}})

    assert out["pipeline"]["missing_placeholder"] == "?"
    assert out["engine"]["fail_fast"] is True
    assert DEFAULT_CONFIG["pipeline"]["missing_placeholder"] == "Unknown"


def test_resolve_config_rejects_type_conflict():
    with pytest.raises(ConfigTypeConflictError):
        resolve_config({"engine": "strict"})


def test_resolve_config_rejects_non_dict():
    with pytest.raises(InvalidConfigRootTypeError):
        resolve_config(["engine"])  # type: ignore[arg-type]
