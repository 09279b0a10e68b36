# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Os testes asseguram que:
- valores escalares são sobrescritos
- dicionários são mesclados de forma recursiva
- listas (ex.: `pipeline.steps`) são sobrescritas integralmente
- conflitos de tipo são rejeitados explicitamente
- objetos de entrada não são mutados
"""

import pytest

from tabular_pipeline.core.config.errors import ConfigTypeConflictError
from tabular_pipeline.core.config.merge import deep_merge


def test_merge_simple_override():
    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)

    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    base = {"pipeline": {"missing_placeholder": "Unknown", "steps": []}}
    override = {"pipeline": {"missing_placeholder": "N/A"}}

    out = deep_merge(base, override)

    assert out == {"pipeline": {"missing_placeholder": "N/A", "steps": []}}


def test_merge_list_override_total():
    """
    Listas não são mescladas elemento a elemento: o override é total.

    Garante que a declaração de Steps do arquivo local substitui a dos
    defaults, sem concatenação implícita.
    """
    base = {"pipeline": {"steps": [{"op": "describe"}, {"op": "impute_missing"}]}}
    override = {"pipeline": {"steps": [{"op": "filter_rows", "where": ["x > 4"]}]}}

    out = deep_merge(base, override)

    assert out["pipeline"]["steps"] == [{"op": "filter_rows", "where": ["x > 4"]}]


def test_merge_int_and_float_are_compatible():
    out = deep_merge({"threshold": 1}, {"threshold": 0.5})
    assert out == {"threshold": 0.5}


def test_merge_none_base_accepts_any_override():
    out = deep_merge({"path": None}, {"path": "data.csv"})
    assert out == {"path": "data.csv"}


def test_merge_type_conflict_raises():
    base = {"engine": {"fail_fast": True}}
    override = {"engine": "strict"}

    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_merge_bool_is_not_numeric():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"fail_fast": True}, {"fail_fast": 1})
