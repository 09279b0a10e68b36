# tests/conftest.py
"""
Fixtures compartilhados para testes do Tabular Pipeline.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- Datasets pequenos cobrindo os quatro tipos de coluna
- Steps dummy para testes estruturais do engine

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
"""

import pytest
from datetime import date, datetime, timezone


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante a um `config.defaults.yaml` real.

    Usado pelos testes do loader (leitura + deep-merge com local) e de
    hashing da configuração resolvida.
    """
    return """\
engine:
  fail_fast: true
pipeline:
  missing_placeholder: Unknown
  steps:
    - op: impute_missing
      strategy: auto
    - op: describe
steps:
  transform.impute_missing:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de overrides locais (apenas as chaves alteradas)."""
    return """\
engine:
  fail_fast: false
pipeline:
  missing_placeholder: N/A
steps:
  audit.describe:
    enabled: false
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e já resolvida para exercitar engine e Steps.

    Invariantes:
        - `fail_fast` explicitamente habilitado
        - não depende de filesystem nem de merge
    """
    return {
        "engine": {"fail_fast": True},
        "pipeline": {"missing_placeholder": "Unknown", "steps": []},
        "steps": {},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico (run_id e created_at fixos, UTC).

    Usado por testes de Steps, engine e run report.
    """
    from tabular_pipeline.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Classe (não instância) de um Step mínimo e duck-typed.

    - respeita o protocolo de Step sem herança
    - sempre retorna SUCCESS e registra `<id>.ok` no RunContext
    """
    from tabular_pipeline.core.pipeline.types import StepKind, StepStatus, StepResult

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "audit.describe",
            kind: StepKind = StepKind.DIAGNOSTIC,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Dataset fixtures
# =====================================================

@pytest.fixture
def people():
    """
    Dataset com os quatro tipos de coluna e ausências em numérica e categórica.

        name   age      country  joined      active
        ana    30       BR       2020-01-05  True
        bob    MISSING  US       2021-06-30  False
        caio   45       MISSING  MISSING     True
        dani   21       BR       2019-12-31  MISSING
    """
    from tabular_pipeline.core.dataset import MISSING, Dataset

    return Dataset.from_columns(
        {
            "name": ["ana", "bob", "caio", "dani"],
            "age": [30, MISSING, 45, 21],
            "country": ["BR", "US", MISSING, "BR"],
            "joined": [date(2020, 1, 5), date(2021, 6, 30), MISSING, date(2019, 12, 31)],
            "active": [True, False, True, MISSING],
        },
        {
            "name": "categorical",
            "age": "numeric",
            "country": "categorical",
            "joined": "date",
            "active": "boolean",
        },
    )


@pytest.fixture
def sales():
    """Dataset longo de vendas (região x mês) para group_aggregate e pivot."""
    from tabular_pipeline.core.dataset import MISSING, Dataset

    return Dataset.from_columns(
        {
            "region": ["north", "south", "north", "south", "north", MISSING],
            "month": ["jan", "jan", "feb", "feb", "mar", "mar"],
            "amount": [10.0, 4.0, 6.0, MISSING, 2.0, 7.0],
        },
        {"region": "categorical", "month": "categorical", "amount": "numeric"},
    )
