"""
Smoke E2E — Tabular Pipeline

Valida o fluxo de ponta a ponta através da fachada `run_pipeline`:
- Dataset em memória + Steps declarativos
- falha tipada no meio da cadeia preservando o último checkpoint válido
- config YAML em disco: ingest.load → transformações → export.table
- Run Report persistido e relido

Requisitos:
- pytest -q (apenas tmp_path; nenhum fixture em disco versionado)
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from tabular_pipeline import MISSING, run_pipeline
from tabular_pipeline.core.config.loader import load_config
from tabular_pipeline.core.pipeline.types import StepStatus
from tabular_pipeline.core.traceability import build_run_report, load_run_report, save_run_report


def test_in_memory_pipeline(sales) -> None:
    run = run_pipeline(
        sales,
        [
            {"op": "impute_missing", "strategy": {"amount": "mean", "region": "placeholder"}},
            {"op": "filter_rows", "where": ["amount > 5"]},
            {
                "op": "group_aggregate",
                "keys": ["region"],
                "aggregations": [
                    {"output": "total", "source": "amount", "reducer": "sum"},
                    {"output": "n", "reducer": "count"},
                ],
            },
        ],
        config={"pipeline": {"missing_placeholder": "unknown"}},
        run_id="e2e-memory",
    )

    assert run.ok is True
    out = run.dataset
    assert out.column("region").values == ("north", "south", "unknown")
    assert out.column("total").values[0] == 16.0
    assert out.column("total").values[1] == pytest.approx(5.8)
    assert out.column("n").values == (2, 1, 1)

    # checkpoints intermediários permanecem acessíveis
    assert run.dataset_at("transform.impute_missing").n_rows == 6
    assert run.dataset_at("transform.filter_rows").n_rows == 4
    assert list(run.diagnostics) == [
        "transform.impute_missing",
        "transform.filter_rows",
        "transform.group_aggregate",
    ]
    # entrada intacta
    assert sales.column("amount").values[3] is MISSING
    assert run.ctx.events[0]["message"] == "run started"
    assert run.ctx.events[-1]["message"] == "run finished"


def test_failure_keeps_last_valid_checkpoint(sales) -> None:
    run = run_pipeline(
        sales,
        [
            {"op": "filter_rows", "where": ["amount == 10"]},
            {"op": "derive_column", "name": "scaled", "expr": {"kind": "minmax", "source": "amount"}},
            "describe",
        ],
    )

    assert run.ok is False
    failed = run.result.failed
    assert failed.step_id == "transform.derive_column"
    assert failed.payload["error"]["type"] == "DEGENERATE_RANGE"
    assert run.dataset.n_rows == 1
    assert run.dataset.names == ["region", "month", "amount"]
    assert "audit.describe" not in run.result.steps


def test_pipeline_from_yaml_config(tmp_path: Path) -> None:
    source = tmp_path / "orders.csv"
    source.write_text(
        "order,placed,amount\n"
        "o1,2024-03-15,10.5\n"
        "o2,2024-04-01,\n"
        "o3,,3\n",
        encoding="utf-8",
    )
    target = tmp_path / "out" / "orders_clean.csv"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""\
engine:
  fail_fast: true
pipeline:
  steps:
    - op: load
      path: {json.dumps(str(source))}
      schema: {{order: categorical, placed: categorical, amount: numeric}}
    - op: decompose_date
      column: placed
    - op: impute_missing
      strategy: {{amount: median}}
    - op: select_columns
      names: [order, placed_month, amount]
    - op: export
      path: {json.dumps(str(target))}
    - op: describe
""",
        encoding="utf-8",
    )

    config = load_config(defaults_path=str(config_path))
    run = run_pipeline(config=config, run_id="e2e-yaml")

    assert run.ok is True
    assert [r.status for r in run.result.steps.values()] == [StepStatus.SUCCESS] * 6

    out = run.dataset
    assert out.names == ["order", "placed_month", "amount"]
    assert out.column("placed_month").values == (3, 4, MISSING)
    assert out.column("amount").values == (10.5, 6.75, 3)

    exported = pd.read_csv(target)
    assert list(exported["order"]) == ["o1", "o2", "o3"]

    summary = run.ctx.get_artifact("summary.audit.describe")
    assert summary.missing_total == 1

    report = build_run_report(run.ctx, run.result)
    path = save_run_report(report, tmp_path / "run_report.json")
    loaded = load_run_report(path)

    assert loaded.run_id == "e2e-yaml"
    assert loaded.config_hash == run.ctx.meta["config_hash"]
    assert [s["step_id"] for s in loaded.steps] == [
        "ingest.load",
        "transform.decompose_date",
        "transform.impute_missing",
        "transform.select_columns",
        "export.table",
        "audit.describe",
    ]
    assert loaded.step("ingest.load")["payload"]["source"]["type"] == "csv"
