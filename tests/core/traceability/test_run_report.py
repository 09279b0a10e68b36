# tests/core/traceability/test_run_report.py
"""
Testes do Run Report v1.

Invariantes:
    - Steps aparecem na ordem real de execução
    - created_at é serializado em ISO 8601 UTC
    - save → load reproduz o relatório
"""

import json

from tabular_pipeline.core.engine.engine import Engine
from tabular_pipeline.core.traceability import RunReport, build_run_report, load_run_report, save_run_report
from tabular_pipeline.steps.transform.select_columns import TransformSelectColumnsStep


def _run(dummy_ctx, people):
    dummy_ctx.set_artifact("data.input", people)
    dummy_ctx.meta["config_hash"] = "abc123"
    steps = [
        TransformSelectColumnsStep(names=["name", "age"]),
        TransformSelectColumnsStep(id="bad", names=["salary"], depends_on=[]),
    ]
    dummy_ctx.config["engine"]["fail_fast"] = False
    return Engine(steps=steps, ctx=dummy_ctx).run()


def test_build_run_report(dummy_ctx, people):
    result = _run(dummy_ctx, people)

    report = build_run_report(dummy_ctx, result)

    assert report.run_id == "run-test-001"
    assert report.created_at == "2026-01-16T00:00:00+00:00"
    assert report.config_hash == "abc123"
    assert report.ok is False
    assert report.output_key == "data.transform.select_columns"
    assert [s["step_id"] for s in report.steps] == ["transform.select_columns", "bad"]
    assert report.step("bad")["payload"]["error"]["type"] == "UNKNOWN_COLUMN"
    assert any(e["step_id"] == "bad" and e["level"] == "error" for e in report.events)


def test_save_and_load_round_trip(tmp_path, dummy_ctx, people):
    report = build_run_report(dummy_ctx, _run(dummy_ctx, people))

    path = save_run_report(report, tmp_path / "runs" / "report.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert list(data) == sorted(data)
    assert data["run"]["run_id"] == "run-test-001"
    assert load_run_report(path) == RunReport.from_dict(json.loads(json.dumps(report.to_dict(), default=str)))
