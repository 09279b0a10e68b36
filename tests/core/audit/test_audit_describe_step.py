"""Testes do Step audit.describe (v1).

Invariantes:
- o Dataset não é mutado
- estatísticas numéricas consideram apenas valores observados
- coluna numérica sem valores observados produz estatísticas None
"""

import pytest

from tabular_pipeline.core.dataset import MISSING, ColumnType, Dataset
from tabular_pipeline.core.pipeline.types import StepStatus
from tabular_pipeline.steps.audit.describe import AuditDescribeStep, describe


def test_describe_counts_and_numeric_stats(people):
    summary = describe(people)

    assert summary.rows == 4
    assert [c.name for c in summary.columns] == people.names
    age = summary.column("age")
    assert age.ctype is ColumnType.NUMERIC
    assert age.missing == 1
    assert (age.min, age.max) == (21.0, 45.0)
    assert age.mean == pytest.approx(32.0)
    assert summary.column("country").min is None
    assert summary.missing_total == 4


def test_describe_all_missing_numeric_column():
    ds = Dataset.from_columns({"x": [MISSING, MISSING]}, {"x": "numeric"})

    col = describe(ds).column("x")

    assert col.missing == 2
    assert (col.min, col.max, col.mean) == (None, None, None)


def test_summary_to_dict_only_numeric_has_stats(people):
    data = describe(people).to_dict()

    by_name = {c["name"]: c for c in data["columns"]}
    assert by_name["age"]["mean"] == pytest.approx(32.0)
    assert "mean" not in by_name["country"]
    assert by_name["joined"]["type"] == "date"


def test_step_publishes_summary_without_touching_dataset(dummy_ctx, people):
    dummy_ctx.set_artifact("data.input", people)
    fingerprint = people.fingerprint()

    result = AuditDescribeStep().run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert result.artifacts == {"input": "data.input", "summary": "summary.audit.describe"}
    assert dummy_ctx.get_artifact("summary.audit.describe").rows == 4
    assert result.metrics["missing_total"] == 4
    assert result.payload["summary"]["rows"] == 4
    assert people.fingerprint() == fingerprint


def test_step_missing_input_fails(dummy_ctx):
    result = AuditDescribeStep(input_key="data.nowhere").run(dummy_ctx)

    assert result.status == StepStatus.FAILED
    assert result.payload["error"]["details"]["artifact"] == "data.nowhere"
