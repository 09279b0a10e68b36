import pytest

from tabular_pipeline.core.exceptions import DuplicateColumn, UnknownColumn
from tabular_pipeline.core.pipeline.types import StepStatus
from tabular_pipeline.steps.transform.select_columns import TransformSelectColumnsStep, select_columns


def test_select_follows_requested_order(people):
    out = select_columns(people, ["country", "name"])

    assert out.names == ["country", "name"]
    assert out.n_rows == people.n_rows
    assert out.column("name").values == people.column("name").values


def test_select_unknown_column(people):
    with pytest.raises(UnknownColumn) as e:
        select_columns(people, ["name", "salary"])
    assert e.value.details["column"] == "salary"


def test_select_duplicate_name(people):
    with pytest.raises(DuplicateColumn):
        select_columns(people, ["age", "age"])


def test_step_reports_dropped_columns(dummy_ctx, people):
    dummy_ctx.set_artifact("data.input", people)

    result = TransformSelectColumnsStep(names=["name", "age"]).run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert result.payload["params"] == {"names": ["name", "age"]}
    assert result.payload["impact"]["columns_dropped"] == ["country", "joined", "active"]
    assert dummy_ctx.get_artifact(result.artifacts["output"]).names == ["name", "age"]
