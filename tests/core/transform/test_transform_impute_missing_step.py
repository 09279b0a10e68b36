from __future__ import annotations

import pytest

from tabular_pipeline.core.dataset import MISSING, Dataset
from tabular_pipeline.core.exceptions import EmptyColumnError, InvalidStrategy, UnknownColumn
from tabular_pipeline.core.pipeline.types import StepStatus
from tabular_pipeline.steps.transform.impute_missing import TransformImputeMissingStep, impute_missing


def _numbers(values):
    return Dataset.from_columns({"x": values}, {"x": "numeric"})


def test_mean_uses_observed_values_only():
    out = impute_missing(_numbers([1, 2, MISSING, 4]), strategy="mean")

    assert out.column("x").values[:2] == (1, 2)
    assert out.column("x").values[2] == pytest.approx(7 / 3)
    assert out.column("x").values[3] == 4


def test_median_strategy():
    out = impute_missing(_numbers([1, MISSING, 3, 10]), strategy="median", columns=["x"])
    assert out.column("x").values[1] == 3.0


def test_auto_fills_numeric_and_categorical_only(people):
    out = impute_missing(people, strategy="auto", placeholder="N/A")

    assert out.column("age").values[1] == pytest.approx(32.0)
    assert out.column("country").values[2] == "N/A"
    # date e boolean permanecem intactos em auto
    assert out.column("joined").missing_count() == 1
    assert out.column("active").missing_count() == 1
    # entrada não é mutada
    assert people.column("age").values[1] is MISSING


def test_per_column_mapping_and_constant(people):
    out = impute_missing(people, strategy={"active": "constant"}, value=False)

    assert out.column("active").values == (True, False, True, False)
    assert out.column("age").missing_count() == 1


def test_imputation_is_idempotent(people):
    once = impute_missing(people, strategy="auto")
    twice = impute_missing(once, strategy="auto")

    assert once == twice
    assert once.fingerprint() == twice.fingerprint()


def test_all_missing_numeric_column_fails():
    with pytest.raises(EmptyColumnError) as e:
        impute_missing(_numbers([MISSING, MISSING]), strategy="mean")
    assert e.value.details["column"] == "x"


def test_strategy_type_mismatch_fails(people):
    with pytest.raises(InvalidStrategy):
        impute_missing(people, strategy={"country": "mean"})
    with pytest.raises(InvalidStrategy):
        impute_missing(people, strategy="mode")
    with pytest.raises(InvalidStrategy):
        impute_missing(people, strategy={"age": "constant"}, value="zero")


def test_constant_without_value_fails():
    with pytest.raises(InvalidStrategy) as e:
        impute_missing(_numbers([1, MISSING]), strategy="constant")
    assert e.value.details["strategy"] == "constant"

    with pytest.raises(InvalidStrategy):
        impute_missing(_numbers([1, MISSING]), strategy={"x": "constant"})


def test_constant_step_without_value_fails(dummy_ctx):
    dummy_ctx.set_artifact("data.input", _numbers([1, MISSING]))

    result = TransformImputeMissingStep(strategy="constant", value=None).run(dummy_ctx)

    assert result.status == StepStatus.FAILED
    assert result.payload["error"]["type"] == "INVALID_STRATEGY"


def test_unknown_column_fails(people):
    with pytest.raises(UnknownColumn):
        impute_missing(people, strategy="mean", columns=["salary"])


def test_step_publishes_new_checkpoint_with_impact(dummy_ctx, people):
    dummy_ctx.set_artifact("data.input", people)

    result = TransformImputeMissingStep().run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert result.artifacts == {"input": "data.input", "output": "data.transform.impute_missing"}
    out = dummy_ctx.get_artifact("data.transform.impute_missing")
    # placeholder vem de pipeline.missing_placeholder
    assert out.column("country").values[2] == "Unknown"
    assert dummy_ctx.get_artifact("data.input") is people

    impact = result.payload["impact"]
    assert impact["columns_affected"] == ["age", "country"]
    assert impact["values_imputed"] == {"age": 1, "country": 1}
    assert result.metrics["missing_total"] == 2


def test_step_failure_becomes_error_payload(dummy_ctx):
    dummy_ctx.set_artifact("data.input", _numbers([MISSING]))

    result = TransformImputeMissingStep(strategy="mean").run(dummy_ctx)

    assert result.status == StepStatus.FAILED
    assert result.payload["error"]["type"] == "EMPTY_COLUMN"
    assert result.payload["error"]["details"]["column"] == "x"
    assert not dummy_ctx.has_artifact("data.transform.impute_missing")
    assert dummy_ctx.events[-1]["level"] == "error"
