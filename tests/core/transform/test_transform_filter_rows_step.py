"""Testes do Step transform.filter_rows (v1).

Cobre:
- comparações simples e conjunção
- ausentes nunca satisfazem o predicado
- literal incompatível com o tipo da coluna
- parsing da forma textual
"""

from datetime import date

import pytest

from tabular_pipeline.core.dataset import MISSING, Dataset
from tabular_pipeline.core.exceptions import ColumnTypeError, PipelineConfigError, UnknownColumn
from tabular_pipeline.core.pipeline.types import StepStatus
from tabular_pipeline.steps.transform.filter_rows import Comparison, TransformFilterRowsStep, filter_rows


def test_greater_than_keeps_order():
    ds = Dataset.from_columns({"x": [1, 5, 10]}, {"x": "numeric"})

    out = filter_rows(ds, [Comparison("x", ">", 4)])

    assert out.column("x").values == (5, 10)


def test_conjunction_of_comparisons(people):
    out = filter_rows(people, ["country == BR", "age >= 25"])
    assert out.column("name").values == ("ana",)


def test_missing_never_matches(people):
    assert filter_rows(people, ["country != US"]).column("name").values == ("ana", "dani")
    assert filter_rows(people, ["age > 0"]).n_rows == 3


def test_empty_result_is_valid(people):
    out = filter_rows(people, ["age > 100"])

    assert out.n_rows == 0
    assert out.names == people.names


def test_date_literal_accepts_iso_string(people):
    out = filter_rows(people, [{"column": "joined", "op": "<", "value": "2020-06-01"}])
    assert out.column("joined").values == (date(2020, 1, 5), date(2019, 12, 31))


def test_boolean_literal_from_text(people):
    out = filter_rows(people, ["active == true"])
    assert out.column("name").values == ("ana", "caio")


def test_text_literal_is_typed_by_column():
    ds = Dataset.from_columns(
        {"country": ["NO", "BR", "yes"], "zip": ["01234", "1234", "01234"], "n": [7, 8, 9]},
        {"country": "categorical", "zip": "categorical", "n": "numeric"},
    )

    assert filter_rows(ds, ["country == NO"]).column("zip").values == ("01234",)
    assert filter_rows(ds, ["country == yes"]).column("n").values == (9,)
    assert filter_rows(ds, ["zip == 01234"]).column("n").values == (7, 9)
    assert filter_rows(ds, ['zip == "1234"']).column("n").values == (8,)
    assert filter_rows(ds, ["n >= 08"]).column("n").values == (8, 9)


def test_boolean_literal_accepts_yaml_words(people):
    assert filter_rows(people, ["active == no"]).column("name").values == ("bob",)


def test_literal_type_mismatch(people):
    with pytest.raises(ColumnTypeError):
        filter_rows(people, ["age > abc"])
    with pytest.raises(ColumnTypeError):
        filter_rows(people, ["joined > yesterday"])


def test_unknown_column(people):
    with pytest.raises(UnknownColumn):
        filter_rows(people, ["salary > 1"])


def test_invalid_operator_and_expression():
    with pytest.raises(PipelineConfigError):
        Comparison("x", "=~", 1)
    with pytest.raises(PipelineConfigError):
        Comparison.parse("x is big")


def test_step_reports_rows_removed(dummy_ctx, people):
    dummy_ctx.set_artifact("data.input", people)

    result = TransformFilterRowsStep(where=["age > 25"]).run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert result.payload["params"]["where"] == [{"column": "age", "op": ">", "value": "25"}]
    assert result.payload["impact"] == {"rows_removed": 2}
    assert result.metrics["rows"] == 2
    assert people.n_rows == 4
    assert MISSING not in dummy_ctx.get_artifact(result.artifacts["output"]).column("age").values
