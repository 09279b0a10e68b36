# tests/core/engine/test_planner_toposort.py
"""
Testes da ordenação topológica determinística do planner.

Sempre que mais de um Step está pronto, prevalece a ordem de declaração.
"""

from tabular_pipeline.core.engine.planner import plan_execution


def test_toposort_linear(DummyStep):
    steps = [
        DummyStep(step_id="a"),
        DummyStep(step_id="b", depends_on=["a"]),
        DummyStep(step_id="c", depends_on=["b"]),
    ]
    assert [s.id for s in plan_execution(steps)] == ["a", "b", "c"]


def test_toposort_respects_dependencies_declared_later(DummyStep):
    steps = [
        DummyStep(step_id="report", depends_on=["transform"]),
        DummyStep(step_id="transform", depends_on=["load"]),
        DummyStep(step_id="load"),
    ]
    assert [s.id for s in plan_execution(steps)] == ["load", "transform", "report"]


def test_ties_follow_declaration_order(DummyStep):
    steps = [
        DummyStep(step_id="z"),
        DummyStep(step_id="m"),
        DummyStep(step_id="a", depends_on=["z"]),
    ]
    assert [s.id for s in plan_execution(steps)] == ["z", "m", "a"]
