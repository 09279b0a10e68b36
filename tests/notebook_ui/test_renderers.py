# tests/notebook_ui/test_renderers.py

import copy

from tabular_pipeline.core.engine.engine import Engine
from tabular_pipeline.notebook_ui.renderers import (
    render_dataset,
    render_payload,
    render_records_html,
    render_run,
    render_summary,
)
from tabular_pipeline.steps.audit.describe import describe


def test_render_summary_table(people):
    result = render_summary(describe(people))

    assert "<table>" in result.html
    assert "4 rows x 5 columns" in result.html
    assert "<th>mean</th>" in result.html
    assert result.text.splitlines()[0] == "4 rows x 5 columns"
    assert "age" in result.text


def test_render_dataset_shows_missing_and_truncates(people):
    result = render_dataset(people, max_rows=2)

    assert "(showing first 2)" in result.text
    assert "<td>—</td>" in result.html
    assert "caio" not in result.text
    assert "2020-01-05" in result.text


def test_render_records_html_union_of_keys():
    html = render_records_html([{"a": 1}, {"b": 2.5}], title="rows")

    assert "<h4>rows</h4>" in html
    assert "<th>a</th><th>b</th>" in html
    assert "<td>—</td>" in html


def test_render_records_html_empty():
    assert "(empty)" in render_records_html([])


def test_render_run_lists_step_status(DummyStep, dummy_ctx):
    result = Engine(steps=[DummyStep(step_id="a")], ctx=dummy_ctx).run()

    out = render_run(result)

    assert "success" in out.text
    assert "<td>a</td>" in out.html


def test_render_payload_fallback_unknown_payload_to_text():
    result = render_payload(object())
    assert result.text
    assert result.html is None


def test_purity_renderer_does_not_mutate_input_dict():
    payload = {"a": {"nested": 1}, "b": [1, 2, 3]}
    before = copy.deepcopy(payload)
    _ = render_payload(payload)
    assert payload == before


def test_purity_renderer_does_not_mutate_input_list():
    payload = [{"a": 1}, {"a": 2}]
    before = copy.deepcopy(payload)
    _ = render_payload(payload)
    assert payload == before
