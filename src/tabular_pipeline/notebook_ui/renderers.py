# src/tabular_pipeline/notebook_ui/renderers.py
"""
Notebook UI Adapter (v1)

Objetivo:
- Renderizar Summary, Dataset, resultados de run e payloads genéricos para
  saída legível em notebooks (HTML) e terminais (texto).
- NÃO altera as entradas.
- NÃO executa Steps nem acessa o Engine.

Summary, Dataset e RunResult são tratados por duck typing (`to_dict`,
`names`, `rows`, `steps`); apenas o sentinela MISSING é importado do core.

Saídas:
- HTML (string) quando aplicável
- texto sempre preenchido (tabela alinhada ou JSON pretty)
"""

from __future__ import annotations

import copy
import html
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence

from tabular_pipeline.core.dataset.missing import is_missing

MISSING_TEXT = "—"


@dataclass(frozen=True)
class RenderResult:
    """Resultado de renderização (apenas apresentação)."""
    html: Optional[str]
    text: str


def _escape(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def _cell(value: Any) -> str:
    if value is None or is_missing(value):
        return MISSING_TEXT
    if isinstance(value, float):
        return f"{value:.6g}"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _as_pretty_json(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
    except TypeError:
        return repr(payload)


def _text_table(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(c) for c in columns]
    for row in rows:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(v))
    lines = [
        "  ".join(c.ljust(widths[i]) for i, c in enumerate(columns)),
        "  ".join("-" * w for w in widths),
    ]
    lines += ["  ".join(v.ljust(widths[i]) for i, v in enumerate(row)) for row in rows]
    return "\n".join(lines)


def _html_table(columns: Sequence[str], rows: Sequence[Sequence[str]], title: Optional[str] = None) -> str:
    heading = f"<h4>{_escape(title)}</h4>" if title else ""
    th = "".join(f"<th>{_escape(c)}</th>" for c in columns)
    trs = "".join(
        "<tr>" + "".join(f"<td>{_escape(v)}</td>" for v in row) + "</tr>"
        for row in rows
    )
    return f"{heading}<table><thead><tr>{th}</tr></thead><tbody>{trs}</tbody></table>"


def render_payload(payload: Any) -> RenderResult:
    """
    Renderizador genérico:
    - dict → tabela key/value
    - list[dict] → tabela com a união das chaves (ordem estável)
    - demais → apenas JSON pretty
    """
    before = copy.deepcopy(payload) if isinstance(payload, (dict, list)) else None

    html_out: Optional[str] = None
    if isinstance(payload, Mapping):
        rows = [[str(k), _cell(v)] for k, v in payload.items()]
        html_out = _html_table(["key", "value"], rows)
    elif isinstance(payload, Sequence) and not isinstance(payload, (str, bytes, bytearray)):
        html_out = render_records_html(payload)
    text_out = _as_pretty_json(payload)

    if before is not None and before != payload:
        raise AssertionError("Notebook UI renderer mutated the input payload")

    return RenderResult(html=html_out, text=text_out)


def render_records_html(records: Sequence[Any], title: Optional[str] = None, max_rows: int = 50) -> str:
    items = list(records)[:max_rows]
    if not items:
        heading = f"<h4>{_escape(title)}</h4>" if title else ""
        return f"{heading}<div><em>(empty)</em></div>"

    if all(isinstance(x, Mapping) for x in items):
        columns: List[str] = []
        for row in items:
            for k in row:
                if k not in columns:
                    columns.append(k)
        rows = [[_cell(row.get(c)) for c in columns] for row in items]
        return _html_table(columns, rows, title)

    return _html_table(["value"], [[_cell(x)] for x in items], title)


def render_summary(summary: Any) -> RenderResult:
    """Tabela por coluna: tipo, ausentes e (numéricas) min/max/mean."""
    data = summary.to_dict()
    columns = ["column", "type", "missing", "min", "max", "mean"]
    rows = [
        [
            c["name"],
            c["type"],
            str(c["missing"]),
            _cell(c.get("min")) if "min" in c else "",
            _cell(c.get("max")) if "max" in c else "",
            _cell(c.get("mean")) if "mean" in c else "",
        ]
        for c in data["columns"]
    ]
    title = f"{data['rows']} rows x {len(rows)} columns"
    return RenderResult(
        html=_html_table(columns, rows, title),
        text=title + "\n" + _text_table(columns, rows),
    )


def render_dataset(dataset: Any, max_rows: int = 20) -> RenderResult:
    """Primeiras `max_rows` linhas; ausentes aparecem como `—`."""
    names = list(dataset.names)
    rows = []
    for i, row in enumerate(dataset.rows()):
        if i >= max_rows:
            break
        rows.append([_cell(row[n]) for n in names])

    total = dataset.n_rows
    title = f"{total} rows x {len(names)} columns"
    if total > max_rows:
        title += f" (showing first {max_rows})"
    return RenderResult(
        html=_html_table(names, rows, title),
        text=title + "\n" + _text_table(names, rows),
    )


def render_run(result: Any) -> RenderResult:
    """Status por Step de um RunResult, com linhas/colunas/ausentes quando houver."""
    columns = ["step", "status", "rows", "columns", "missing", "summary"]
    rows = []
    for sid, r in result.steps.items():
        m = r.metrics or {}
        rows.append(
            [
                sid,
                r.status.value,
                _cell(m.get("rows", "")),
                _cell(m.get("columns", "")),
                _cell(m.get("missing_total", "")),
                r.summary,
            ]
        )
    return RenderResult(html=_html_table(columns, rows), text=_text_table(columns, rows))
