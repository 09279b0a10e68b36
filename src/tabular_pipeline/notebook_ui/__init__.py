from .renderers import (
    RenderResult,
    render_dataset,
    render_payload,
    render_records_html,
    render_run,
    render_summary,
)

__all__ = [
    "RenderResult",
    "render_dataset",
    "render_payload",
    "render_records_html",
    "render_run",
    "render_summary",
]
