from __future__ import annotations

from estimate_rollup.core.model import EstimatePlan
from estimate_rollup.core.render.gantt_chart import render_gantt
from estimate_rollup.core.render.markdown_table import render_category, render_summary


def render_report(plan: EstimatePlan, labels: dict[str, str], *, include_gantt: bool = True) -> str:
    """Render the full markdown report: summary, one table per category, gantt chart."""
    parts = [render_summary(plan, labels)]
    parts.extend(render_category(c, labels) for c in plan.estimates)
    if include_gantt:
        parts.append(render_gantt(plan.estimates, labels))
    return "\n\n".join(parts) + "\n"
