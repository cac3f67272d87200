from __future__ import annotations

from typing import Any, Optional

from estimate_rollup.core.model import EffortEstimate, EstimatePlan, MajorTask, MinorTask, TaskCategory


def render_summary(plan: EstimatePlan, labels: dict[str, str]) -> str:
    return labels["summary"].format(
        lower=format_number(plan.lower_estimate),
        higher=format_number(plan.higher_estimate),
        complexity=format_number(plan.complexity),
        confidence=format_number(plan.confidence),
    )


def render_category(category: TaskCategory, labels: dict[str, str]) -> str:
    """Render one category as a heading plus a markdown table.

    Major tasks are bold and followed by their minor tasks; a bold total
    row closes the table.
    """
    lines = [f"## {category.name}", _header(labels)]
    for task in category.tasks:
        lines.append(_major_row(task))
        for sub in task.tasks:
            lines.append(_minor_row(sub))
    lines.append(_row(labels["total"], category, bold=True))
    return "\n".join(lines)


def format_number(v: Any) -> str:
    """Format a number for display; integral floats drop the trailing `.0`."""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _header(labels: dict[str, str]) -> str:
    cols = [
        labels["col_name"],
        labels["col_lower"],
        labels["col_higher"],
        labels["col_complexity"],
        labels["col_confidence"],
        labels["col_comment"],
    ]
    return " | ".join(cols) + "\n" + "|".join(["---"] * len(cols))


def _major_row(task: MajorTask) -> str:
    return _row(task.name, task, bold=True)


def _minor_row(task: MinorTask) -> str:
    return _row(task.name, task, comment=task.comment)


def _row(name: str, node: EffortEstimate, *, bold: bool = False, comment: Optional[str] = None) -> str:
    values = [
        _cell(name),
        format_number(node.lower_estimate),
        format_number(node.higher_estimate),
        format_number(node.complexity),
        format_number(node.confidence),
    ]
    values.append(_cell(comment or ""))
    if bold:
        values = [f"<b>{v}</b>" for v in values]
    return " | ".join(values).rstrip()


def _cell(text: str) -> str:
    # A raw pipe would split the cell.
    return text.replace("|", "\\|").replace("\n", " ")
