from __future__ import annotations

from typing import Sequence

from estimate_rollup.core.model import MajorTask, TaskCategory
from estimate_rollup.core.render.markdown_table import format_number


def render_gantt(categories: Sequence[TaskCategory], labels: dict[str, str]) -> str:
    """Render a mermaid gantt block with one section per category.

    Each major task becomes one bar starting at gantt.start and lasting its
    rolled-up higherEstimate in hours. Categories are expected to be rolled
    up already, so tasks arrive in gantt.position order.
    """
    lines = [
        "```mermaid",
        "gantt",
        f"    dateFormat {labels['date_format']}",
        f"    axisFormat {labels['axis_format']}",
        f"    title {labels['gantt_title']}",
    ]
    for category in categories:
        lines.append("")
        lines.extend(_section(category))
    lines.append("```")
    return "\n".join(lines)


def _section(category: TaskCategory) -> list[str]:
    lines = [f"    section {_text(category.name)}"]
    for task in category.tasks:
        lines.append(f"    {_text(task.name)} : {_bar(task)}")
    return lines


def _bar(task: MajorTask) -> str:
    parts: list[str] = []
    if task.gantt.color:
        parts.append(task.gantt.color)
    if task.gantt.label:
        parts.append(task.gantt.label)
    parts.append(task.gantt.start)
    parts.append(f"{format_number(task.higher_estimate)}h")
    return ", ".join(parts)


def _text(text: str) -> str:
    # mermaid uses ':' to separate a task name from its metadata.
    return text.replace(":", "#colon;").replace("\n", " ")
