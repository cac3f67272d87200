from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from estimate_rollup.core.model import EffortEstimate, EstimatePlan, GanttInfo, MajorTask, MinorTask, TaskCategory


def plan_to_dict(plan: EstimatePlan) -> dict[str, Any]:
    """Return the rolled-up plan in the input document's shape.

    Every node carries lowerEstimate/higherEstimate/complexity/confidence,
    so the result can be loaded and rolled up again.
    """
    out: dict[str, Any] = {"estimates": [_category_to_dict(c) for c in plan.estimates]}
    out.update(_estimate_fields(plan))
    return out


def dump_estimates(plan: EstimatePlan, path: str) -> None:
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        f.write(format_estimates(plan, "yaml" if p.suffix.lower() in {".yaml", ".yml"} else "json"))


def format_estimates(plan: EstimatePlan, fmt: str = "json") -> str:
    data = plan_to_dict(plan)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _category_to_dict(category: TaskCategory) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": category.name,
        "tasks": [_major_to_dict(t) for t in category.tasks],
    }
    out.update(_estimate_fields(category))
    return out


def _major_to_dict(task: MajorTask) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": task.name,
        "tasks": [_minor_to_dict(t) for t in task.tasks],
        "gantt": _gantt_to_dict(task.gantt),
    }
    out.update(_estimate_fields(task))
    return out


def _minor_to_dict(task: MinorTask) -> dict[str, Any]:
    out: dict[str, Any] = {"name": task.name}
    out.update(_estimate_fields(task))
    if task.comment is not None:
        out["comment"] = task.comment
    return out


def _gantt_to_dict(gantt: GanttInfo) -> dict[str, Any]:
    out: dict[str, Any] = {"position": gantt.position, "start": gantt.start}
    if gantt.label is not None:
        out["label"] = gantt.label
    if gantt.color is not None:
        out["color"] = gantt.color
    return out


def _estimate_fields(node: EffortEstimate) -> dict[str, Any]:
    return {
        "lowerEstimate": node.lower_estimate,
        "higherEstimate": node.higher_estimate,
        "complexity": node.complexity,
        "confidence": node.confidence,
    }
