from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional, cast

from estimate_rollup.core.errors import ShapeError, error_sort_key
from estimate_rollup.core.model import (
    EstimateInput,
    GanttInfo,
    MajorTaskInput,
    MinorTask,
    Number,
    TaskCategoryInput,
)

logger = logging.getLogger(__name__)


def validate_estimates(doc: Any) -> tuple[Optional[EstimateInput], list[ShapeError]]:
    """Validate the shape of an estimates document.

    This is a pure shape check: every level is walked and every mismatch is
    collected, but no totals are computed. Returns (document, errors);
    document is None when errors exist.

    Estimate fields on categories, major tasks and the root are derived
    later and are therefore ignored here, as are any unknown keys.
    """

    if not isinstance(doc, dict):
        return None, [
            ShapeError(
                code="E_INVALID_TYPE",
                message=f"estimates document must be an object, got {_type_name(doc)}",
                path="<root>",
            )
        ]

    file = cast(Optional[str], doc.get("__file__"))
    errors: list[ShapeError] = []

    raw_categories = doc.get("estimates")
    if not _check_collection(raw_categories, "estimates", file, errors):
        return None, _sorted(errors)

    categories: list[TaskCategoryInput] = []
    for i, raw in enumerate(cast(list[Any], raw_categories)):
        category = _validate_category(raw, f"estimates[{i}]", file, errors)
        if category is not None:
            categories.append(category)

    if errors:
        logger.debug("shape validation failed with %d error(s)", len(errors))
        return None, _sorted(errors)

    logger.debug("shape validation passed: %d categories", len(categories))
    return EstimateInput(estimates=tuple(categories)), []


def summarize_estimates(doc: EstimateInput) -> str:
    majors = [m for c in doc.estimates for m in c.tasks]
    minor_count = sum(len(m.tasks) for m in majors)
    return (
        f"OK: {len(doc.estimates)} categories, {len(majors)} major tasks, "
        f"{minor_count} minor tasks"
    )


def _validate_category(
    raw: Any, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[TaskCategoryInput]:
    if not _check_object(raw, "task category", path, file, errors):
        return None

    before = len(errors)
    name = _require_str(raw, "name", path, file, errors)

    tasks: list[MajorTaskInput] = []
    raw_tasks = raw.get("tasks")
    if _check_collection(raw_tasks, f"{path}.tasks", file, errors):
        for j, raw_task in enumerate(raw_tasks):
            task = _validate_major_task(raw_task, f"{path}.tasks[{j}]", file, errors)
            if task is not None:
                tasks.append(task)

    if len(errors) > before:
        return None
    return TaskCategoryInput(name=cast(str, name), tasks=tuple(tasks))


def _validate_major_task(
    raw: Any, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[MajorTaskInput]:
    if not _check_object(raw, "major task", path, file, errors):
        return None

    before = len(errors)
    name = _require_str(raw, "name", path, file, errors)

    tasks: list[MinorTask] = []
    raw_tasks = raw.get("tasks")
    if _check_collection(raw_tasks, f"{path}.tasks", file, errors):
        for k, raw_task in enumerate(raw_tasks):
            task = _validate_minor_task(raw_task, f"{path}.tasks[{k}]", file, errors)
            if task is not None:
                tasks.append(task)

    gantt = _validate_gantt(raw.get("gantt"), f"{path}.gantt", file, errors)

    if len(errors) > before:
        return None
    return MajorTaskInput(name=cast(str, name), tasks=tuple(tasks), gantt=cast(GanttInfo, gantt))


def _validate_minor_task(
    raw: Any, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[MinorTask]:
    if not _check_object(raw, "minor task", path, file, errors):
        return None

    before = len(errors)
    name = _require_str(raw, "name", path, file, errors)
    lower = _require_number(raw, "lowerEstimate", path, file, errors)
    higher = _require_number(raw, "higherEstimate", path, file, errors)
    complexity = _require_number(raw, "complexity", path, file, errors)
    confidence = _require_number(raw, "confidence", path, file, errors)
    comment = _optional_str(raw, "comment", path, file, errors)

    if len(errors) > before:
        return None
    return MinorTask(
        name=cast(str, name),
        lower_estimate=cast(Number, lower),
        higher_estimate=cast(Number, higher),
        complexity=cast(Number, complexity),
        confidence=cast(Number, confidence),
        comment=comment,
    )


def _validate_gantt(
    raw: Any, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[GanttInfo]:
    if raw is None:
        errors.append(
            ShapeError(
                code="E_REQUIRED_FIELD",
                message="gantt is required and must be an object",
                file=file,
                path=path,
            )
        )
        return None
    if not _check_object(raw, "gantt", path, file, errors):
        return None

    before = len(errors)
    position = _require_number(raw, "position", path, file, errors)
    start = _require_str(raw, "start", path, file, errors)
    label = _optional_str(raw, "label", path, file, errors)
    color = _optional_str(raw, "color", path, file, errors)

    if len(errors) > before:
        return None
    return GanttInfo(
        position=cast(Number, position),
        start=cast(str, start),
        label=label,
        color=color,
    )


def _check_object(
    raw: Any, what: str, path: str, file: Optional[str], errors: list[ShapeError]
) -> bool:
    if isinstance(raw, dict):
        return True
    errors.append(
        ShapeError(
            code="E_INVALID_TYPE",
            message=f"{what} must be an object, got {_type_name(raw)}",
            file=file,
            path=path,
        )
    )
    return False


def _check_collection(
    value: Any, path: str, file: Optional[str], errors: list[ShapeError]
) -> bool:
    key = path.rsplit(".", 1)[-1]
    if value is None:
        errors.append(
            ShapeError(
                code="E_REQUIRED_FIELD",
                message=f"{key} is required and must be an array",
                file=file,
                path=path,
            )
        )
        return False
    if not isinstance(value, list):
        errors.append(
            ShapeError(
                code="E_INVALID_TYPE",
                message=f"{key} must be an array, got {_type_name(value)}",
                file=file,
                path=path,
            )
        )
        return False
    if not value:
        # Rolled-up means over zero children are undefined.
        errors.append(
            ShapeError(
                code="E_EMPTY_COLLECTION",
                message=f"{key} must contain at least one item",
                file=file,
                path=path,
            )
        )
        return False
    return True


def _require_str(
    raw: dict[str, Any], key: str, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        errors.append(
            ShapeError(
                code="E_REQUIRED_FIELD",
                message=f"{key} is required and must be a string",
                file=file,
                path=f"{path}.{key}",
            )
        )
        return None
    if not isinstance(value, str):
        errors.append(
            ShapeError(
                code="E_INVALID_TYPE",
                message=f"{key} must be a string, got {_type_name(value)}",
                file=file,
                path=f"{path}.{key}",
            )
        )
        return None
    return value


def _optional_str(
    raw: dict[str, Any], key: str, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        errors.append(
            ShapeError(
                code="E_INVALID_TYPE",
                message=f"{key} must be a string, got {_type_name(value)}",
                file=file,
                path=f"{path}.{key}",
            )
        )
        return None
    return value


def _require_number(
    raw: dict[str, Any], key: str, path: str, file: Optional[str], errors: list[ShapeError]
) -> Optional[Number]:
    value = raw.get(key)
    if value is None:
        errors.append(
            ShapeError(
                code="E_REQUIRED_FIELD",
                message=f"{key} is required and must be a number",
                file=file,
                path=f"{path}.{key}",
            )
        )
        return None
    if not _is_number(value):
        errors.append(
            ShapeError(
                code="E_INVALID_TYPE",
                message=f"{key} must be a finite number, got {_type_name(value)}",
                file=file,
                path=f"{path}.{key}",
            )
        )
        return None
    return cast(Number, value)


def _is_number(v: Any) -> bool:
    # bool is an int subclass; JSON true/false is not a number.
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def _type_name(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "boolean"
    if isinstance(v, (int, float)):
        return "number"
    if isinstance(v, str):
        return "string"
    if isinstance(v, list):
        return "array"
    if isinstance(v, dict):
        return "object"
    return type(v).__name__


def _sorted(errors: Iterable[ShapeError]) -> list[ShapeError]:
    return sorted(list(errors), key=error_sort_key)
