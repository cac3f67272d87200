from __future__ import annotations

import math
from collections import Counter
from datetime import date
from typing import Any, Optional

from estimate_rollup.core.errors import ShapeError, error_sort_key


# Estimate lint rules. These sit on top of shape validation and flag values
# that are well-typed but implausible:
# - L_NEGATIVE_ESTIMATE: minor task lowerEstimate below zero
# - L_INVERTED_RANGE: minor task higherEstimate below lowerEstimate
# - L_SCORE_OUT_OF_RANGE: complexity/confidence not an integer in 1..5
# - L_DUPLICATE_POSITION: two major tasks in one category share gantt.position
# - L_DUPLICATE_NAME: two major tasks in one category share a name
# - L_INVALID_START_DATE: gantt.start is not an ISO YYYY-MM-DD date

SCORE_MIN = 1
SCORE_MAX = 5


def lint_estimates(doc: Any) -> list[ShapeError]:
    """Lint an estimates document.

    Lint runs *in addition to* shape validation. It is allowed to operate on
    partially-invalid inputs (best effort): anything with the wrong shape is
    skipped and left to the validator.
    """

    if not isinstance(doc, dict):
        return []

    file = _cast_optional_str(doc.get("__file__"))

    categories = doc.get("estimates")
    if not isinstance(categories, list):
        # Let validator handle shape.
        return []

    errors: list[ShapeError] = []

    for i, category in enumerate(categories):
        if not isinstance(category, dict):
            continue
        majors = category.get("tasks")
        if not isinstance(majors, list):
            continue
        cat_path = f"estimates[{i}]"

        errors.extend(_lint_duplicates(majors, cat_path, file))

        for j, major in enumerate(majors):
            if not isinstance(major, dict):
                continue
            major_path = f"{cat_path}.tasks[{j}]"

            gantt = major.get("gantt")
            if isinstance(gantt, dict):
                start = gantt.get("start")
                if isinstance(start, str) and not _is_iso_date(start):
                    errors.append(
                        ShapeError(
                            code="L_INVALID_START_DATE",
                            message=f"gantt.start must be a YYYY-MM-DD date, got {start!r}",
                            file=file,
                            path=f"{major_path}.gantt.start",
                        )
                    )

            minors = major.get("tasks")
            if not isinstance(minors, list):
                continue
            for k, minor in enumerate(minors):
                if isinstance(minor, dict):
                    errors.extend(_lint_minor_task(minor, f"{major_path}.tasks[{k}]", file))

    return _sorted(errors)


def _lint_minor_task(raw: dict[str, Any], path: str, file: Optional[str]) -> list[ShapeError]:
    errors: list[ShapeError] = []

    lower = raw.get("lowerEstimate")
    higher = raw.get("higherEstimate")
    if _is_number(lower) and lower < 0:
        errors.append(
            ShapeError(
                code="L_NEGATIVE_ESTIMATE",
                message=f"lowerEstimate must not be negative, got {lower}",
                file=file,
                path=f"{path}.lowerEstimate",
            )
        )
    if _is_number(lower) and _is_number(higher) and higher < lower:
        errors.append(
            ShapeError(
                code="L_INVERTED_RANGE",
                message=f"higherEstimate ({higher}) is below lowerEstimate ({lower})",
                file=file,
                path=f"{path}.higherEstimate",
            )
        )

    for key in ("complexity", "confidence"):
        score = raw.get(key)
        if not _is_number(score):
            continue
        if score != int(score) or not SCORE_MIN <= score <= SCORE_MAX:
            errors.append(
                ShapeError(
                    code="L_SCORE_OUT_OF_RANGE",
                    message=f"{key} must be an integer from {SCORE_MIN} to {SCORE_MAX}, got {score}",
                    file=file,
                    path=f"{path}.{key}",
                )
            )

    return errors


def _lint_duplicates(majors: list[Any], cat_path: str, file: Optional[str]) -> list[ShapeError]:
    positions: list[Any] = []
    names: list[Any] = []
    for major in majors:
        if not isinstance(major, dict):
            positions.append(None)
            names.append(None)
            continue
        gantt = major.get("gantt")
        position = gantt.get("position") if isinstance(gantt, dict) else None
        positions.append(position if _is_number(position) else None)
        name = major.get("name")
        names.append(name if isinstance(name, str) else None)

    errors: list[ShapeError] = []

    position_counts = Counter(p for p in positions if p is not None)
    seen_positions: set[Any] = set()
    for j, position in enumerate(positions):
        if position is None or position_counts[position] < 2:
            continue
        if position not in seen_positions:
            seen_positions.add(position)
            continue
        errors.append(
            ShapeError(
                code="L_DUPLICATE_POSITION",
                message=f"duplicate gantt.position: {position} (count={position_counts[position]})",
                file=file,
                path=f"{cat_path}.tasks[{j}].gantt.position",
            )
        )

    name_counts = Counter(n for n in names if n is not None)
    seen_names: set[str] = set()
    for j, name in enumerate(names):
        if name is None or name_counts[name] < 2:
            continue
        if name not in seen_names:
            seen_names.add(name)
            continue
        errors.append(
            ShapeError(
                code="L_DUPLICATE_NAME",
                message=f"duplicate major task name: {name} (count={name_counts[name]})",
                file=file,
                path=f"{cat_path}.tasks[{j}].name",
            )
        )

    return errors


def _is_iso_date(v: str) -> bool:
    if len(v) != 10:
        return False
    try:
        date.fromisoformat(v)
    except ValueError:
        return False
    return True


def _is_number(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def _sorted(errors: list[ShapeError]) -> list[ShapeError]:
    return sorted(errors, key=error_sort_key)


def _cast_optional_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None
