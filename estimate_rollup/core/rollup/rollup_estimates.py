from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from estimate_rollup.core.errors import EstimateError
from estimate_rollup.core.model import (
    EstimateInput,
    EstimatePlan,
    MajorTask,
    MajorTaskInput,
    TaskCategory,
    TaskCategoryInput,
)
from estimate_rollup.core.rollup.aggregate import aggregate
from estimate_rollup.core.validate.validate_estimates import validate_estimates

logger = logging.getLogger(__name__)


def rollup_estimates(doc: Any) -> tuple[Optional[EstimatePlan], list[EstimateError]]:
    """Validate a raw estimates document and roll it up.

    Returns (plan, errors). Plan is None when errors exist; there is no
    partial result.
    """

    validated, errors = validate_estimates(doc)
    if errors or validated is None:
        return None, list(errors)
    return rollup_plan(validated), []


def build_plan(doc: Any) -> EstimatePlan:
    """Like rollup_estimates, but raises the first ShapeError instead."""
    plan, errors = rollup_estimates(doc)
    if errors:
        raise errors[0]
    assert plan is not None
    return plan


def rollup_major_task(task: MajorTaskInput) -> MajorTask:
    totals = aggregate(task.tasks)
    return MajorTask(
        name=task.name,
        tasks=task.tasks,
        gantt=task.gantt,
        lower_estimate=totals.lower_estimate,
        higher_estimate=totals.higher_estimate,
        complexity=totals.complexity,
        confidence=totals.confidence,
    )


def rollup_category(category: TaskCategoryInput) -> TaskCategory:
    tasks = [rollup_major_task(t) for t in category.tasks]
    totals = aggregate(tasks)
    logger.debug(
        "rolled up category %r: %s-%sh over %d major tasks",
        category.name,
        totals.lower_estimate,
        totals.higher_estimate,
        len(tasks),
    )
    return TaskCategory(
        name=category.name,
        tasks=order_by_position(tasks),
        lower_estimate=totals.lower_estimate,
        higher_estimate=totals.higher_estimate,
        complexity=totals.complexity,
        confidence=totals.confidence,
    )


def rollup_plan(doc: EstimateInput) -> EstimatePlan:
    categories = [rollup_category(c) for c in doc.estimates]
    totals = aggregate(categories)
    logger.debug(
        "rolled up plan: %s-%sh, complexity=%s, confidence=%s",
        totals.lower_estimate,
        totals.higher_estimate,
        totals.complexity,
        totals.confidence,
    )
    return EstimatePlan(
        estimates=tuple(categories),
        lower_estimate=totals.lower_estimate,
        higher_estimate=totals.higher_estimate,
        complexity=totals.complexity,
        confidence=totals.confidence,
    )


def order_by_position(tasks: Iterable[MajorTask]) -> tuple[MajorTask, ...]:
    """Order major tasks by gantt.position; equal positions keep input order."""
    return tuple(sorted(tasks, key=lambda t: t.gantt.position))
