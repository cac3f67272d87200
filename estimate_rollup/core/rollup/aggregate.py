from __future__ import annotations

import math
from typing import Sequence

from estimate_rollup.core.errors import AggregationDegenerateError
from estimate_rollup.core.model import EffortEstimate, Number


def aggregate(children: Sequence[EffortEstimate]) -> EffortEstimate:
    """Reduce already rolled-up children into a parent's estimate.

    - lower/higher: sums, accumulated in child order
    - complexity/confidence: mean over len(children), rounded half-up

    The same reduction is used at every level (major task, category, plan).
    An empty sequence has no mean and raises AggregationDegenerateError.
    """

    if not children:
        raise AggregationDegenerateError(
            code="E_AGGREGATION_DEGENERATE",
            message="cannot average complexity/confidence over zero children",
        )

    count = len(children)
    lower: Number = 0
    higher: Number = 0
    complexity_total: Number = 0
    confidence_total: Number = 0
    for child in children:
        lower += child.lower_estimate
        higher += child.higher_estimate
        complexity_total += child.complexity
        confidence_total += child.confidence

    return EffortEstimate(
        lower_estimate=lower,
        higher_estimate=higher,
        complexity=round_half_up(_mean(complexity_total, [c.complexity for c in children])),
        confidence=round_half_up(_mean(confidence_total, [c.confidence for c in children])),
    )


def _mean(total: Number, values: Sequence[Number]) -> float:
    # Large floats can overflow the sum to inf; divide each value first then.
    if math.isfinite(total):
        return total / len(values)
    return sum(v / len(values) for v in values)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity (1.5 -> 2, 2.5 -> 3, -2.5 -> -2).

    Not round(): that one rounds ties to even.
    """
    return int(math.floor(value + 0.5))
