import pytest

from estimate_rollup.core.errors import AggregationDegenerateError
from estimate_rollup.core.model import EffortEstimate, MinorTask
from estimate_rollup.core.rollup.aggregate import aggregate, round_half_up


def _minor(lower, higher, complexity, confidence, name="t"):
    return MinorTask(
        name=name,
        lower_estimate=lower,
        higher_estimate=higher,
        complexity=complexity,
        confidence=confidence,
    )


def test_aggregate_sums_bounds_and_rounds_means():
    totals = aggregate([_minor(2, 4, 3, 4), _minor(1, 2, 5, 2)])
    assert totals == EffortEstimate(lower_estimate=3, higher_estimate=6, complexity=4, confidence=3)


def test_aggregate_exact_mean():
    totals = aggregate([_minor(1, 1, c, 1) for c in (2, 3, 4)])
    assert totals.complexity == 3


def test_aggregate_tie_rounds_up():
    totals = aggregate([_minor(1, 1, 1, 2), _minor(1, 1, 2, 3)])
    assert totals.complexity == 2
    # round() would give 2 here.
    assert totals.confidence == 3


def test_aggregate_keeps_int_sums_int():
    totals = aggregate([_minor(1, 2, 1, 1), _minor(3, 4, 1, 1)])
    assert isinstance(totals.lower_estimate, int)
    assert isinstance(totals.complexity, int)


def test_aggregate_float_bounds():
    totals = aggregate([_minor(0.5, 1.5, 1, 1), _minor(0.25, 0.5, 1, 1)])
    assert totals.lower_estimate == 0.75
    assert totals.higher_estimate == 2.0


def test_aggregate_works_on_any_estimate_level():
    parents = [
        EffortEstimate(lower_estimate=10, higher_estimate=20, complexity=2, confidence=5),
        EffortEstimate(lower_estimate=5, higher_estimate=5, complexity=3, confidence=4),
    ]
    totals = aggregate(parents)
    assert totals == EffortEstimate(lower_estimate=15, higher_estimate=25, complexity=3, confidence=5)


def test_aggregate_empty_is_degenerate():
    with pytest.raises(AggregationDegenerateError) as excinfo:
        aggregate([])
    assert excinfo.value.code == "E_AGGREGATION_DEGENERATE"


@pytest.mark.parametrize(
    "value,expected",
    [(1.5, 2), (2.5, 3), (2.4999, 2), (3.0, 3), (-2.5, -2), (0.5, 1)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_aggregate_mean_of_huge_scores_does_not_overflow():
    totals = aggregate([_minor(1, 1, 1e308, 3), _minor(1, 1, 1e308, 3)])
    assert totals.complexity == int(1e308)
    assert totals.confidence == 3
