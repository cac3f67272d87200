import pytest

from estimate_rollup.core.errors import ShapeError
from estimate_rollup.core.io.dump_estimates import plan_to_dict
from estimate_rollup.core.io.load_estimates import load_estimates
from estimate_rollup.core.model import GanttInfo, MajorTaskInput, MinorTask, TaskCategoryInput
from estimate_rollup.core.rollup.rollup_estimates import (
    build_plan,
    rollup_category,
    rollup_estimates,
    rollup_major_task,
)


def _minor(name, lower=1, higher=2, complexity=3, confidence=3):
    return MinorTask(
        name=name,
        lower_estimate=lower,
        higher_estimate=higher,
        complexity=complexity,
        confidence=confidence,
    )


def _major(name, position, tasks):
    return MajorTaskInput(
        name=name,
        tasks=tuple(tasks),
        gantt=GanttInfo(position=position, start="2024-01-01"),
    )


def test_end_to_end_single_child_propagation():
    plan = build_plan(load_estimates("examples/single-major.yaml"))
    category = plan.estimates[0]
    major = category.tasks[0]

    for node in (major, category, plan):
        assert (node.lower_estimate, node.higher_estimate) == (3, 6)
        assert (node.complexity, node.confidence) == (4, 3)


def test_rollup_full_document():
    plan, errors = rollup_estimates(load_estimates("examples/estimates.json"))
    assert errors == []
    assert plan is not None

    frontend, backend = plan.estimates
    design, layout = frontend.tasks
    assert design.name == "Design system"
    assert (design.lower_estimate, design.higher_estimate, design.complexity, design.confidence) == (15, 30, 3, 3)
    assert (layout.lower_estimate, layout.higher_estimate, layout.complexity, layout.confidence) == (6, 11, 2, 5)

    assert (frontend.lower_estimate, frontend.higher_estimate) == (21, 41)
    assert (frontend.complexity, frontend.confidence) == (3, 4)
    assert (backend.lower_estimate, backend.higher_estimate, backend.complexity, backend.confidence) == (24, 40, 4, 3)

    assert (plan.lower_estimate, plan.higher_estimate) == (45, 81)
    assert (plan.complexity, plan.confidence) == (4, 4)


def test_minor_tasks_keep_input_order():
    major = rollup_major_task(_major("m", 1, [_minor("b"), _minor("a"), _minor("c")]))
    assert [t.name for t in major.tasks] == ["b", "a", "c"]


def test_category_orders_major_tasks_by_position():
    category = rollup_category(
        TaskCategoryInput(
            name="cat",
            tasks=(
                _major("three", 3, [_minor("x")]),
                _major("one", 1, [_minor("y")]),
                _major("two", 2, [_minor("z")]),
            ),
        )
    )
    assert [t.gantt.position for t in category.tasks] == [1, 2, 3]
    assert [t.name for t in category.tasks] == ["one", "two", "three"]


def test_category_order_is_stable_for_equal_positions():
    category = rollup_category(
        TaskCategoryInput(
            name="cat",
            tasks=(
                _major("late", 2, [_minor("x")]),
                _major("first-tie", 1, [_minor("y")]),
                _major("second-tie", 1, [_minor("z")]),
            ),
        )
    )
    assert [t.name for t in category.tasks] == ["first-tie", "second-tie", "late"]


def test_ordering_does_not_change_totals():
    tasks = [
        _major("a", 2, [_minor("x", 1, 2, 1, 2)]),
        _major("b", 1, [_minor("y", 3, 5, 2, 5)]),
    ]
    forward = rollup_category(TaskCategoryInput(name="cat", tasks=tuple(tasks)))
    backward = rollup_category(TaskCategoryInput(name="cat", tasks=tuple(reversed(tasks))))
    assert forward == backward


def test_rollup_is_idempotent_on_its_own_output():
    first = build_plan(load_estimates("examples/estimates.json"))
    again = build_plan(plan_to_dict(first))
    assert again == first


def test_derived_input_values_are_ignored():
    doc = load_estimates("examples/single-major.yaml")
    doc["estimates"][0]["lowerEstimate"] = 1000
    doc["estimates"][0]["tasks"][0]["complexity"] = 1
    plan = build_plan(doc)
    assert plan.estimates[0].lower_estimate == 3
    assert plan.estimates[0].tasks[0].complexity == 4


def test_invalid_input_yields_no_partial_result():
    plan, errors = rollup_estimates(load_estimates("examples/invalid-missing-name.json"))
    assert plan is None
    assert [e.path for e in errors] == ["estimates[0].tasks[0].tasks[1].name"]


def test_build_plan_raises_shape_error():
    with pytest.raises(ShapeError) as excinfo:
        build_plan(load_estimates("examples/invalid-missing-name.json"))
    assert excinfo.value.path == "estimates[0].tasks[0].tasks[1].name"
    assert "E_REQUIRED_FIELD" in str(excinfo.value)


def test_rollup_non_object_root_is_a_shape_error():
    plan, errors = rollup_estimates(["not", "a", "dict"])
    assert plan is None
    assert [(e.code, e.path) for e in errors] == [("E_INVALID_TYPE", "<root>")]


def test_build_plan_raises_first_error_in_document_order():
    category = {
        "name": "cat",
        "tasks": [
            {
                "name": "major",
                "gantt": {"position": 1, "start": "2024-01-01"},
                "tasks": [{"name": "t", "lowerEstimate": 1, "higherEstimate": 2, "complexity": 3, "confidence": 3}],
            }
        ],
    }
    doc = {"estimates": [dict(category) for _ in range(11)]}
    doc["estimates"][2] = {"tasks": category["tasks"]}
    doc["estimates"][10] = {"tasks": category["tasks"]}
    with pytest.raises(ShapeError) as excinfo:
        build_plan(doc)
    assert excinfo.value.path == "estimates[2].name"
