from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


Number = Union[int, float]


@dataclass(frozen=True)
class EffortEstimate:
    lower_estimate: Number
    higher_estimate: Number
    complexity: Number
    confidence: Number


@dataclass(frozen=True)
class GanttInfo:
    position: Number
    start: str
    label: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class MinorTask(EffortEstimate):
    name: str
    comment: Optional[str] = None


# Validated input shapes. Non-leaf estimate fields are not read from input;
# they only exist on the rolled-up nodes below.


@dataclass(frozen=True)
class MajorTaskInput:
    name: str
    tasks: tuple[MinorTask, ...]
    gantt: GanttInfo


@dataclass(frozen=True)
class TaskCategoryInput:
    name: str
    tasks: tuple[MajorTaskInput, ...]


@dataclass(frozen=True)
class EstimateInput:
    estimates: tuple[TaskCategoryInput, ...]


# Rolled-up nodes.


@dataclass(frozen=True)
class MajorTask(EffortEstimate):
    name: str
    tasks: tuple[MinorTask, ...]
    gantt: GanttInfo


@dataclass(frozen=True)
class TaskCategory(EffortEstimate):
    name: str
    tasks: tuple[MajorTask, ...]  # ordered by gantt.position


@dataclass(frozen=True)
class EstimatePlan(EffortEstimate):
    estimates: tuple[TaskCategory, ...]
