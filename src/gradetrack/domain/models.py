from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union


EVALUATION_TYPES: Tuple[str, ...] = (
    "Control",
    "Homework",
    "Quiz",
    "Project",
    "Oral",
    "Presentation",
)


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    coefficient: float
    goal: float
    color: str = ""
    icon: str | None = None


@dataclass(frozen=True)
class Period:
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    goal: float | None = None


@dataclass(frozen=True)
class Actual:
    grade: float


@dataclass(frozen=True)
class Planned:
    label: str


Outcome = Union[Actual, Planned]


@dataclass(frozen=True)
class Evaluation:
    id: str
    subject_id: str
    period_id: str
    type: str
    max_grade: float
    date: datetime
    outcome: Outcome
    comment: str | None = None
    bonus: float = 0.0

    @property
    def is_planned(self) -> bool:
        return isinstance(self.outcome, Planned)

    @property
    def grade(self) -> Optional[float]:
        return self.outcome.grade if isinstance(self.outcome, Actual) else None

    @property
    def label(self) -> Optional[str]:
        return self.outcome.label if isinstance(self.outcome, Planned) else None


def actual_evaluations(evaluations) -> list[Evaluation]:
    return [e for e in evaluations if isinstance(e.outcome, Actual)]


def planned_evaluations(evaluations) -> list[Evaluation]:
    return [e for e in evaluations if isinstance(e.outcome, Planned)]


@dataclass(frozen=True)
class GradebookSnapshot:
    subjects: Tuple[Subject, ...] = ()
    evaluations: Tuple[Evaluation, ...] = ()
    periods: Tuple[Period, ...] = ()
    active_period_id: str | None = None

    @property
    def active_period(self) -> Optional[Period]:
        for p in self.periods:
            if p.id == self.active_period_id:
                return p
        return None

    def subject(self, subject_id: str) -> Optional[Subject]:
        for s in self.subjects:
            if s.id == subject_id:
                return s
        return None
