from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional

from gradetrack.config.settings import settings
from gradetrack.domain.models import (
    Actual,
    Evaluation,
    GradebookSnapshot,
    Period,
    Planned,
    Subject,
)
from gradetrack.domain.validation import validate_evaluation, validate_period, validate_subject


logger = logging.getLogger(__name__)


class GradebookStateError(Exception):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


def default_period_id(periods: List[Period], now: Optional[datetime] = None) -> Optional[str]:
    """Id of the period whose range contains now, else the first period."""
    if not periods:
        return None
    moment = (now or datetime.now(timezone.utc)).timestamp()
    for p in periods:
        if p.start_date.timestamp() <= moment <= p.end_date.timestamp():
            return p.id
    return periods[0].id


@dataclass
class GradebookState:
    """Mutable record collections owned by the application; the core only sees snapshots."""

    subjects: List[Subject] = field(default_factory=list)
    periods: List[Period] = field(default_factory=list)
    evaluations: List[Evaluation] = field(default_factory=list)
    active_period_id: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: GradebookSnapshot, now: Optional[datetime] = None) -> "GradebookState":
        state = cls(
            subjects=list(snapshot.subjects),
            periods=list(snapshot.periods),
            evaluations=list(snapshot.evaluations),
            active_period_id=snapshot.active_period_id,
        )
        state._ensure_active_period(now)
        return state

    def snapshot(self) -> GradebookSnapshot:
        return GradebookSnapshot(
            subjects=tuple(self.subjects),
            evaluations=tuple(self.evaluations),
            periods=tuple(self.periods),
            active_period_id=self.active_period_id,
        )

    @property
    def active_period(self) -> Optional[Period]:
        return self.snapshot().active_period

    # Subjects

    def add_subject(
        self,
        name: str,
        coefficient: float,
        goal: float,
        color: str = "",
        icon: Optional[str] = None,
    ) -> Subject:
        subject = validate_subject(
            Subject(id=_new_id(), name=name, coefficient=coefficient, goal=goal, color=color, icon=icon)
        )
        self.subjects.append(subject)
        logger.debug("Added subject %s (%s)", subject.id, subject.name)
        return subject

    def update_subject(self, subject: Subject) -> Subject:
        validate_subject(subject)
        self.subjects[self._subject_index(subject.id)] = subject
        return subject

    def delete_subject(self, subject_id: str) -> None:
        self.subjects.pop(self._subject_index(subject_id))
        before = len(self.evaluations)
        self.evaluations = [e for e in self.evaluations if e.subject_id != subject_id]
        logger.info(
            "Deleted subject %s and %d evaluation(s)", subject_id, before - len(self.evaluations)
        )

    # Periods

    def add_period(
        self,
        name: str,
        start_date: datetime,
        end_date: datetime,
        goal: Optional[float] = None,
    ) -> Period:
        period = validate_period(
            Period(id=_new_id(), name=name, start_date=start_date, end_date=end_date, goal=goal)
        )
        self.periods.append(period)
        if not self.active_period_id:
            self.set_active_period(period.id)
        return period

    def update_period(self, period: Period) -> Period:
        validate_period(period)
        self.periods[self._period_index(period.id)] = period
        return period

    def delete_period(self, period_id: str) -> None:
        self.periods.pop(self._period_index(period_id))
        before = len(self.evaluations)
        self.evaluations = [e for e in self.evaluations if e.period_id != period_id]
        logger.info(
            "Deleted period %s and %d evaluation(s)", period_id, before - len(self.evaluations)
        )
        if self.active_period_id == period_id:
            self.active_period_id = self.periods[0].id if self.periods else None
            if self.active_period_id:
                logger.info("Active period is now %s", self.active_period_id)

    def set_active_period(self, period_id: str) -> None:
        self._period_index(period_id)
        self.active_period_id = period_id
        logger.info("Active period is now %s", period_id)

    def _ensure_active_period(self, now: Optional[datetime] = None) -> None:
        if self.active_period_id and any(p.id == self.active_period_id for p in self.periods):
            return
        self.active_period_id = default_period_id(self.periods, now)
        if self.active_period_id:
            logger.info("Active period is now %s", self.active_period_id)

    # Evaluations

    def add_evaluation(
        self,
        subject_id: str,
        type: str,
        max_grade: float,
        grade: Optional[float] = None,
        label: Optional[str] = None,
        comment: Optional[str] = None,
        bonus: float = 0.0,
        now: Optional[datetime] = None,
    ) -> Evaluation:
        if not self.active_period_id:
            raise GradebookStateError("No active period. Create a period first.")
        self._subject_index(subject_id)

        if grade is not None:
            outcome = Actual(grade)
        else:
            outcome = Planned(label or self._next_planned_label(subject_id))

        evaluation = validate_evaluation(
            Evaluation(
                id=_new_id(),
                subject_id=subject_id,
                period_id=self.active_period_id,
                type=type,
                max_grade=max_grade,
                date=now or datetime.now(timezone.utc),
                outcome=outcome,
                comment=comment,
                bonus=bonus,
            )
        )
        self.evaluations.append(evaluation)
        logger.debug("Added %s evaluation %s", "planned" if evaluation.is_planned else "actual", evaluation.id)
        return evaluation

    def update_evaluation(self, evaluation: Evaluation) -> Evaluation:
        index = self._evaluation_index(evaluation.id)
        validate_evaluation(evaluation)
        self.evaluations[index] = evaluation
        return evaluation

    def record_grade(self, evaluation_id: str, grade: float) -> Evaluation:
        """Give a planned (or actual) evaluation a score, keeping its other fields."""
        current = self.evaluations[self._evaluation_index(evaluation_id)]
        return self.update_evaluation(replace(current, outcome=Actual(grade)))

    def delete_evaluation(self, evaluation_id: str) -> None:
        self.evaluations.pop(self._evaluation_index(evaluation_id))

    def _next_planned_label(self, subject_id: str) -> str:
        existing = sum(
            1
            for e in self.evaluations
            if e.period_id == self.active_period_id and e.subject_id == subject_id and e.is_planned
        )
        return f"{settings.planned_label} #{existing + 1}"

    def _subject_index(self, subject_id: str) -> int:
        for index, s in enumerate(self.subjects):
            if s.id == subject_id:
                return index
        raise GradebookStateError(f"Unknown subject: {subject_id}")

    def _period_index(self, period_id: str) -> int:
        for index, p in enumerate(self.periods):
            if p.id == period_id:
                return index
        raise GradebookStateError(f"Unknown period: {period_id}")

    def _evaluation_index(self, evaluation_id: str) -> int:
        for index, e in enumerate(self.evaluations):
            if e.id == evaluation_id:
                return index
        raise GradebookStateError(f"Unknown evaluation: {evaluation_id}")
