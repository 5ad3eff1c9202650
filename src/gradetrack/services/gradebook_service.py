from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from gradetrack.config.settings import settings
from gradetrack.core.annual import AnnualSummary, annual_summary
from gradetrack.core.averages import (
    calculated_period_goal,
    effective_period_goal,
    evaluations_for_period,
    period_average,
)
from gradetrack.core.chart import ChartData, build_chart
from gradetrack.core.projection import Requirement, RoadmapEntry, required_grade, roadmap
from gradetrack.core.statistics import (
    GradeStatistics,
    SubjectAverage,
    evaluation_band,
    grade_statistics,
    performance_by_subject,
    recent_evaluations,
)
from gradetrack.domain.models import Evaluation, GradebookSnapshot, Period
from gradetrack.domain.validation import (
    ValidationError,
    validate_evaluation,
    validate_period,
    validate_subject,
)
from gradetrack.state.gradebook_state import GradebookState


logger = logging.getLogger(__name__)


class GradebookServiceError(Exception):
    pass


@dataclass(frozen=True)
class Dashboard:
    active_period: Optional[Period]
    overall_average: float
    period_goal: float
    calculated_period_goal: float
    annual: AnnualSummary
    roadmap: Tuple[RoadmapEntry, ...]
    chart: ChartData
    statistics: Optional[GradeStatistics]
    performance: Tuple[SubjectAverage, ...]
    recent: Tuple[Evaluation, ...]
    recent_bands: Tuple[Optional[str], ...]


class GradebookService:
    def __init__(self, default_scale: str = "20", recent_limit: int = 5) -> None:
        self.default_scale = default_scale
        self.recent_limit = recent_limit

    @classmethod
    def from_settings(cls) -> "GradebookService":
        return cls(settings.default_scale, settings.recent_limit)

    def validate_snapshot(self, snapshot: GradebookSnapshot) -> GradebookSnapshot:
        try:
            for s in snapshot.subjects:
                validate_subject(s)
            for p in snapshot.periods:
                validate_period(p)
            for e in snapshot.evaluations:
                validate_evaluation(e)
        except ValidationError as exc:
            logger.warning("Rejected gradebook snapshot: %s", exc)
            raise GradebookServiceError(str(exc)) from exc

        subject_ids = {s.id for s in snapshot.subjects}
        period_ids = {p.id for p in snapshot.periods}
        for e in snapshot.evaluations:
            if e.subject_id not in subject_ids:
                raise GradebookServiceError(f"Evaluation {e.id} references unknown subject {e.subject_id}")
            if e.period_id not in period_ids:
                raise GradebookServiceError(f"Evaluation {e.id} references unknown period {e.period_id}")

        return snapshot

    def resolve_active_period(self, snapshot: GradebookSnapshot, now: Optional[datetime] = None) -> GradebookSnapshot:
        """Missing or stale active period falls back to the one containing now, else the first."""
        resolved = GradebookState.from_snapshot(snapshot, now).snapshot()
        if resolved.active_period_id != snapshot.active_period_id:
            logger.info(
                "Active period %s resolved to %s", snapshot.active_period_id, resolved.active_period_id
            )
        return resolved

    def dashboard(
        self,
        snapshot: GradebookSnapshot,
        scale: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dashboard:
        snapshot = self.resolve_active_period(self.validate_snapshot(snapshot), now)
        scale = scale or self.default_scale

        period = snapshot.active_period
        subjects = snapshot.subjects
        grades = evaluations_for_period(snapshot.active_period_id, snapshot.evaluations)

        recent = tuple(recent_evaluations(grades, self.recent_limit))

        try:
            chart = build_chart(subjects, grades, period, scale)
        except ValueError as exc:
            raise GradebookServiceError(str(exc)) from exc

        dashboard = Dashboard(
            active_period=period,
            overall_average=period_average(subjects, grades),
            period_goal=effective_period_goal(period, subjects),
            calculated_period_goal=calculated_period_goal(subjects),
            annual=annual_summary(period, snapshot.periods, subjects, snapshot.evaluations),
            roadmap=tuple(roadmap(subjects, grades, period, now)),
            chart=chart,
            statistics=grade_statistics(subjects, grades),
            performance=tuple(performance_by_subject(subjects, grades)),
            recent=recent,
            recent_bands=tuple(evaluation_band(e, snapshot.subject(e.subject_id)) for e in recent),
        )
        logger.debug(
            "Dashboard for period %s: average %.2f over %d evaluation(s)",
            snapshot.active_period_id,
            dashboard.overall_average,
            len(grades),
        )
        return dashboard

    def required_grade(
        self,
        snapshot: GradebookSnapshot,
        subject_id: str,
        max_grade: float,
        now: Optional[datetime] = None,
    ) -> Requirement:
        snapshot = self.resolve_active_period(self.validate_snapshot(snapshot), now)
        if max_grade <= 0:
            raise GradebookServiceError("max_grade must be greater than 0")
        grades = evaluations_for_period(snapshot.active_period_id, snapshot.evaluations)
        return required_grade(snapshot.subject(subject_id), grades, max_grade)
