import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from gradetrack.config.settings import settings
from gradetrack.core.chart import ChartData
from gradetrack.domain.models import (
    Actual,
    Evaluation,
    GradebookSnapshot,
    Period,
    Planned,
    Subject,
)
from gradetrack.services.gradebook_service import Dashboard, GradebookService, GradebookServiceError


logger = logging.getLogger(__name__)

app = FastAPI(title="GradeTrack API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=settings.cors_allow_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


EvaluationType = Literal["Control", "Homework", "Quiz", "Project", "Oral", "Presentation"]


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SubjectPayload(Payload):
    id: str
    name: str
    coefficient: float = Field(gt=0)
    goal: float = Field(ge=0, le=20)
    color: str = ""
    icon: Optional[str] = None

    def to_domain(self) -> Subject:
        return Subject(**self.model_dump())


class PeriodPayload(Payload):
    id: str
    name: str
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    goal: Optional[float] = Field(default=None, ge=0, le=20)

    def to_domain(self) -> Period:
        return Period(**self.model_dump())


class GradePayload(Payload):
    id: str
    subject_id: str = Field(alias="subjectId")
    period_id: str = Field(alias="periodId")
    type: EvaluationType
    max_grade: float = Field(alias="maxGrade", gt=0)
    date: datetime
    grade: Optional[float] = None
    name: Optional[str] = None
    comment: Optional[str] = None
    bonus: Optional[float] = Field(default=None, ge=0)

    def to_domain(self) -> Evaluation:
        outcome = Actual(self.grade) if self.grade is not None else Planned(self.name or settings.planned_label)
        return Evaluation(
            id=self.id,
            subject_id=self.subject_id,
            period_id=self.period_id,
            type=self.type,
            max_grade=self.max_grade,
            date=self.date,
            outcome=outcome,
            comment=self.comment,
            bonus=self.bonus or 0.0,
        )


class SnapshotPayload(Payload):
    subjects: List[SubjectPayload] = Field(default_factory=list)
    grades: List[GradePayload] = Field(default_factory=list)
    periods: List[PeriodPayload] = Field(default_factory=list)
    active_period_id: Optional[str] = Field(default=None, alias="activePeriodId")

    def to_snapshot(self) -> GradebookSnapshot:
        return GradebookSnapshot(
            subjects=tuple(s.to_domain() for s in self.subjects),
            evaluations=tuple(g.to_domain() for g in self.grades),
            periods=tuple(p.to_domain() for p in self.periods),
            active_period_id=self.active_period_id,
        )


class DashboardPayload(SnapshotPayload):
    scale: Optional[Literal["10", "20", "combined"]] = None
    now: Optional[datetime] = None


class RequiredGradePayload(SnapshotPayload):
    subject_id: str = Field(alias="subjectId")
    max_grade: float = Field(alias="maxGrade", gt=0)
    now: Optional[datetime] = None


def _evaluation_out(e: Evaluation, band: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": e.id,
        "subject_id": e.subject_id,
        "period_id": e.period_id,
        "type": e.type,
        "max_grade": e.max_grade,
        "date": e.date,
        "grade": e.grade,
        "name": e.label,
        "comment": e.comment,
        "bonus": e.bonus,
        "is_planned": e.is_planned,
        "band": band,
    }


def _chart_out(chart: ChartData) -> Dict[str, Any]:
    return {
        "max_x": chart.max_x,
        "display_scale": chart.display_scale,
        "series": [
            {
                "subject_id": s.subject.id,
                "color": s.subject.color,
                "points": [
                    {"evaluation_id": p.evaluation.id, "x": p.x, "y": p.y, "is_planned": p.is_planned}
                    for p in s.points
                ],
            }
            for s in chart.series
        ],
    }


def _dashboard_out(d: Dashboard) -> Dict[str, Any]:
    stats = None
    if d.statistics is not None:
        stats = {
            "highest": {"evaluation_id": d.statistics.highest.evaluation.id, "normalized": d.statistics.highest.normalized},
            "lowest": {"evaluation_id": d.statistics.lowest.evaluation.id, "normalized": d.statistics.lowest.normalized},
            "subject_averages": [
                {"subject_id": row.subject.id, "average": row.average} for row in d.statistics.subject_averages
            ],
            "type_counts": d.statistics.type_counts,
        }

    return {
        "active_period_id": d.active_period.id if d.active_period else None,
        "overall_average": d.overall_average,
        "period_goal": d.period_goal,
        "calculated_period_goal": d.calculated_period_goal,
        "annual": {
            "school_year": d.annual.school_year,
            "period_ids": [p.id for p in d.annual.periods],
            "average": d.annual.average,
        },
        "roadmap": [
            {"subject_id": r.subject.id, "status": r.status, "required_average": r.required_average}
            for r in d.roadmap
        ],
        "chart": _chart_out(d.chart),
        "statistics": stats,
        "performance": [{"subject_id": row.subject.id, "average": row.average} for row in d.performance],
        "recent": [_evaluation_out(e, band) for e, band in zip(d.recent, d.recent_bands)],
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/dashboard")
def dashboard(payload: DashboardPayload) -> Dict:
    service = GradebookService.from_settings()
    try:
        result = service.dashboard(payload.to_snapshot(), scale=payload.scale, now=payload.now)
    except GradebookServiceError as exc:
        logger.warning("Rejected dashboard request: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _dashboard_out(result)


@app.post("/required-grade")
def required_grade(payload: RequiredGradePayload) -> Dict:
    service = GradebookService.from_settings()
    try:
        result = service.required_grade(
            payload.to_snapshot(), payload.subject_id, payload.max_grade, now=payload.now
        )
    except GradebookServiceError as exc:
        logger.warning("Rejected required-grade request: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {
        "subject_id": payload.subject_id,
        "score": result.score,
        "status": result.status,
        "best_possible": result.best_possible,
    }
