from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Tuple

from gradetrack.core.projection import next_required_points
from gradetrack.core.scores import clamp_0_20, normalized_score, rescale
from gradetrack.domain.models import Evaluation, Period, Planned, Subject


ChartScale = Literal["10", "20", "combined"]
CHART_SCALES: Tuple[str, ...] = ("10", "20", "combined")


@dataclass(frozen=True)
class ChartPoint:
    evaluation: Evaluation
    x: int
    y: float
    is_planned: bool


@dataclass(frozen=True)
class ChartSeries:
    subject: Subject
    points: Tuple[ChartPoint, ...]


@dataclass(frozen=True)
class ChartData:
    series: Tuple[ChartSeries, ...]
    max_x: int
    display_scale: int


@dataclass(frozen=True)
class RunningTotals:
    count: int = 0
    points: float = 0.0

    def add(self, score: float) -> "RunningTotals":
        return RunningTotals(self.count + 1, self.points + score)


def display_scale_for(scale: ChartScale) -> int:
    if scale not in CHART_SCALES:
        raise ValueError(f"Unsupported chart scale: {scale}. Use 10, 20, or combined.")
    return 10 if scale == "10" else 20


def filter_by_scale(evaluations: Iterable[Evaluation], scale: ChartScale) -> list[Evaluation]:
    display_scale_for(scale)
    if scale == "10":
        return [e for e in evaluations if e.max_grade <= 10]
    if scale == "20":
        return [e for e in evaluations if e.max_grade > 10]
    return list(evaluations)


def resolve_point(
    subject: Subject,
    evaluation: Evaluation,
    totals: RunningTotals,
) -> Tuple[float, RunningTotals]:
    """Return the 0-20 score plotted for an evaluation and the updated running totals."""
    if isinstance(evaluation.outcome, Planned):
        score = clamp_0_20(next_required_points(subject.goal, totals.count, totals.points))
    else:
        score = normalized_score(evaluation)
    return score, totals.add(score)


def build_series(
    subject: Subject,
    evaluations: Iterable[Evaluation],
    display_scale: int,
) -> Optional[ChartSeries]:
    ordered = sorted(
        (e for e in evaluations if e.subject_id == subject.id),
        key=lambda e: e.date.timestamp(),
    )
    if not ordered:
        return None

    totals = RunningTotals()
    points = []
    for index, evaluation in enumerate(ordered):
        score, totals = resolve_point(subject, evaluation, totals)
        points.append(
            ChartPoint(
                evaluation=evaluation,
                x=index,
                y=rescale(score, display_scale),
                is_planned=evaluation.is_planned,
            )
        )
    return ChartSeries(subject, tuple(points))


def build_chart(
    subjects: Iterable[Subject],
    evaluations: Iterable[Evaluation],
    period: Optional[Period],
    scale: ChartScale = "20",
) -> ChartData:
    display_scale = display_scale_for(scale)
    if period is None:
        return ChartData((), 0, display_scale)

    filtered = filter_by_scale(evaluations, scale)
    series = []
    for subject in subjects:
        s = build_series(subject, filtered, display_scale)
        if s is not None:
            series.append(s)

    max_x = max((len(s.points) for s in series), default=0)
    return ChartData(tuple(series), max_x, display_scale)
