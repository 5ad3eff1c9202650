from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Literal, Optional

from gradetrack.core.averages import subject_totals
from gradetrack.core.scores import SCALE_MAX
from gradetrack.domain.models import Evaluation, Period, Subject, planned_evaluations


RoadmapStatus = Literal["no_grades", "achieved", "below_goal", "difficult", "in_progress"]
RequirementStatus = Literal["achieved", "possible", "impossible"]

# Past this share of the period, a missed goal is reported as missed.
PERIOD_OVER_PROGRESS = 0.99
# Below this share, elapsed time is too short to extrapolate a grade count.
MIN_EXTRAPOLATION_PROGRESS = 0.01


@dataclass(frozen=True)
class RoadmapEntry:
    subject: Subject
    status: RoadmapStatus
    required_average: Optional[float] = None


@dataclass(frozen=True)
class Requirement:
    score: Optional[float]
    status: RequirementStatus
    best_possible: Optional[float] = None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def period_progress(period: Period, now: datetime) -> float:
    start = period.start_date.timestamp()
    end = period.end_date.timestamp()
    total = end - start
    if total <= 0:
        return 1.0
    return min(max((now.timestamp() - start) / total, 0.0), 1.0)


def estimate_remaining(current_count: int, planned_count: int, progress: float) -> int:
    if planned_count > 0:
        return planned_count
    if progress > MIN_EXTRAPOLATION_PROGRESS:
        estimated_total = max(current_count + 1, _round_half_up(current_count / progress))
    else:
        estimated_total = current_count * 2
    return max(1, estimated_total - current_count)


def next_required_points(goal: float, count: int, total_points: float) -> float:
    """Normalized points needed on one more evaluation to bring the average to goal."""
    return goal * (count + 1) - total_points


def roadmap(
    subjects: Iterable[Subject],
    evaluations: Iterable[Evaluation],
    period: Optional[Period],
    now: Optional[datetime] = None,
) -> list[RoadmapEntry]:
    if period is None:
        return []
    now = now or datetime.now(timezone.utc)

    start = period.start_date.timestamp()
    end = period.end_date.timestamp()
    if now.timestamp() > end or end < start:
        return []

    progress = period_progress(period, now)
    evaluations = list(evaluations)
    return [_roadmap_entry(s, evaluations, progress) for s in subjects]


def _roadmap_entry(subject: Subject, evaluations: list[Evaluation], progress: float) -> RoadmapEntry:
    goal = subject.goal
    count, total = subject_totals(subject.id, evaluations)
    if count == 0:
        return RoadmapEntry(subject, "no_grades", goal)

    current_average = total / count
    if current_average >= goal:
        return RoadmapEntry(subject, "achieved")

    if progress >= PERIOD_OVER_PROGRESS:
        return RoadmapEntry(subject, "below_goal", current_average)

    planned_count = sum(1 for e in planned_evaluations(evaluations) if e.subject_id == subject.id)
    remaining = estimate_remaining(count, planned_count, progress)

    required = (goal * (count + remaining) - current_average * count) / remaining
    if required > SCALE_MAX:
        return RoadmapEntry(subject, "difficult", required)
    if required < 0:
        return RoadmapEntry(subject, "achieved")
    return RoadmapEntry(subject, "in_progress", required)


def required_grade(
    subject: Optional[Subject],
    evaluations: Iterable[Evaluation],
    max_grade: float,
) -> Requirement:
    if subject is None:
        return Requirement(None, "impossible")
    if max_grade <= 0:
        raise ValueError("max_grade must be greater than 0")

    count, total = subject_totals(subject.id, evaluations)
    required_normalized = next_required_points(subject.goal, count, total)
    on_scale = (required_normalized / SCALE_MAX) * max_grade

    if on_scale <= 0:
        return Requirement(0.0, "achieved")

    if on_scale > max_grade:
        # Best average reachable with a perfect score next time.
        best_possible = (total + SCALE_MAX) / (count + 1)
        return Requirement(on_scale, "impossible", best_possible)

    return Requirement(on_scale, "possible")
