from __future__ import annotations

from typing import Iterable, Optional, Tuple

from gradetrack.core.scores import normalized_score
from gradetrack.domain.models import Actual, Evaluation, Period, Subject, actual_evaluations


def subject_totals(subject_id: str, evaluations: Iterable[Evaluation]) -> Tuple[int, float]:
    """Return (count, total normalized points) of a subject's actual evaluations."""
    count = 0
    total = 0.0
    for e in evaluations:
        if e.subject_id == subject_id and isinstance(e.outcome, Actual):
            count += 1
            total += normalized_score(e)
    return count, total


def subject_average(subject_id: str, evaluations: Iterable[Evaluation]) -> Optional[float]:
    count, total = subject_totals(subject_id, evaluations)
    if count == 0:
        return None
    return total / count


def period_average(subjects: Iterable[Subject], evaluations: Iterable[Evaluation]) -> float:
    """
    Coefficient-weighted average over subjects that have at least one actual grade.
    avg = Σ(subject_average * coefficient) / Σ(coefficient)
    """
    actual = actual_evaluations(evaluations)
    if not actual:
        return 0.0

    weighted = 0.0
    total_coefficients = 0.0
    for s in subjects:
        average = subject_average(s.id, actual)
        if average is None:
            continue
        weighted += average * s.coefficient
        total_coefficients += s.coefficient

    if total_coefficients == 0:
        return 0.0
    return weighted / total_coefficients


def calculated_period_goal(subjects: Iterable[Subject]) -> float:
    weighted = 0.0
    total_coefficients = 0.0
    for s in subjects:
        weighted += s.goal * s.coefficient
        total_coefficients += s.coefficient
    if total_coefficients == 0:
        return 0.0
    return weighted / total_coefficients


def effective_period_goal(period: Optional[Period], subjects: Iterable[Subject]) -> float:
    if period is not None and period.goal is not None:
        return period.goal
    return calculated_period_goal(subjects)


def evaluations_for_period(period_id: Optional[str], evaluations: Iterable[Evaluation]) -> list[Evaluation]:
    if not period_id:
        return []
    return [e for e in evaluations if e.period_id == period_id]
