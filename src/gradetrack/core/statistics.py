from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from gradetrack.core.averages import subject_average
from gradetrack.core.scores import normalized_score
from gradetrack.domain.models import Evaluation, Subject, actual_evaluations


@dataclass(frozen=True)
class ScoredEvaluation:
    evaluation: Evaluation
    normalized: float


@dataclass(frozen=True)
class SubjectAverage:
    subject: Subject
    average: Optional[float]


@dataclass(frozen=True)
class GradeStatistics:
    highest: ScoredEvaluation
    lowest: ScoredEvaluation
    subject_averages: Tuple[SubjectAverage, ...]
    type_counts: Dict[str, int]


def grade_statistics(subjects: Iterable[Subject], evaluations: Iterable[Evaluation]) -> Optional[GradeStatistics]:
    actual = actual_evaluations(evaluations)
    if not actual:
        return None

    highest: Optional[ScoredEvaluation] = None
    lowest: Optional[ScoredEvaluation] = None
    type_counts: Dict[str, int] = {}
    seen_subjects: list[str] = []

    for e in actual:
        scored = ScoredEvaluation(e, normalized_score(e))
        if highest is None or scored.normalized > highest.normalized:
            highest = scored
        if lowest is None or scored.normalized < lowest.normalized:
            lowest = scored
        type_counts[e.type] = type_counts.get(e.type, 0) + 1
        if e.subject_id not in seen_subjects:
            seen_subjects.append(e.subject_id)

    by_id = {s.id: s for s in subjects}
    averages = [
        SubjectAverage(by_id[subject_id], subject_average(subject_id, actual))
        for subject_id in seen_subjects
        if subject_id in by_id
    ]
    averages.sort(key=lambda item: item.average, reverse=True)

    return GradeStatistics(highest, lowest, tuple(averages), type_counts)


def performance_by_subject(subjects: Iterable[Subject], evaluations: Iterable[Evaluation]) -> list[SubjectAverage]:
    evaluations = list(evaluations)
    rows = [SubjectAverage(s, subject_average(s.id, evaluations)) for s in subjects]
    rows.sort(key=lambda row: row.average if row.average is not None else -1, reverse=True)
    return rows


def recent_evaluations(evaluations: Iterable[Evaluation], limit: int = 5) -> list[Evaluation]:
    ordered = sorted(evaluations, key=lambda e: e.date.timestamp(), reverse=True)
    return ordered[:limit]


def score_band(score: float, goal: Optional[float] = None) -> str:
    if goal is not None and score >= goal:
        return "goal_met"
    if score >= 16:
        return "excellent"
    if score >= 14:
        return "good"
    if score >= 10:
        return "pass"
    return "fail"


def evaluation_band(evaluation: Evaluation, subject: Optional[Subject] = None) -> Optional[str]:
    """Band of an actual evaluation's 0-20 score against its subject goal; planned ones have none."""
    if evaluation.is_planned:
        return None
    return score_band(normalized_score(evaluation), subject.goal if subject else None)
