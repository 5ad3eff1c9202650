from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from gradetrack.core.averages import period_average
from gradetrack.domain.models import Actual, Evaluation, Period, Subject


# School years start in September.
SCHOOL_YEAR_START_MONTH = 9


@dataclass(frozen=True)
class AnnualSummary:
    school_year: Optional[str]
    periods: Tuple[Period, ...]
    average: float


def school_year(date: datetime) -> str:
    year = date.year
    if date.month >= SCHOOL_YEAR_START_MONTH:
        return f"{year}-{year + 1}"
    return f"{year - 1}-{year}"


def periods_in_same_year(active_period: Optional[Period], periods: Iterable[Period]) -> list[Period]:
    if active_period is None:
        return []
    target = school_year(active_period.start_date)
    return [p for p in periods if school_year(p.start_date) == target]


def annual_average(
    active_period: Optional[Period],
    periods: Iterable[Period],
    subjects: Iterable[Subject],
    evaluations: Iterable[Evaluation],
) -> float:
    return annual_summary(active_period, periods, subjects, evaluations).average


def annual_summary(
    active_period: Optional[Period],
    periods: Iterable[Period],
    subjects: Iterable[Subject],
    evaluations: Iterable[Evaluation],
) -> AnnualSummary:
    if active_period is None:
        return AnnualSummary(None, (), 0.0)

    year = school_year(active_period.start_date)
    same_year = tuple(periods_in_same_year(active_period, periods))

    # A single period has no annual average of its own.
    if len(same_year) < 2:
        return AnnualSummary(year, same_year, 0.0)

    period_ids = {p.id for p in same_year}
    year_grades = [
        e for e in evaluations if e.period_id in period_ids and isinstance(e.outcome, Actual)
    ]
    return AnnualSummary(year, same_year, period_average(subjects, year_grades))
