from datetime import datetime, timezone
from itertools import count

from gradetrack.domain.models import Actual, Evaluation, Period, Planned, Subject


_ids = count(1)


def when(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def subject(id="math", coefficient=1.0, goal=10.0, name=None, color="#3366ff"):
    return Subject(id=id, name=name or id.title(), coefficient=coefficient, goal=goal, color=color)


def period(id="t1", start=None, end=None, goal=None, name=None):
    return Period(
        id=id,
        name=name or id.upper(),
        start_date=start or when(2024, 9, 2),
        end_date=end or when(2024, 12, 20),
        goal=goal,
    )


def actual(subject_id, grade, max_grade=20.0, bonus=0.0, date=None, period_id="t1", type="Control", comment=None):
    return Evaluation(
        id=f"e{next(_ids)}",
        subject_id=subject_id,
        period_id=period_id,
        type=type,
        max_grade=max_grade,
        date=date or when(2024, 10, 1),
        outcome=Actual(grade),
        comment=comment,
        bonus=bonus,
    )


def planned(subject_id, label="Future evaluation #1", max_grade=20.0, date=None, period_id="t1", type="Control"):
    return Evaluation(
        id=f"e{next(_ids)}",
        subject_id=subject_id,
        period_id=period_id,
        type=type,
        max_grade=max_grade,
        date=date or when(2024, 11, 1),
        outcome=Planned(label),
    )
