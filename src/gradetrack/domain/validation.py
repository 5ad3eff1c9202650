from __future__ import annotations

from gradetrack.domain.models import EVALUATION_TYPES, Actual, Evaluation, Period, Subject


GOAL_MIN = 0.0
GOAL_MAX = 20.0


class ValidationError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def _check_goal(field: str, goal: float | None) -> None:
    if goal is not None and not GOAL_MIN <= goal <= GOAL_MAX:
        raise ValidationError(field, f"must be between {GOAL_MIN:g} and {GOAL_MAX:g}")


def validate_subject(subject: Subject) -> Subject:
    if not subject.name.strip():
        raise ValidationError("name", "is required")
    if subject.coefficient <= 0:
        raise ValidationError("coefficient", "must be greater than 0")
    _check_goal("goal", subject.goal)
    return subject


def validate_period(period: Period) -> Period:
    if not period.name.strip():
        raise ValidationError("name", "is required")
    if period.end_date.timestamp() < period.start_date.timestamp():
        raise ValidationError("end_date", "must not be before start_date")
    _check_goal("goal", period.goal)
    return period


def validate_evaluation(evaluation: Evaluation) -> Evaluation:
    if evaluation.type not in EVALUATION_TYPES:
        raise ValidationError("type", f"must be one of {', '.join(EVALUATION_TYPES)}")
    if evaluation.max_grade <= 0:
        raise ValidationError("max_grade", "must be greater than 0")
    if evaluation.bonus < 0:
        raise ValidationError("bonus", "must not be negative")

    if isinstance(evaluation.outcome, Actual):
        grade = evaluation.outcome.grade
        if grade < 0:
            raise ValidationError("grade", "must not be negative")
        if grade > evaluation.max_grade:
            raise ValidationError("grade", "must not exceed max_grade")
    elif not evaluation.outcome.label.strip():
        raise ValidationError("name", "planned evaluations need a label")
    return evaluation
