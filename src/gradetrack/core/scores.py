from gradetrack.domain.models import Actual, Evaluation


SCALE_MAX = 20.0


def normalize(raw_grade: float, max_grade: float, bonus: float = 0.0) -> float:
    """
    Rescale a raw grade to the common 0-20 basis.
    score = min(raw_grade + bonus, max_grade) / max_grade * 20
    """
    if max_grade <= 0:
        raise ValueError("max_grade must be greater than 0")
    capped = min(raw_grade + (bonus or 0.0), max_grade)
    return (capped / max_grade) * SCALE_MAX


def normalized_score(evaluation: Evaluation) -> float:
    if not isinstance(evaluation.outcome, Actual):
        raise ValueError(f"Evaluation {evaluation.id} is planned and has no score")
    return normalize(evaluation.outcome.grade, evaluation.max_grade, evaluation.bonus)


def rescale(score: float, display_scale: float) -> float:
    return (score / SCALE_MAX) * display_scale


def clamp_0_20(value: float) -> float:
    return max(0.0, min(SCALE_MAX, value))
