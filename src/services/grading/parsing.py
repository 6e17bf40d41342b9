# src/services/grading/parsing.py
import math

from typing import Any, Iterable, List, Mapping, Optional

from src.services.grading.engine import EvaluationItem


class InvalidInputError(ValueError):
    """Raw input could not be read as numbers"""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_number(value: Any, field: str, index: int) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(
            f"The {field} of evaluation {index + 1} must be a valid number", index
        )
    try:
        number = float(value.strip().replace(",", ".") if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"The {field} of evaluation {index + 1} must be a valid number", index
        )
    if not math.isfinite(number):
        raise InvalidInputError(
            f"The {field} of evaluation {index + 1} must be a valid number", index
        )
    return number


def parse_evaluation(
    row: Mapping[str, Any],
    index: int = 0,
    missing_sentinel: Optional[float] = None,
) -> EvaluationItem:
    """
    Build an EvaluationItem from one row of user input.

    A blank score marks the evaluation as pending. When `missing_sentinel`
    is given, a score equal to it is read as pending as well.
    """
    raw_weight = row.get("weight")
    if _is_blank(raw_weight):
        raise InvalidInputError(f"The weight of evaluation {index + 1} is required", index)
    weight = _to_number(raw_weight, "weight", index)

    raw_score = row.get("score")
    score = None
    if not _is_blank(raw_score):
        score = _to_number(raw_score, "score", index)
        if missing_sentinel is not None and score == missing_sentinel:
            score = None

    label = row.get("label")
    return EvaluationItem(
        weight=weight,
        score=score,
        label=str(label) if label is not None else None,
    )


def parse_evaluations(
    rows: Iterable[Mapping[str, Any]],
    missing_sentinel: Optional[float] = None,
) -> List[EvaluationItem]:
    return [
        parse_evaluation(row, index, missing_sentinel)
        for index, row in enumerate(rows)
    ]
