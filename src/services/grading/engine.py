# src/services/grading/engine.py
"""
Weighted grade computations on a 0-20 scale.

Every function in this module is pure: the evaluation set passed in is read
but never mutated, and invalid input is reported as a GradeValidationError
value instead of being raised. Callers decide how to surface the error.
"""
import math

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Optional, Sequence, Union

MIN_SCORE = 0.0
MAX_SCORE = 20.0
DEFAULT_PASSING_THRESHOLD = 10.5
WEIGHT_SUM_TOLERANCE = 0.01


class GradeErrorKind(str, Enum):
    EMPTY_SET = "empty_set"
    WEIGHT_OUT_OF_RANGE = "weight_out_of_range"
    SCORE_OUT_OF_RANGE = "score_out_of_range"
    INCOMPLETE_FOR_AVERAGE = "incomplete_for_average"
    NO_MISSING_SCORE = "no_missing_score"
    MULTIPLE_MISSING_SCORES = "multiple_missing_scores"
    WEIGHT_SUM_INVALID = "weight_sum_invalid"


@dataclass(frozen=True)
class EvaluationItem:
    """One graded or pending component of a course"""
    weight: float
    score: Optional[float] = None
    label: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.score is None


@dataclass(frozen=True)
class GradeValidationError:
    """Why an evaluation set was rejected. `index` is 0-based when set."""
    kind: GradeErrorKind
    message: str
    index: Optional[int] = None


@dataclass(frozen=True)
class Average:
    value: float

    @property
    def rounded(self) -> float:
        return round_half_up(self.value)


@dataclass(frozen=True)
class RequiredScore:
    value: float
    reachable: bool
    passing_threshold: float
    pending_weight: float
    current_average: Optional[float] = None

    @property
    def rounded(self) -> float:
        return round_half_up(self.value)

    @property
    def already_met(self) -> bool:
        return self.value < MIN_SCORE


ComputationResult = Union[Average, RequiredScore]
EvaluationSet = Sequence[EvaluationItem]


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero, for display only."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    # Enough digits for any finite float plus the requested places
    with localcontext() as ctx:
        ctx.prec = 400
        return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def weight_sum(items: EvaluationSet) -> float:
    return sum(item.weight for item in items)


def validate_items(items: EvaluationSet) -> Optional[GradeValidationError]:
    """
    Check the invariants shared by both computations.

    Returns the first problem found, or None when the set is usable.
    """
    if not items:
        return GradeValidationError(
            GradeErrorKind.EMPTY_SET,
            "Add at least one evaluation",
        )

    for index, item in enumerate(items):
        # Written so that NaN fails the check too
        if not (0 < item.weight <= 1):
            return GradeValidationError(
                GradeErrorKind.WEIGHT_OUT_OF_RANGE,
                f"The weight of evaluation {index + 1} must be greater than 0 and at most 1",
                index,
            )

    for index, item in enumerate(items):
        if item.is_pending:
            continue
        if not (MIN_SCORE <= item.score <= MAX_SCORE):
            return GradeValidationError(
                GradeErrorKind.SCORE_OUT_OF_RANGE,
                f"The score of evaluation {index + 1} must be between 0 and 20",
                index,
            )

    return None


def validate_weight_sum(
    items: EvaluationSet, tolerance: float = WEIGHT_SUM_TOLERANCE
) -> Optional[GradeValidationError]:
    total = weight_sum(items)
    if abs(total - 1.0) > tolerance:
        return GradeValidationError(
            GradeErrorKind.WEIGHT_SUM_INVALID,
            f"The weights must add up to 1 (currently {total:.2f})",
        )
    return None


def _validate_complete(items: EvaluationSet) -> Optional[GradeValidationError]:
    for index, item in enumerate(items):
        if item.is_pending:
            return GradeValidationError(
                GradeErrorKind.INCOMPLETE_FOR_AVERAGE,
                "Every score must be filled in to compute the average",
                index,
            )
    return None


def _validate_single_pending(items: EvaluationSet) -> Optional[GradeValidationError]:
    pending = [index for index, item in enumerate(items) if item.is_pending]
    if not pending:
        return GradeValidationError(
            GradeErrorKind.NO_MISSING_SCORE,
            "Leave one score empty to compute the score you need",
        )
    if len(pending) > 1:
        return GradeValidationError(
            GradeErrorKind.MULTIPLE_MISSING_SCORES,
            "Only one missing score can be computed at a time. Leave a single score empty",
            pending[1],
        )
    return None


def compute_average(items: EvaluationSet) -> Union[Average, GradeValidationError]:
    """
    Weighted mean of a fully graded set.

    Divides by the sum of the weights present, so a partial scheme
    (weights not adding up to 1) still yields the mean over that subset.
    """
    error = validate_items(items) or _validate_complete(items)
    if error:
        return error

    weighted_sum = sum(item.score * item.weight for item in items)
    return Average(value=weighted_sum / weight_sum(items))


def compute_required_score(
    items: EvaluationSet,
    passing_threshold: float = DEFAULT_PASSING_THRESHOLD,
    tolerance: float = WEIGHT_SUM_TOLERANCE,
) -> Union[RequiredScore, GradeValidationError]:
    """
    Score the single pending evaluation needs for the weighted result to
    reach `passing_threshold`.

    The weights must form a complete scheme (sum within `tolerance` of 1).
    The value is never clamped: a negative requirement means the target is
    already exceeded, one above 20 means it is out of reach.
    """
    error = (
        validate_items(items)
        or _validate_single_pending(items)
        or validate_weight_sum(items, tolerance)
    )
    if error:
        return error

    graded = [item for item in items if not item.is_pending]
    known_weighted_sum = sum(item.score * item.weight for item in graded)
    known_weight_total = sum(item.weight for item in graded)
    pending_weight = sum(item.weight for item in items if item.is_pending)
    total_weight = weight_sum(items)

    required = (passing_threshold * total_weight - known_weighted_sum) / pending_weight

    return RequiredScore(
        value=required,
        reachable=required <= MAX_SCORE,
        passing_threshold=passing_threshold,
        pending_weight=pending_weight,
        current_average=(
            known_weighted_sum / known_weight_total if graded else None
        ),
    )
