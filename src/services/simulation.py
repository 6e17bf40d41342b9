# src/services/simulation.py
import uuid

from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from src.api.dependencies.db import SimulationStore
from src.logging_config import app_logger
from src.schema.auth import AuthUser
from src.schema.grading import AverageData, EvaluationOut, RequiredScoreData
from src.schema.simulation import SimulationCreate, SimulationData
from src.services.grading.engine import (
    MAX_SCORE,
    Average,
    ComputationResult,
    EvaluationItem,
    RequiredScore,
)
from src.services.identity import AuthSession

PERSISTENCE_WARNING = "Result computed, but the simulation could not be saved"


def describe_required_score(result: RequiredScore) -> str:
    """Sentence shown next to a required score"""
    if result.already_met:
        return "You already reached the target, whatever the pending score"
    if result.value > MAX_SCORE:
        return (
            f"The target is out of reach: you would need {result.rounded:.2f}, "
            f"above the maximum of {MAX_SCORE:g}"
        )
    return (
        f"You need {result.rounded:.2f} on the pending evaluation "
        f"to reach {result.passing_threshold:g}"
    )


def build_record(
    items: Sequence[EvaluationItem],
    result: ComputationResult,
    user_id: Optional[str],
) -> SimulationCreate:
    """
    Pair a computation with the evaluations it came from. Stored values are
    the display-rounded ones; reachability comes from the unrounded value.
    """
    evaluations = [
        EvaluationOut(score=item.score, weight=item.weight, label=item.label)
        for item in items
    ]
    if isinstance(result, Average):
        return SimulationCreate(
            evaluations=evaluations,
            average=result.rounded,
            user_id=user_id,
        )
    return SimulationCreate(
        evaluations=evaluations,
        required_score=result.rounded,
        reachable=result.reachable,
        passing_threshold=result.passing_threshold,
        user_id=user_id,
    )


def record_simulation(
    store: SimulationStore,
    items: Sequence[EvaluationItem],
    result: ComputationResult,
    user_id: str,
) -> Tuple[Optional[uuid.UUID], Optional[str]]:
    """
    Persist a successful computation.

    A storage failure is logged and reported as a warning; it never
    invalidates the result that was already computed.

    Returns:
        (simulation_id, warning), exactly one of them set
    """
    try:
        return store.save(build_record(items, result, user_id)), None
    except SQLAlchemyError as e:
        store.db.rollback()
        app_logger.error(f"Failed to save simulation for user {user_id}: {str(e)}")
        return None, PERSISTENCE_WARNING


def to_average_data(
    result: Average, simulation_id: Optional[uuid.UUID] = None
) -> AverageData:
    return AverageData(
        average=result.rounded,
        raw_average=result.value,
        simulation_id=simulation_id,
    )


def to_required_score_data(
    result: RequiredScore, simulation_id: Optional[uuid.UUID] = None
) -> RequiredScoreData:
    return RequiredScoreData(
        required_score=result.rounded,
        raw_required_score=result.value,
        reachable=result.reachable,
        already_met=result.already_met,
        passing_threshold=result.passing_threshold,
        pending_weight=result.pending_weight,
        current_average=result.current_average,
        simulation_id=simulation_id,
    )


class HistoryWatcher:
    """
    Keeps the signed-in user's simulation history current: every change of
    user on the session triggers a fresh fetch, signing out clears it.
    """

    def __init__(
        self,
        session: AuthSession,
        fetch_history: Callable[[str], List[SimulationData]],
    ):
        self.fetch_history = fetch_history
        self.history: List[SimulationData] = []
        self._unsubscribe = session.on_change(self._on_user_change)

    def _on_user_change(self, user: Optional[AuthUser]) -> None:
        if user is None:
            self.history = []
            return
        self.refresh(user.uid)

    def refresh(self, user_id: str) -> List[SimulationData]:
        try:
            self.history = self.fetch_history(user_id)
        except SQLAlchemyError as e:
            app_logger.error(f"Failed to load history for user {user_id}: {str(e)}")
            self.history = []
        return self.history

    def close(self) -> None:
        self._unsubscribe()
