# src/api/routes/grading.py
from fastapi import APIRouter, Depends

from src.api.dependencies.db import SimulationStore, get_simulation_store
from src.api.exceptions.handlers import grade_error_response
from src.schema.grading import (
    AverageRequest,
    AverageResponse,
    RequiredScoreRequest,
    RequiredScoreResponse,
)
from src.services import simulation as simulation_service
from src.services.grading import engine
from src.services.grading.parsing import parse_evaluations
from src.settings import settings

router = APIRouter(prefix="/api/calculations", tags=["calculations"])


@router.post("/average", response_model=AverageResponse)
async def calculate_average(
    request: AverageRequest,
    store: SimulationStore = Depends(get_simulation_store),
) -> AverageResponse:
    """
    Weighted average of fully graded evaluations.
    Saves a simulation when a user_id is given.
    """
    items = parse_evaluations(
        [row.model_dump() for row in request.evaluations],
        missing_sentinel=request.missing_sentinel,
    )
    result = engine.compute_average(items)
    if isinstance(result, engine.GradeValidationError):
        return grade_error_response(result)

    simulation_id, warning = None, None
    if request.user_id:
        simulation_id, warning = simulation_service.record_simulation(
            store, items, result, request.user_id
        )

    return AverageResponse(
        data=simulation_service.to_average_data(result, simulation_id),
        message=warning or "Average computed",
    )


@router.post("/required-score", response_model=RequiredScoreResponse)
async def calculate_required_score(
    request: RequiredScoreRequest,
    store: SimulationStore = Depends(get_simulation_store),
) -> RequiredScoreResponse:
    """
    Score needed on the single pending evaluation to reach the passing
    threshold. Saves a simulation when a user_id is given.
    """
    items = parse_evaluations(
        [row.model_dump() for row in request.evaluations],
        missing_sentinel=request.missing_sentinel,
    )
    result = engine.compute_required_score(
        items,
        passing_threshold=request.passing_threshold,
        tolerance=settings.WEIGHT_SUM_TOLERANCE,
    )
    if isinstance(result, engine.GradeValidationError):
        return grade_error_response(result)

    simulation_id, warning = None, None
    if request.user_id:
        simulation_id, warning = simulation_service.record_simulation(
            store, items, result, request.user_id
        )

    return RequiredScoreResponse(
        data=simulation_service.to_required_score_data(result, simulation_id),
        message=warning or simulation_service.describe_required_score(result),
    )
