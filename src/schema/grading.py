# src/schema/grading.py
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from src.schema.base import BaseResponse
from src.settings import settings


class EvaluationIn(BaseModel):
    """One row as typed by the user. Strings are parsed by the service."""
    score: Optional[Union[float, str]] = None
    weight: Optional[Union[float, str]] = None
    label: Optional[str] = None


class EvaluationOut(BaseModel):
    """An evaluation after parsing, as stored with a simulation"""
    score: Optional[float] = Field(default=None, ge=0, le=20)
    weight: float = Field(gt=0, le=1)
    label: Optional[str] = None

    model_config = {"from_attributes": True, "allow_inf_nan": False}


class AverageRequest(BaseModel):
    evaluations: List[EvaluationIn]
    user_id: Optional[str] = None
    # Score value some clients send to mean "not graded yet", e.g. -1
    missing_sentinel: Optional[float] = None


class RequiredScoreRequest(AverageRequest):
    passing_threshold: float = Field(
        default_factory=lambda: settings.PASSING_THRESHOLD, ge=0, le=20
    )


class AverageData(BaseModel):
    average: float
    raw_average: float
    simulation_id: Optional[UUID] = None


class RequiredScoreData(BaseModel):
    required_score: float
    raw_required_score: float
    reachable: bool
    already_met: bool
    passing_threshold: float
    pending_weight: float
    current_average: Optional[float] = None
    simulation_id: Optional[UUID] = None


class AverageResponse(BaseResponse[AverageData]):
    pass


class RequiredScoreResponse(BaseResponse[RequiredScoreData]):
    pass
