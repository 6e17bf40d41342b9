# src/schema/simulation.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.schema.base import BaseResponse, DBModelBase
from src.schema.grading import EvaluationOut


class SimulationCreate(BaseModel):
    evaluations: List[EvaluationOut] = Field(min_length=1)
    average: Optional[float] = None
    required_score: Optional[float] = None
    reachable: Optional[bool] = None
    passing_threshold: Optional[float] = None
    user_id: Optional[str] = None
    # Left empty, the store stamps the record when it is saved
    created_on: Optional[datetime] = None


class SimulationData(DBModelBase):
    user_id: str
    evaluations: List[EvaluationOut]
    average: Optional[float] = None
    required_score: Optional[float] = None
    reachable: Optional[bool] = None
    passing_threshold: Optional[float] = None


class SimulationResponse(BaseResponse[SimulationData]):
    pass


class SimulationListResponse(BaseResponse[List[SimulationData]]):
    pass
