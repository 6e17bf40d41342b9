# src/schema/base.py
from datetime import datetime
from typing import Generic, TypeVar, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

# Generic type for the data field
T = TypeVar("T")


class BaseResponse(BaseModel, Generic[T]):
    status: bool = True  # Indicates success (True) or failure (False)
    message: str = "Success"  # Human-readable message
    data: Optional[T] = None  # The actual payload (can be any type)
    error: Optional[dict] = None  # Error details (if any)

    model_config = ConfigDict(from_attributes=True)


# Base Models for API Responses
class TimeStampedModel(BaseModel):
    created_on: datetime
    updated_on: datetime


class DBModelBase(TimeStampedModel):
    id: UUID

    model_config = ConfigDict(from_attributes=True)
