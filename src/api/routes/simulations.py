# src/api/routes/simulations.py
import uuid

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.dependencies.db import SimulationStore, get_simulation_store
from src.schema.simulation import (
    SimulationCreate,
    SimulationListResponse,
    SimulationResponse,
)
from src.settings import settings

router = APIRouter(prefix="/api/simulations", tags=["simulations"])


@router.post("/", response_model=SimulationResponse)
async def save_simulation(
    request: SimulationCreate,
    store: SimulationStore = Depends(get_simulation_store),
) -> SimulationResponse:
    simulation_id = store.save(request)
    return SimulationResponse(
        data=store.get(simulation_id),
        message="Simulation saved",
    )


@router.get("/", response_model=SimulationListResponse)
async def list_simulations(
    user_id: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    store: SimulationStore = Depends(get_simulation_store),
) -> SimulationListResponse:
    """
    Simulation history of a user, most recent first
    """
    simulations = store.list_by_user(
        user_id or settings.DEFAULT_USER_ID,
        limit or settings.HISTORY_LIMIT,
    )
    return SimulationListResponse(data=simulations)


@router.get("/{simulation_id}", response_model=SimulationResponse)
async def get_simulation(
    simulation_id: uuid.UUID,
    store: SimulationStore = Depends(get_simulation_store),
) -> SimulationResponse:
    simulation = store.get(simulation_id)
    if not simulation:
        raise HTTPException(status_code=404, detail="Simulation not found")
    return SimulationResponse(data=simulation)


@router.delete("/{simulation_id}", response_model=SimulationResponse)
async def delete_simulation(
    simulation_id: uuid.UUID,
    store: SimulationStore = Depends(get_simulation_store),
) -> SimulationResponse:
    """
    Permanently delete a simulation. Responds 404 when it does not exist.
    """
    store.delete(simulation_id)
    return SimulationResponse(
        message=f"Simulation {simulation_id} has been deleted",
        data=None,
    )
