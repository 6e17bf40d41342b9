# src/api/dependencies/db.py
import uuid

from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.database import get_db
from src.logging_config import app_logger
from src.models.simulation import Simulation as ORMSimulation
from src.schema.simulation import SimulationCreate, SimulationData
from src.settings import settings


class SimulationNotFoundError(LookupError):
    def __init__(self, simulation_id: uuid.UUID):
        super().__init__(f"Simulation {simulation_id} not found")
        self.simulation_id = simulation_id


class SimulationStore:
    """
    Persistence for saved simulations, one row per computation.
    """

    def __init__(self, db: Session):
        self.db = db

    def save(self, record: SimulationCreate) -> uuid.UUID:
        """
        Persist a simulation.

        Args:
            record: The evaluations and computed values to store. A missing
                user_id is stored as the configured anonymous user.

        Returns:
            The id of the new record
        """
        now = record.created_on or datetime.utcnow()
        simulation = ORMSimulation(
            user_id=record.user_id or settings.DEFAULT_USER_ID,
            evaluations=[item.model_dump() for item in record.evaluations],
            average=record.average,
            required_score=record.required_score,
            reachable=record.reachable,
            passing_threshold=record.passing_threshold,
            created_on=now,
            updated_on=now,
        )
        self.db.add(simulation)
        self.db.commit()
        self.db.refresh(simulation)

        app_logger.info(f"Saved simulation {simulation.id} for user {simulation.user_id}")
        return simulation.id

    def get(self, simulation_id: uuid.UUID) -> Optional[SimulationData]:
        simulation = self.db.get(ORMSimulation, simulation_id)
        if not simulation:
            return None
        return SimulationData.model_validate(simulation)

    def list_by_user(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[SimulationData]:
        """
        Fetch a user's simulations, most recent first.

        Args:
            user_id: Owner of the simulations
            limit: Maximum number of records, defaults to HISTORY_LIMIT

        Returns:
            List of SimulationData ordered by creation time, newest first
        """
        query = (
            select(ORMSimulation)
            .where(ORMSimulation.user_id == user_id)
            .order_by(ORMSimulation.created_on.desc())
            .limit(limit or settings.HISTORY_LIMIT)
        )
        results = self.db.execute(query).scalars().all()
        return [SimulationData.model_validate(result) for result in results]

    def delete(self, simulation_id: uuid.UUID) -> None:
        simulation = self.db.get(ORMSimulation, simulation_id)
        if not simulation:
            raise SimulationNotFoundError(simulation_id)

        self.db.delete(simulation)
        self.db.commit()
        app_logger.info(f"Deleted simulation {simulation_id}")


def get_simulation_store(db: Session = Depends(get_db)) -> SimulationStore:
    return SimulationStore(db)
