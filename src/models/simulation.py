# src/models/simulation.py
from sqlalchemy import Boolean, Column, Float, JSON, String

from src.database import Base
from src.models.base import BaseMixin


class Simulation(Base, BaseMixin):
    """
    One saved computation: the evaluations entered by the user together
    with the average or the required score derived from them.
    """

    __tablename__ = "simulations"

    user_id = Column(String(128), nullable=False, index=True)
    evaluations = Column(JSON, nullable=False)
    average = Column(Float, nullable=True)
    required_score = Column(Float, nullable=True)
    reachable = Column(Boolean, nullable=True)
    passing_threshold = Column(Float, nullable=True)
