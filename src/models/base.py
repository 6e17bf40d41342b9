# src/models/base.py
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Uuid


class BaseMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_on = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_on = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
