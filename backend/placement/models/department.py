"""
Modèle SQLAlchemy pour les départements académiques.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Uuid, func

from placement.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(150), unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
