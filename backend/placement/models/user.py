"""
Modèle SQLAlchemy pour les comptes utilisateurs (étudiants, enseignants, TPO, admins).
L'email est la clé de réconciliation des imports CSV : unique, stocké en minuscules.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Uuid, func

from placement.database import Base

ROLES = ("student", "teacher", "tpo", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # student, teacher, tpo, admin
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    phone = Column(String(30), nullable=True)
    department = Column(String(150), nullable=True)
    date_of_birth = Column(String(10), nullable=True)  # YYYY-MM-DD
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
