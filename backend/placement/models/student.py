"""
Fiche académique d'un étudiant, liée 1:1 à un compte de rôle `student`.
La contrainte unique + FK en cascade garantit qu'une fiche n'existe jamais sans compte.
"""

import uuid
from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Uuid, func

from placement.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    guardian_name = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=False)
    date_of_birth = Column(String(10), nullable=False)  # YYYY-MM-DD
    resume_ats_score = Column(Float, nullable=True)
    resume_analyzed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
