"""
Modèles SQLAlchemy pour l'entraînement : tests d'aptitude, problèmes DSA,
tentatives et agrégats de progression.

Les agrégats par entreprise / par pattern sont stockés dans une table à clé
explicite (practice_stats) plutôt que dans une colonne dictionnaire.
"""

import uuid
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
)

from placement.database import Base

APTITUDE_TYPES = ("quantitative", "logical", "verbal", "mixed")
DIFFICULTIES = ("easy", "medium", "hard")


class AptitudeTest(Base):
    __tablename__ = "aptitude_tests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)  # quantitative, logical, verbal, mixed
    companies = Column(JSON, nullable=False, default=list)
    duration_minutes = Column(Integer, nullable=False)
    passing_score = Column(Float, nullable=False, default=60)
    attempts = Column(Integer, nullable=False, default=0)
    average_score = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())


class AptitudeQuestion(Base):
    __tablename__ = "aptitude_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    test_id = Column(Uuid, ForeignKey("aptitude_tests.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer = Column(Integer, nullable=False)  # index dans options
    explanation = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=True)
    topic = Column(String(100), nullable=False)


class DsaProblem(Base):
    __tablename__ = "dsa_problems"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=False)
    pattern = Column(String(100), nullable=False)
    companies = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())


class AptitudeAttempt(Base):
    __tablename__ = "aptitude_attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    test_id = Column(Uuid, ForeignKey("aptitude_tests.id", ondelete="CASCADE"), nullable=False)
    score = Column(Float, nullable=False)
    correct = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    weak_areas = Column(JSON, nullable=False, default=list)
    submitted_at = Column(DateTime, server_default=func.now())


class DsaSubmission(Base):
    __tablename__ = "dsa_submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    problem_id = Column(Uuid, ForeignKey("dsa_problems.id", ondelete="CASCADE"), nullable=False)
    language = Column(String(30), nullable=True)
    status = Column(String(20), nullable=False)  # solved, attempted
    submitted_at = Column(DateTime, server_default=func.now())


class PracticeStat(Base):
    """
    Agrégat de progression d'un étudiant.
    Clé : (student_id, track, dimension, key) — ex. ("…", "dsa", "company", "Amazon").
    Pour la dimension `overall`, key vaut "".
    """
    __tablename__ = "practice_stats"

    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    track = Column(String(20), primary_key=True)  # aptitude, dsa
    dimension = Column(String(20), primary_key=True)  # overall, company, pattern
    key = Column(String(100), primary_key=True, default="")
    attempts = Column(Integer, nullable=False, default=0)
    successes = Column(Integer, nullable=False, default=0)
    score_total = Column(Float, nullable=False, default=0)

    @property
    def accuracy(self) -> float:
        if not self.attempts:
            return 0.0
        return round(self.successes / self.attempts * 100, 2)

    @property
    def average_score(self) -> float:
        if not self.attempts:
            return 0.0
        return round(self.score_total / self.attempts, 2)
