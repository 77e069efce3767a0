"""
Schémas Pydantic pour l'entraînement (tests d'aptitude, problèmes DSA, progression).
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from placement.models.practice import APTITUDE_TYPES, DIFFICULTIES


class AptitudeQuestionCreate(BaseModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: int
    explanation: Optional[str] = None
    difficulty: Optional[str] = None
    topic: str

    @field_validator("difficulty")
    @classmethod
    def valid_difficulty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in DIFFICULTIES:
            raise ValueError("difficulty must be easy, medium or hard")
        return v

    @model_validator(mode="after")
    def answer_in_options(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError("correct_answer must be the index of one of the options")
        return self


class AptitudeTestCreate(BaseModel):
    title: str
    description: Optional[str] = None
    type: str
    companies: List[str] = []
    duration_minutes: int = Field(..., gt=0)
    passing_score: float = Field(60, ge=0, le=100)
    questions: List[AptitudeQuestionCreate] = Field(..., min_length=1)

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in APTITUDE_TYPES:
            raise ValueError("type must be quantitative, logical, verbal or mixed")
        return v


class AptitudeQuestionPublic(BaseModel):
    """Question telle qu'envoyée à l'étudiant : jamais la bonne réponse."""
    id: uuid.UUID
    question: str
    options: List[str]
    difficulty: Optional[str]
    topic: str

    model_config = {"from_attributes": True}


class AptitudeTestSummary(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    type: str
    companies: List[str]
    duration_minutes: int
    total_questions: int
    passing_score: float
    attempts: int
    average_score: float


class AptitudeTestDetail(AptitudeTestSummary):
    questions: List[AptitudeQuestionPublic]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class AptitudeTestPage(BaseModel):
    tests: List[AptitudeTestSummary]
    pagination: Pagination


class AptitudeSubmission(BaseModel):
    answers: Dict[uuid.UUID, int]  # question_id → index de l'option choisie


class QuestionResult(BaseModel):
    question_id: uuid.UUID
    question: str
    user_answer: Optional[int]
    correct_answer: int
    is_correct: bool
    explanation: Optional[str]


class AptitudeResult(BaseModel):
    score: int
    correct: int
    total: int
    passed: bool
    results: List[QuestionResult]
    weak_areas: List[str]


class DsaProblemCreate(BaseModel):
    title: str
    description: Optional[str] = None
    difficulty: str
    pattern: str
    companies: List[str] = []

    @field_validator("difficulty")
    @classmethod
    def valid_difficulty(cls, v: str) -> str:
        if v not in DIFFICULTIES:
            raise ValueError("difficulty must be easy, medium or hard")
        return v


class DsaProblemResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    difficulty: str
    pattern: str
    companies: List[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class DsaSubmissionCreate(BaseModel):
    code: str
    language: str

    @field_validator("code")
    @classmethod
    def code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Code cannot be empty")
        return v


class DsaSubmissionResult(BaseModel):
    is_correct: bool
    status: str
    message: str


class PracticeStatResponse(BaseModel):
    track: str
    dimension: str
    key: str
    attempts: int
    successes: int
    accuracy: float
    average_score: float

    model_config = {"from_attributes": True}
