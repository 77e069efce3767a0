"""
Schémas Pydantic pour l'analyse ATS d'un CV.
"""

from typing import List

from pydantic import BaseModel, field_validator


class ResumeText(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Resume text cannot be empty")
        return v


class ResumeAnalysis(BaseModel):
    ats_score: int
    readability_score: int
    keywords: List[str]
    missing_keywords: List[str]
    suggestions: List[str]
