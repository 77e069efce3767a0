"""
Router pour l'analyse ATS du CV (heuristique de substitution).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from placement.database import get_db
from placement.models.student import Student
from placement.schemas.resume import ResumeAnalysis, ResumeText
from placement.security import get_current_student
from placement.services import resume_service

router = APIRouter(prefix="/api/v1/resume", tags=["CV"])


@router.post("/ats-score", response_model=ResumeAnalysis, summary="Score ATS d'un CV")
def ats_score(
    data: ResumeText,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    """Analyse le texte du CV et mémorise le score sur la fiche étudiant."""
    return resume_service.analyze_resume(db, student, data.text)
