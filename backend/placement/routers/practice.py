"""
Router d'entraînement : tests d'aptitude et problèmes DSA.
Création réservée au personnel (enseignant, TPO, admin) ; soumissions réservées aux étudiants.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from placement.database import get_db
from placement.models.student import Student
from placement.schemas.practice import (
    AptitudeResult,
    AptitudeSubmission,
    AptitudeTestCreate,
    AptitudeTestDetail,
    AptitudeTestPage,
    DsaProblemCreate,
    DsaProblemResponse,
    DsaSubmissionCreate,
    DsaSubmissionResult,
    PracticeStatResponse,
)
from placement.security import get_current_student, get_current_user, require_staff
from placement.services import practice_service

router = APIRouter(
    prefix="/api/v1/practice",
    tags=["Entraînement"],
    dependencies=[Depends(get_current_user)],
)


def get_grader() -> practice_service.Grader:
    """Correcteur DSA utilisé par les soumissions (surchargé dans les tests)."""
    return practice_service.random_grader


# --- Aptitude ---

@router.post("/aptitude/tests", response_model=AptitudeTestDetail, status_code=201,
             summary="Créer un test d'aptitude", dependencies=[Depends(require_staff)])
def create_aptitude_test(data: AptitudeTestCreate, db: Session = Depends(get_db)):
    return practice_service.create_aptitude_test(db, data)


@router.get("/aptitude/tests", response_model=AptitudeTestPage, summary="Lister les tests d'aptitude")
def list_aptitude_tests(
    type: Optional[str] = None,
    company: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return practice_service.list_aptitude_tests(db, type, company, page, limit)


@router.get("/aptitude/tests/{test_id}", response_model=AptitudeTestDetail,
            summary="Détail d'un test (sans les réponses)")
def get_aptitude_test(test_id: uuid.UUID, db: Session = Depends(get_db)):
    test = practice_service.get_aptitude_test(db, test_id)
    if test is None:
        raise HTTPException(status_code=404, detail="Aptitude test not found")
    return test


@router.post("/aptitude/tests/{test_id}/submit", response_model=AptitudeResult,
             summary="Soumettre un test d'aptitude")
def submit_aptitude_test(
    test_id: uuid.UUID,
    data: AptitudeSubmission,
    student: Student = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    result = practice_service.submit_aptitude_test(db, student, test_id, data)
    if result is None:
        raise HTTPException(status_code=404, detail="Aptitude test not found")
    return result


# --- DSA ---

@router.post("/dsa/problems", response_model=DsaProblemResponse, status_code=201,
             summary="Créer un problème DSA", dependencies=[Depends(require_staff)])
def create_dsa_problem(data: DsaProblemCreate, db: Session = Depends(get_db)):
    return practice_service.create_dsa_problem(db, data)


@router.get("/dsa/problems", response_model=List[DsaProblemResponse], summary="Lister les problèmes DSA")
def list_dsa_problems(
    difficulty: Optional[str] = None,
    pattern: Optional[str] = None,
    company: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return practice_service.list_dsa_problems(db, difficulty, pattern, company)


@router.get("/dsa/problems/{problem_id}", response_model=DsaProblemResponse, summary="Détail d'un problème")
def get_dsa_problem(problem_id: uuid.UUID, db: Session = Depends(get_db)):
    problem = practice_service.get_dsa_problem(db, problem_id)
    if problem is None:
        raise HTTPException(status_code=404, detail="Problem not found")
    return problem


@router.post("/dsa/problems/{problem_id}/submit", response_model=DsaSubmissionResult,
             summary="Soumettre une solution")
def submit_dsa_solution(
    problem_id: uuid.UUID,
    data: DsaSubmissionCreate,
    student: Student = Depends(get_current_student),
    grader: practice_service.Grader = Depends(get_grader),
    db: Session = Depends(get_db),
):
    """La correction actuelle est un substitut : le code n'est pas exécuté."""
    result = practice_service.submit_dsa_solution(db, student, problem_id, data, grader)
    if result is None:
        raise HTTPException(status_code=404, detail="Problem not found")
    return result


# --- Progression ---

@router.get("/stats", response_model=List[PracticeStatResponse], summary="Progression de l'étudiant")
def get_stats(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    return practice_service.get_student_stats(db, student)
