"""
Service d'entraînement : tests d'aptitude (notation réelle) et problèmes DSA.

Les agrégats par entreprise / pattern sont tenus dans practice_stats, une ligne
par (étudiant, piste, dimension, clé).

La correction des soumissions DSA passe par un « grader » injectable. Le grader
par défaut est un substitut aléatoire : il n'exécute pas le code.
"""

import logging
import math
import random
import uuid
from typing import Callable, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from placement.models.practice import (
    AptitudeAttempt,
    AptitudeQuestion,
    AptitudeTest,
    DsaProblem,
    DsaSubmission,
    PracticeStat,
)
from placement.models.student import Student
from placement.schemas.practice import (
    AptitudeQuestionPublic,
    AptitudeResult,
    AptitudeSubmission,
    AptitudeTestCreate,
    AptitudeTestDetail,
    AptitudeTestPage,
    AptitudeTestSummary,
    DsaProblemCreate,
    DsaSubmissionCreate,
    DsaSubmissionResult,
    Pagination,
    QuestionResult,
)

logger = logging.getLogger(__name__)

Grader = Callable[[DsaProblem, str, str], bool]

RANDOM_ACCEPT_RATE = 0.7


def random_grader(problem: DsaProblem, code: str, language: str) -> bool:
    """Substitut de correction : accepte ~70 % des soumissions sans exécuter le code."""
    return random.random() < RANDOM_ACCEPT_RATE


# --- Agrégats ---

def _bump_stat(
    db: Session,
    student_id: uuid.UUID,
    track: str,
    dimension: str,
    key: str,
    success: bool,
    score: float = 0,
) -> None:
    stat = db.get(PracticeStat, (student_id, track, dimension, key))
    if stat is None:
        stat = PracticeStat(
            student_id=student_id, track=track, dimension=dimension, key=key,
            attempts=0, successes=0, score_total=0,
        )
        db.add(stat)
    stat.attempts += 1
    stat.successes += int(success)
    stat.score_total += score


def _unique(values: Iterable[str]) -> List[str]:
    """Dédoublonne en conservant l'ordre (une même clé ne doit être incrémentée qu'une fois)."""
    return list(dict.fromkeys(v for v in values if v))


def get_student_stats(db: Session, student: Student) -> List[PracticeStat]:
    return db.execute(
        select(PracticeStat)
        .where(PracticeStat.student_id == student.id)
        .order_by(PracticeStat.track, PracticeStat.dimension, PracticeStat.key)
    ).scalars().all()


# --- Tests d'aptitude ---

def _questions_of(db: Session, test_id: uuid.UUID) -> List[AptitudeQuestion]:
    return db.execute(
        select(AptitudeQuestion)
        .where(AptitudeQuestion.test_id == test_id)
        .order_by(AptitudeQuestion.position)
    ).scalars().all()


def _summary(test: AptitudeTest, total_questions: int) -> AptitudeTestSummary:
    return AptitudeTestSummary(
        id=test.id,
        title=test.title,
        description=test.description,
        type=test.type,
        companies=test.companies or [],
        duration_minutes=test.duration_minutes,
        total_questions=total_questions,
        passing_score=test.passing_score,
        attempts=test.attempts,
        average_score=round(test.average_score, 2),
    )


def create_aptitude_test(db: Session, data: AptitudeTestCreate) -> AptitudeTestDetail:
    test = AptitudeTest(
        title=data.title,
        description=data.description,
        type=data.type,
        companies=_unique(data.companies),
        duration_minutes=data.duration_minutes,
        passing_score=data.passing_score,
        attempts=0,
        average_score=0,
    )
    db.add(test)
    db.flush()

    for position, q in enumerate(data.questions):
        db.add(AptitudeQuestion(
            test_id=test.id,
            position=position,
            question=q.question,
            options=q.options,
            correct_answer=q.correct_answer,
            explanation=q.explanation,
            difficulty=q.difficulty,
            topic=q.topic,
        ))
    db.commit()
    logger.info("Test d'aptitude créé : %s (%d questions)", test.title, len(data.questions))
    return get_aptitude_test(db, test.id)


def list_aptitude_tests(
    db: Session,
    type: Optional[str] = None,
    company: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> AptitudeTestPage:
    """Liste paginée ; le filtre entreprise s'applique sur la liste JSON des entreprises."""
    query = select(AptitudeTest).order_by(AptitudeTest.created_at.desc())
    if type:
        query = query.where(AptitudeTest.type == type)
    tests = db.execute(query).scalars().all()
    if company:
        tests = [t for t in tests if company in (t.companies or [])]

    total = len(tests)
    start = (page - 1) * limit
    page_tests = tests[start:start + limit]

    return AptitudeTestPage(
        tests=[_summary(t, len(_questions_of(db, t.id))) for t in page_tests],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


def get_aptitude_test(db: Session, test_id: uuid.UUID) -> Optional[AptitudeTestDetail]:
    """Détail d'un test sans les bonnes réponses, ou None si inexistant."""
    test = db.get(AptitudeTest, test_id)
    if test is None:
        return None
    questions = _questions_of(db, test.id)
    return AptitudeTestDetail(
        **_summary(test, len(questions)).model_dump(),
        questions=[AptitudeQuestionPublic.model_validate(q) for q in questions],
    )


def submit_aptitude_test(
    db: Session, student: Student, test_id: uuid.UUID, submission: AptitudeSubmission
) -> Optional[AptitudeResult]:
    """
    Corrige une tentative : score = bonnes réponses / nombre de questions × 100.
    Met à jour la moyenne du test et les agrégats de l'étudiant (global + par entreprise).
    Retourne None si le test n'existe pas.
    """
    test = db.get(AptitudeTest, test_id)
    if test is None:
        return None

    questions = _questions_of(db, test.id)
    results = []
    weak_areas = []
    for q in questions:
        user_answer = submission.answers.get(q.id)
        is_correct = user_answer == q.correct_answer
        if not is_correct and q.topic not in weak_areas:
            weak_areas.append(q.topic)
        results.append(QuestionResult(
            question_id=q.id,
            question=q.question,
            user_answer=user_answer,
            correct_answer=q.correct_answer,
            is_correct=is_correct,
            explanation=q.explanation,
        ))

    correct = sum(1 for r in results if r.is_correct)
    total = len(questions)
    score = correct / total * 100 if total else 0.0
    passed = score >= test.passing_score

    db.add(AptitudeAttempt(
        student_id=student.id,
        test_id=test.id,
        score=score,
        correct=correct,
        total=total,
        passed=passed,
        weak_areas=weak_areas,
    ))

    test.average_score = (test.average_score * test.attempts + score) / (test.attempts + 1)
    test.attempts += 1

    _bump_stat(db, student.id, "aptitude", "overall", "", passed, score)
    for company in _unique(test.companies or []):
        _bump_stat(db, student.id, "aptitude", "company", company, passed, score)

    db.commit()
    logger.info("Test %s soumis par l'étudiant %s : %.1f%%", test.id, student.id, score)

    return AptitudeResult(
        score=round(score),
        correct=correct,
        total=total,
        passed=passed,
        results=results,
        weak_areas=weak_areas,
    )


# --- Problèmes DSA ---

def create_dsa_problem(db: Session, data: DsaProblemCreate) -> DsaProblem:
    problem = DsaProblem(
        title=data.title,
        description=data.description,
        difficulty=data.difficulty,
        pattern=data.pattern,
        companies=_unique(data.companies),
    )
    db.add(problem)
    db.commit()
    db.refresh(problem)
    return problem


def list_dsa_problems(
    db: Session,
    difficulty: Optional[str] = None,
    pattern: Optional[str] = None,
    company: Optional[str] = None,
) -> List[DsaProblem]:
    query = select(DsaProblem).order_by(DsaProblem.created_at.desc())
    if difficulty:
        query = query.where(DsaProblem.difficulty == difficulty)
    if pattern:
        query = query.where(DsaProblem.pattern == pattern)
    problems = db.execute(query).scalars().all()
    if company:
        problems = [p for p in problems if company in (p.companies or [])]
    return problems


def get_dsa_problem(db: Session, problem_id: uuid.UUID) -> Optional[DsaProblem]:
    return db.get(DsaProblem, problem_id)


def submit_dsa_solution(
    db: Session,
    student: Student,
    problem_id: uuid.UUID,
    data: DsaSubmissionCreate,
    grader: Grader = random_grader,
) -> Optional[DsaSubmissionResult]:
    """
    Enregistre une soumission et met à jour les agrégats (global, entreprises, pattern).
    Retourne None si le problème n'existe pas.
    """
    problem = db.get(DsaProblem, problem_id)
    if problem is None:
        return None

    is_correct = bool(grader(problem, data.code, data.language))
    status = "solved" if is_correct else "attempted"

    db.add(DsaSubmission(
        student_id=student.id,
        problem_id=problem.id,
        language=data.language,
        status=status,
    ))

    _bump_stat(db, student.id, "dsa", "overall", "", is_correct)
    for company in _unique(problem.companies or []):
        _bump_stat(db, student.id, "dsa", "company", company, is_correct)
    _bump_stat(db, student.id, "dsa", "pattern", problem.pattern, is_correct)

    db.commit()

    return DsaSubmissionResult(
        is_correct=is_correct,
        status=status,
        message="Solution accepted!" if is_correct else "Solution incorrect. Try again!",
    )
