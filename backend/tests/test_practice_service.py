"""
Tests unitaires du service d'entraînement (correction des tests d'aptitude,
soumissions DSA, agrégats de progression).
"""

import uuid

import pytest
from sqlalchemy import select

from placement.models.practice import AptitudeAttempt, DsaSubmission, PracticeStat
from placement.models.student import Student
from placement.schemas.practice import (
    AptitudeSubmission,
    AptitudeTestCreate,
    DsaProblemCreate,
    DsaSubmissionCreate,
)
from placement.services import practice_service


@pytest.fixture
def student(make_user, db):
    user = make_user(email="ana@college.edu", role="student")
    return db.execute(select(Student).where(Student.user_id == user.id)).scalar_one()


@pytest.fixture
def aptitude_test(db):
    data = AptitudeTestCreate(
        title="Quant Basics",
        type="quantitative",
        companies=["TCS", "Infosys", "TCS"],
        duration_minutes=30,
        passing_score=60,
        questions=[
            {"question": "2 + 2 ?", "options": ["3", "4"], "correct_answer": 1, "topic": "arithmetic"},
            {"question": "10 % of 50 ?", "options": ["5", "10"], "correct_answer": 0, "topic": "percentages"},
            {"question": "3 × 3 ?", "options": ["6", "9", "12"], "correct_answer": 1, "topic": "arithmetic"},
        ],
    )
    return practice_service.create_aptitude_test(db, data)


def _stats(db, student):
    return {
        (s.track, s.dimension, s.key): s
        for s in practice_service.get_student_stats(db, student)
    }


# ============================================================
# Tests d'aptitude
# ============================================================

def test_creation_dedoublonne_les_entreprises(aptitude_test):
    assert aptitude_test.companies == ["TCS", "Infosys"]
    assert aptitude_test.total_questions == 3
    assert [q.question for q in aptitude_test.questions] == ["2 + 2 ?", "10 % of 50 ?", "3 × 3 ?"]


def test_detail_sans_bonnes_reponses(aptitude_test):
    question = aptitude_test.questions[0].model_dump()
    assert "correct_answer" not in question
    assert "explanation" not in question


def test_correction_score_et_points_faibles(db, student, aptitude_test):
    q1, q2, q3 = aptitude_test.questions
    submission = AptitudeSubmission(answers={q1.id: 1, q2.id: 1, q3.id: 1})

    result = practice_service.submit_aptitude_test(db, student, aptitude_test.id, submission)

    assert result.correct == 2
    assert result.total == 3
    assert result.score == 67
    assert result.passed is True
    assert result.weak_areas == ["percentages"]
    assert [r.is_correct for r in result.results] == [True, False, True]


def test_question_sans_reponse_comptee_fausse(db, student, aptitude_test):
    q1 = aptitude_test.questions[0]

    result = practice_service.submit_aptitude_test(
        db, student, aptitude_test.id, AptitudeSubmission(answers={q1.id: 1})
    )

    assert result.correct == 1
    assert result.passed is False
    assert result.results[1].user_answer is None
    assert result.weak_areas == ["percentages", "arithmetic"]


def test_moyenne_du_test_mise_a_jour(db, student, aptitude_test):
    q1, q2, q3 = aptitude_test.questions
    all_right = AptitudeSubmission(answers={q1.id: 1, q2.id: 0, q3.id: 1})
    all_wrong = AptitudeSubmission(answers={q1.id: 0, q2.id: 1, q3.id: 0})

    practice_service.submit_aptitude_test(db, student, aptitude_test.id, all_right)
    practice_service.submit_aptitude_test(db, student, aptitude_test.id, all_wrong)

    detail = practice_service.get_aptitude_test(db, aptitude_test.id)
    assert detail.attempts == 2
    assert detail.average_score == 50
    assert len(db.execute(select(AptitudeAttempt)).scalars().all()) == 2


def test_agregats_aptitude_par_entreprise(db, student, aptitude_test):
    q1, q2, q3 = aptitude_test.questions
    practice_service.submit_aptitude_test(
        db, student, aptitude_test.id, AptitudeSubmission(answers={q1.id: 1, q2.id: 0, q3.id: 1})
    )

    stats = _stats(db, student)

    assert set(stats) == {
        ("aptitude", "overall", ""),
        ("aptitude", "company", "TCS"),
        ("aptitude", "company", "Infosys"),
    }
    tcs = stats[("aptitude", "company", "TCS")]
    assert tcs.attempts == 1
    assert tcs.successes == 1
    assert tcs.average_score == 100


def test_test_inexistant(db, student):
    assert practice_service.get_aptitude_test(db, uuid.uuid4()) is None
    assert practice_service.submit_aptitude_test(
        db, student, uuid.uuid4(), AptitudeSubmission(answers={})
    ) is None


def test_liste_filtres_et_pagination(db, aptitude_test):
    practice_service.create_aptitude_test(db, AptitudeTestCreate(
        title="Logic",
        type="logical",
        companies=["Wipro"],
        duration_minutes=20,
        questions=[{"question": "?", "options": ["a", "b"], "correct_answer": 0, "topic": "series"}],
    ))

    assert practice_service.list_aptitude_tests(db).pagination.total == 2
    assert [t.title for t in practice_service.list_aptitude_tests(db, type="logical").tests] == ["Logic"]
    assert [t.title for t in practice_service.list_aptitude_tests(db, company="TCS").tests] == ["Quant Basics"]

    page = practice_service.list_aptitude_tests(db, page=2, limit=1)
    assert len(page.tests) == 1
    assert page.pagination.pages == 2


# ============================================================
# Problèmes DSA
# ============================================================

@pytest.fixture
def problem(db):
    return practice_service.create_dsa_problem(db, DsaProblemCreate(
        title="Two Sum",
        difficulty="easy",
        pattern="hashing",
        companies=["Amazon", "Google"],
    ))


def test_soumission_acceptee(db, student, problem):
    result = practice_service.submit_dsa_solution(
        db, student, problem.id,
        DsaSubmissionCreate(code="def two_sum(): ...", language="python"),
        grader=lambda p, code, language: True,
    )

    assert result.is_correct is True
    assert result.status == "solved"
    assert result.message == "Solution accepted!"

    stats = _stats(db, student)
    assert set(stats) == {
        ("dsa", "overall", ""),
        ("dsa", "company", "Amazon"),
        ("dsa", "company", "Google"),
        ("dsa", "pattern", "hashing"),
    }
    assert stats[("dsa", "pattern", "hashing")].accuracy == 100


def test_soumission_refusee_puis_acceptee(db, student, problem):
    code = DsaSubmissionCreate(code="print(1)", language="python")
    practice_service.submit_dsa_solution(db, student, problem.id, code, grader=lambda *a: False)
    practice_service.submit_dsa_solution(db, student, problem.id, code, grader=lambda *a: True)

    overall = _stats(db, student)[("dsa", "overall", "")]
    assert overall.attempts == 2
    assert overall.successes == 1
    assert overall.accuracy == 50

    statuses = db.execute(select(DsaSubmission.status)).scalars().all()
    assert sorted(statuses) == ["attempted", "solved"]


def test_probleme_inexistant(db, student):
    result = practice_service.submit_dsa_solution(
        db, student, uuid.uuid4(), DsaSubmissionCreate(code="x", language="python"),
        grader=lambda *a: True,
    )
    assert result is None
    assert db.execute(select(PracticeStat)).scalars().all() == []


def test_liste_dsa_filtres(db, problem):
    practice_service.create_dsa_problem(db, DsaProblemCreate(
        title="LRU Cache", difficulty="medium", pattern="design", companies=["Amazon"],
    ))

    assert {p.title for p in practice_service.list_dsa_problems(db, company="Amazon")} == {"Two Sum", "LRU Cache"}
    assert [p.title for p in practice_service.list_dsa_problems(db, difficulty="medium")] == ["LRU Cache"]
    assert [p.title for p in practice_service.list_dsa_problems(db, pattern="hashing")] == ["Two Sum"]
    assert practice_service.list_dsa_problems(db, company="Google")[0].title == "Two Sum"


def test_grader_par_defaut_ne_depend_que_du_tirage(monkeypatch, problem):
    monkeypatch.setattr(practice_service.random, "random", lambda: 0.1)
    assert practice_service.random_grader(problem, "", "python") is True
    monkeypatch.setattr(practice_service.random, "random", lambda: 0.9)
    assert practice_service.random_grader(problem, "", "python") is False
