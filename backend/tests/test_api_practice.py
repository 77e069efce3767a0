"""
Tests API d'entraînement : contrôle des rôles et correction de bout en bout.
"""

import pytest

from placement.main import app
from placement.models.user import User
from placement.routers.practice import get_grader
from placement.security import hash_password

BASE = "/api/v1/practice"

APTITUDE_PAYLOAD = {
    "title": "Verbal Warmup",
    "type": "verbal",
    "companies": ["Accenture"],
    "duration_minutes": 15,
    "passing_score": 50,
    "questions": [
        {"question": "Synonym of rapid", "options": ["slow", "fast"], "correct_answer": 1,
         "topic": "synonyms", "explanation": "Rapid means fast."},
        {"question": "Antonym of ancient", "options": ["modern", "old"], "correct_answer": 0,
         "topic": "antonyms"},
    ],
}


@pytest.fixture
def teacher_headers(make_user, headers_for):
    return headers_for(make_user(email="teacher@college.edu", role="teacher"))


@pytest.fixture
def student_headers(make_user, headers_for):
    return headers_for(make_user(email="ana@college.edu", role="student"))


@pytest.fixture
def accept_everything():
    app.dependency_overrides[get_grader] = lambda: (lambda problem, code, language: True)
    yield
    app.dependency_overrides.pop(get_grader, None)


def test_creation_reservee_au_personnel(client, student_headers):
    response = client.post(f"{BASE}/aptitude/tests", headers=student_headers, json=APTITUDE_PAYLOAD)
    assert response.status_code == 403


def test_creation_reponse_hors_options_422(client, teacher_headers):
    payload = dict(APTITUDE_PAYLOAD)
    payload["questions"] = [
        {"question": "?", "options": ["a", "b"], "correct_answer": 2, "topic": "x"},
    ]
    response = client.post(f"{BASE}/aptitude/tests", headers=teacher_headers, json=payload)
    assert response.status_code == 422


def test_parcours_aptitude(client, teacher_headers, student_headers):
    created = client.post(f"{BASE}/aptitude/tests", headers=teacher_headers, json=APTITUDE_PAYLOAD)
    assert created.status_code == 201
    test_id = created.json()["id"]

    detail = client.get(f"{BASE}/aptitude/tests/{test_id}", headers=student_headers).json()
    assert all("correct_answer" not in q for q in detail["questions"])
    q1, q2 = (q["id"] for q in detail["questions"])

    result = client.post(
        f"{BASE}/aptitude/tests/{test_id}/submit",
        headers=student_headers,
        json={"answers": {q1: 1, q2: 1}},
    )

    assert result.status_code == 200
    body = result.json()
    assert body["score"] == 50
    assert body["passed"] is True
    assert body["weak_areas"] == ["antonyms"]
    assert body["results"][0]["explanation"] == "Rapid means fast."

    listing = client.get(f"{BASE}/aptitude/tests", params={"company": "Accenture"},
                         headers=student_headers).json()
    assert listing["tests"][0]["attempts"] == 1
    assert listing["pagination"]["total"] == 1


def test_soumission_reservee_aux_etudiants(client, teacher_headers):
    test_id = client.post(f"{BASE}/aptitude/tests", headers=teacher_headers, json=APTITUDE_PAYLOAD).json()["id"]

    response = client.post(f"{BASE}/aptitude/tests/{test_id}/submit", headers=teacher_headers,
                           json={"answers": {}})

    assert response.status_code == 403


def test_etudiant_sans_fiche_404(client, db, teacher_headers, headers_for):
    orphan = User(email="orphan@college.edu", password_hash=hash_password("secret123"),
                  role="student", first_name="Orphan", last_name="")
    db.add(orphan)
    db.commit()
    test_id = client.post(f"{BASE}/aptitude/tests", headers=teacher_headers, json=APTITUDE_PAYLOAD).json()["id"]

    response = client.post(f"{BASE}/aptitude/tests/{test_id}/submit", headers=headers_for(orphan),
                           json={"answers": {}})

    assert response.status_code == 404
    assert response.json()["detail"] == "Student profile not found"


def test_parcours_dsa_et_progression(client, teacher_headers, student_headers, accept_everything):
    problem = client.post(f"{BASE}/dsa/problems", headers=teacher_headers, json={
        "title": "Valid Parentheses", "difficulty": "easy", "pattern": "stack", "companies": ["Microsoft"],
    })
    assert problem.status_code == 201
    problem_id = problem.json()["id"]

    result = client.post(f"{BASE}/dsa/problems/{problem_id}/submit", headers=student_headers,
                         json={"code": "def is_valid(s): ...", "language": "python"})

    assert result.json() == {"is_correct": True, "status": "solved", "message": "Solution accepted!"}

    stats = client.get(f"{BASE}/stats", headers=student_headers).json()
    by_key = {(s["track"], s["dimension"], s["key"]): s for s in stats}
    assert by_key[("dsa", "pattern", "stack")]["accuracy"] == 100
    assert by_key[("dsa", "company", "Microsoft")]["attempts"] == 1


def test_code_vide_422(client, teacher_headers, student_headers):
    problem_id = client.post(f"{BASE}/dsa/problems", headers=teacher_headers, json={
        "title": "Two Sum", "difficulty": "easy", "pattern": "hashing",
    }).json()["id"]

    response = client.post(f"{BASE}/dsa/problems/{problem_id}/submit", headers=student_headers,
                           json={"code": "   ", "language": "python"})

    assert response.status_code == 422


def test_sans_jeton_401(client):
    assert client.get(f"{BASE}/dsa/problems").status_code == 401
