"""
Configuration partagée pour tous les tests.
Base SQLite en mémoire (une connexion partagée), recréée pour chaque test.
Les variables d'environnement doivent être posées avant l'import de l'application.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="placement-uploads-")
os.environ["STUDENT_EMAIL_DOMAIN"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import placement.models  # noqa: E402,F401
from placement.config import settings  # noqa: E402
from placement.database import Base, SessionLocal, engine  # noqa: E402
from placement.main import app  # noqa: E402
from placement.models.student import Student  # noqa: E402
from placement.models.user import User  # noqa: E402
from placement.security import create_access_token, hash_password  # noqa: E402


@pytest.fixture
def db():
    """Session SQLAlchemy sur une base vierge."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Dossier d'upload isolé par test."""
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(db, upload_dir):
    """Client HTTP de test branché sur la base SQLite du test."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    """Fabrique de comptes (avec fiche étudiant si role=student)."""

    def _make_user(email="user@college.edu", role="student", first_name="Test",
                   last_name="User", is_active=True, **student_fields) -> User:
        user = User(
            email=email,
            password_hash=hash_password("secret123"),
            role=role,
            first_name=first_name,
            last_name=last_name,
            phone="9876543210",
            department="CSE",
            date_of_birth="2002-01-15",
            is_active=is_active,
        )
        db.add(user)
        db.flush()
        if role == "student":
            db.add(Student(
                user_id=user.id,
                guardian_name=student_fields.get("guardian_name", "Father Name"),
                phone=student_fields.get("phone", "9876543210"),
                date_of_birth=student_fields.get("date_of_birth", "2002-01-15"),
            ))
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin_headers(make_user):
    admin = make_user(email="admin@college.edu", role="admin", first_name="Site", last_name="Admin")
    return auth_headers(admin)


@pytest.fixture
def headers_for():
    """Retourne la fonction auth_headers pour construire des en-têtes à la volée."""
    return auth_headers
