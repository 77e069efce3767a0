"""
Authentification : hachage des mots de passe (bcrypt) et vérification des JWT.

L'émission de jetons côté HTTP (login) est gérée hors de cette API ;
create_access_token sert à l'outillage opérateur (CLI) et aux tests.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from placement.config import settings
from placement.database import get_db
from placement.models.student import Student
from placement.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# auto_error=False : on renvoie nous-mêmes un 401 (HTTPBearer renverrait 403)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def default_password(first_name: str, date_of_birth: Optional[str]) -> str:
    """
    Mot de passe initial d'un compte créé manuellement par un admin :
    4 premières lettres du prénom en majuscules (complétées par des espaces)
    suivies de l'année de naissance, ou 0000 si inconnue.

    >>> default_password("Ana", "2003-05-14")
    'ANA 2003'
    """
    name_part = first_name[:4].upper().ljust(4)
    year = "0000"
    if date_of_birth:
        year = date_of_birth.split("-")[0] or "0000"
    return name_part + year


def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Dépendance FastAPI — résout le compte porteur du jeton Bearer."""
    if credentials is None:
        raise _credentials_exception("Not authorized to access this route")

    try:
        payload = jwt.decode(
            credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise _credentials_exception("Not authorized, token failed")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _credentials_exception("User not found or inactive")
    return user


def require_roles(*roles: str):
    """Fabrique une dépendance qui n'accepte que les rôles donnés (403 sinon)."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning("Accès refusé : rôle %s sur une route %s", user.role, roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role '{user.role}' is not authorized to access this route",
            )
        return user

    return dependency


require_admin = require_roles("admin")
require_staff = require_roles("teacher", "tpo", "admin")
require_student = require_roles("student")


def get_current_student(
    user: User = Depends(require_student), db: Session = Depends(get_db)
) -> Student:
    """Dépendance FastAPI — fiche étudiant du compte connecté (404 si absente)."""
    student = db.execute(
        select(Student).where(Student.user_id == user.id)
    ).scalar_one_or_none()
    if student is None:
        raise HTTPException(status_code=404, detail="Student profile not found")
    return student
