"""
Service métier pour la gestion des comptes par l'administrateur :
liste, détail, création manuelle, mise à jour, suppression (unitaire et en lot).

La fiche étudiant suit toujours son compte : créée avec lui, supprimée explicitement
avant lui lors d'une suppression.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from placement.config import settings
from placement.models.department import Department
from placement.models.student import Student
from placement.models.user import User
from placement.schemas.user import (
    DashboardStats,
    StudentInfo,
    StudentInfoInput,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from placement.security import default_password, hash_password
from placement.services.account_fields import (
    is_valid_phone,
    normalize_email,
    optional_date_of_birth,
    split_full_name,
)

logger = logging.getLogger(__name__)


class DuplicateEmailError(ValueError):
    """Un compte existe déjà avec cet email."""


def _to_response(user: User, student: Optional[Student] = None) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        name=user.full_name,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        department=user.department,
        date_of_birth=user.date_of_birth,
        is_active=user.is_active,
        created_at=user.created_at,
        student_info=StudentInfo.model_validate(student) if student is not None else None,
    )


def _student_of(db: Session, user_id: uuid.UUID) -> Optional[Student]:
    return db.execute(
        select(Student).where(Student.user_id == user_id)
    ).scalar_one_or_none()


def _check_contact_fields(email: str, role: str, phone: Optional[str]) -> None:
    """Format de l'email vérifié par EmailStr ; reste le domaine imposé aux étudiants et le téléphone."""
    domain = settings.STUDENT_EMAIL_DOMAIN
    if role == "student" and domain and not email.endswith("@" + domain.lower()):
        raise ValueError(f"Invalid email format for student ({email}). Must end with @{domain}")
    if phone and not is_valid_phone(phone):
        raise ValueError(f"Invalid phone number format ({phone}) - must be at least 7 digits")


def _upsert_student(
    db: Session, user: User, info: Optional[StudentInfoInput]
) -> None:
    """Crée ou met à jour la fiche étudiant ; les champs absents reprennent ceux du compte."""
    info = info or StudentInfoInput()
    dob = optional_date_of_birth(info.date_of_birth) or user.date_of_birth
    student = _student_of(db, user.id)

    if student is None:
        if dob is None:
            raise ValueError("Date of birth is required for a student profile")
        db.add(Student(
            user_id=user.id,
            guardian_name=info.guardian_name or "",
            phone=info.phone or user.phone or "",
            date_of_birth=dob,
        ))
        return

    if info.guardian_name is not None:
        student.guardian_name = info.guardian_name
    if info.phone or user.phone:
        student.phone = info.phone or user.phone
    student.date_of_birth = dob or student.date_of_birth


def list_users(db: Session, role: Optional[str] = None) -> List[UserResponse]:
    """Retourne les comptes (les plus récents d'abord), avec la fiche étudiant le cas échéant."""
    query = select(User).order_by(User.created_at.desc())
    if role:
        query = query.where(User.role == role)
    users = db.execute(query).scalars().all()

    # Une seule requête pour toutes les fiches étudiant
    student_ids = [u.id for u in users if u.role == "student"]
    students: Dict[uuid.UUID, Student] = {}
    if student_ids:
        rows = db.execute(
            select(Student).where(Student.user_id.in_(student_ids))
        ).scalars().all()
        students = {s.user_id: s for s in rows}

    return [_to_response(u, students.get(u.id)) for u in users]


def get_user(db: Session, user_id: uuid.UUID) -> Optional[UserResponse]:
    user = db.get(User, user_id)
    if user is None:
        return None
    student = _student_of(db, user.id) if user.role == "student" else None
    return _to_response(user, student)


def create_user(db: Session, data: UserCreate) -> UserResponse:
    """
    Crée un compte manuellement.
    Le mot de passe initial est dérivé du prénom et de l'année de naissance.
    Lève DuplicateEmailError si l'email existe déjà, ValueError si un champ est invalide.
    """
    email = normalize_email(data.email)
    _check_contact_fields(email, data.role, data.phone)
    date_of_birth = optional_date_of_birth(data.date_of_birth)

    if db.execute(select(User.id).where(User.email == email)).scalar() is not None:
        raise DuplicateEmailError(f"User with email {email} already exists")

    first_name, last_name = split_full_name(data.name)
    user = User(
        email=email,
        password_hash=hash_password(default_password(first_name, date_of_birth)),
        role=data.role,
        first_name=first_name,
        last_name=last_name,
        phone=data.phone or "",
        department=data.department or "",
        date_of_birth=date_of_birth,
        is_active=data.is_active,
    )
    db.add(user)
    try:
        db.flush()
        if data.role == "student":
            _upsert_student(db, user, data.student_info)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmailError(f"User with email {email} already exists")
    except ValueError:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("Compte créé : %s (%s)", user.email, user.role)
    return get_user(db, user.id)


def update_user(db: Session, user_id: uuid.UUID, data: UserUpdate) -> Optional[UserResponse]:
    """Met à jour les champs fournis. Retourne None si le compte n'existe pas."""
    user = db.get(User, user_id)
    if user is None:
        return None

    update_data = data.model_dump(exclude_unset=True, exclude={"name", "student_info"})
    # email, role et is_active ne peuvent pas être effacés : null vaut « inchangé »
    for field in ("email", "role", "is_active"):
        if field in update_data and update_data[field] is None:
            del update_data[field]
    if "email" in update_data:
        update_data["email"] = normalize_email(update_data["email"])
    if "date_of_birth" in update_data:
        update_data["date_of_birth"] = optional_date_of_birth(update_data["date_of_birth"])

    role = update_data.get("role") or user.role
    _check_contact_fields(update_data.get("email", user.email), role, update_data.get("phone"))

    for field, value in update_data.items():
        setattr(user, field, value)

    if data.name is not None:
        user.first_name, user.last_name = split_full_name(data.name)

    try:
        # Un compte étudiant doit toujours avoir sa fiche
        if user.role == "student" and (
            data.student_info is not None or _student_of(db, user.id) is None
        ):
            _upsert_student(db, user, data.student_info)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmailError(f"User with email {user.email} already exists")
    except ValueError:
        db.rollback()
        raise

    return get_user(db, user.id)


def delete_user(db: Session, user_id: uuid.UUID) -> bool:
    """Suppression définitive. Retourne True si supprimé, False si introuvable."""
    user = db.get(User, user_id)
    if user is None:
        return False

    db.execute(delete(Student).where(Student.user_id == user.id))
    db.delete(user)
    db.commit()
    logger.info("Compte supprimé : %s", user_id)
    return True


def bulk_delete_users(db: Session, user_ids: List[uuid.UUID]) -> int:
    """Supprime un lot de comptes et leurs fiches étudiant. Retourne le nombre supprimé."""
    existing = db.execute(
        select(User.id).where(User.id.in_(user_ids))
    ).scalars().all()
    if not existing:
        return 0

    db.execute(delete(Student).where(Student.user_id.in_(existing)))
    db.execute(delete(User).where(User.id.in_(existing)))
    db.commit()
    logger.info("Suppression en lot : %d compte(s)", len(existing))
    return len(existing)


def dashboard_stats(db: Session) -> DashboardStats:
    """Compteurs du tableau de bord administrateur."""
    counts = dict(
        db.execute(select(User.role, func.count()).group_by(User.role)).all()
    )
    departments = db.execute(select(func.count()).select_from(Department)).scalar() or 0
    return DashboardStats(
        total_users=sum(counts.values()),
        students=counts.get("student", 0),
        teachers=counts.get("teacher", 0),
        tpos=counts.get("tpo", 0),
        admins=counts.get("admin", 0),
        departments=departments,
    )
