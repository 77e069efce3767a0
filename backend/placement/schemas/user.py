"""
Schémas Pydantic pour la gestion des comptes par l'administrateur.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from placement.models.user import ROLES


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    role = v.strip().lower()
    if role not in ROLES:
        raise ValueError("Invalid role. Must be student, teacher, tpo, or admin")
    return role


class StudentInfoInput(BaseModel):
    """Champs de la fiche étudiant fournis à la création / mise à jour."""
    guardian_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None


class StudentInfo(BaseModel):
    guardian_name: str
    phone: str
    date_of_birth: str

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    """Création manuelle d'un compte (POST /admin/users)."""
    name: str
    email: EmailStr
    role: str
    phone: Optional[str] = None
    department: Optional[str] = None
    date_of_birth: Optional[str] = None
    is_active: bool = True
    student_info: Optional[StudentInfoInput] = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name, email, and role are required")
        return v.strip()

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        return _check_role(v)


class UserUpdate(BaseModel):
    """Mise à jour partielle d'un compte (PUT /admin/users/{id})."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    date_of_birth: Optional[str] = None
    is_active: Optional[bool] = None
    student_info: Optional[StudentInfoInput] = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: Optional[str]) -> Optional[str]:
        return _check_role(v)


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    name: str
    first_name: str
    last_name: str
    phone: Optional[str]
    department: Optional[str]
    date_of_birth: Optional[str]
    is_active: bool
    created_at: Optional[datetime]
    student_info: Optional[StudentInfo] = None


class BulkDeleteRequest(BaseModel):
    ids: List[uuid.UUID] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int
    message: str


class DashboardStats(BaseModel):
    total_users: int
    students: int
    teachers: int
    tpos: int
    admins: int
    departments: int
