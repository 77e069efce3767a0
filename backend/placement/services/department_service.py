"""
Service métier pour les départements académiques.
"""

import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from placement.models.department import Department
from placement.schemas.department import DepartmentCreate, DepartmentUpdate


def _name_taken(db: Session, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    """Unicité insensible à la casse."""
    query = select(Department.id).where(func.lower(Department.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    return db.execute(query).scalar() is not None


def list_departments(db: Session) -> List[Department]:
    return db.execute(
        select(Department).order_by(Department.created_at.desc(), Department.name)
    ).scalars().all()


def create_department(db: Session, data: DepartmentCreate) -> Department:
    """Lève une ValueError si le nom existe déjà."""
    if _name_taken(db, data.name):
        raise ValueError("Department already exists")

    department = Department(name=data.name, is_active=True)
    db.add(department)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Department already exists")
    db.refresh(department)
    return department


def update_department(
    db: Session, department_id: uuid.UUID, data: DepartmentUpdate
) -> Optional[Department]:
    department = db.get(Department, department_id)
    if department is None:
        return None

    if data.name is not None and _name_taken(db, data.name, exclude_id=department_id):
        raise ValueError("Department already exists")

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(department, field, value)

    db.commit()
    db.refresh(department)
    return department


def delete_department(db: Session, department_id: uuid.UUID) -> bool:
    department = db.get(Department, department_id)
    if department is None:
        return False
    db.delete(department)
    db.commit()
    return True
