"""
Router pour les départements (réservé aux administrateurs).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from placement.database import get_db
from placement.schemas.department import DepartmentCreate, DepartmentResponse, DepartmentUpdate
from placement.security import require_admin
from placement.services import department_service

router = APIRouter(
    prefix="/api/v1/admin/departments",
    tags=["Départements"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[DepartmentResponse], summary="Lister les départements")
def list_departments(db: Session = Depends(get_db)):
    return department_service.list_departments(db)


@router.post("", response_model=DepartmentResponse, status_code=201, summary="Créer un département")
def create_department(data: DepartmentCreate, db: Session = Depends(get_db)):
    try:
        return department_service.create_department(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{department_id}", response_model=DepartmentResponse, summary="Modifier un département")
def update_department(department_id: uuid.UUID, data: DepartmentUpdate, db: Session = Depends(get_db)):
    try:
        department = department_service.update_department(db, department_id, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if department is None:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


@router.delete("/{department_id}", status_code=204, summary="Supprimer un département")
def delete_department(department_id: uuid.UUID, db: Session = Depends(get_db)):
    if not department_service.delete_department(db, department_id):
        raise HTTPException(status_code=404, detail="Department not found")
