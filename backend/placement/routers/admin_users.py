"""
Router d'administration des comptes (réservé aux administrateurs).
POST   /api/v1/admin/users/upload       — import CSV (création ou mise à jour par email)
GET    /api/v1/admin/users              — liste
POST   /api/v1/admin/users              — création manuelle
POST   /api/v1/admin/users/bulk-delete  — suppression en lot
GET    /api/v1/admin/users/{id}         — détail
PUT    /api/v1/admin/users/{id}         — mise à jour
DELETE /api/v1/admin/users/{id}         — suppression
GET    /api/v1/admin/dashboard          — compteurs
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from placement.config import settings
from placement.database import get_db
from placement.schemas.account_import import AccountImportReport
from placement.schemas.user import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DashboardStats,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from placement.security import require_admin
from placement.services import upload_storage, user_service
from placement.services.account_import import (
    ImportFileError,
    import_accounts_csv,
    validate_category,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Administration"],
    dependencies=[Depends(require_admin)],
)

ALLOWED_CONTENT_TYPES = {"text/csv", "application/csv", "text/plain", "application/vnd.ms-excel"}


@router.post("/users/upload", response_model=AccountImportReport, summary="Importer des comptes via CSV")
async def upload_users(
    file: UploadFile = File(...),
    user_type: Optional[str] = Form("student", alias="userType"),
    db: Session = Depends(get_db),
):
    """
    Importe des comptes depuis un fichier CSV.

    Colonnes attendues :
    - `student` : `name`, `father_name`, `phone`, `date_of_birth`, `email` (+ `department`)
    - `teacher` / `tpo` : `name`, `phone`, `email` (+ `department`, `date_of_birth`)

    Les lignes invalides sont listées dans `errors` sans interrompre l'import.
    Le fichier uploadé est supprimé à la fin du traitement.
    """
    try:
        category = validate_category(user_type)
    except ImportFileError as e:
        logger.warning("Upload CSV refusé : catégorie %r invalide", user_type)
        raise HTTPException(status_code=400, detail=str(e))

    filename = file.filename or ""
    if file.content_type not in ALLOWED_CONTENT_TYPES and not filename.lower().endswith(".csv"):
        logger.warning("Upload CSV refusé : %s (%s) n'est pas un CSV", filename, file.content_type)
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    try:
        path = await upload_storage.save_upload(file, settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024)
    except upload_storage.UploadTooLargeError as e:
        logger.warning("Upload CSV refusé : %s dépasse %d Mo", filename, settings.MAX_UPLOAD_SIZE_MB)
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return import_accounts_csv(path, category, db)
    except ImportFileError as e:
        logger.warning("Fichier CSV illisible (%s) : %s", filename, e)
        raise HTTPException(status_code=400, detail=str(e))
    finally:
        upload_storage.discard(path)


@router.get("/users", response_model=List[UserResponse], summary="Lister les comptes")
def list_users(role: Optional[str] = None, db: Session = Depends(get_db)):
    return user_service.list_users(db, role)


@router.post("/users", response_model=UserResponse, status_code=201, summary="Créer un compte")
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    """Crée un compte ; le mot de passe initial est dérivé du prénom et de l'année de naissance."""
    try:
        return user_service.create_user(db, data)
    except user_service.DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/users/bulk-delete", response_model=BulkDeleteResponse, summary="Supprimer des comptes en lot")
def bulk_delete_users(data: BulkDeleteRequest, db: Session = Depends(get_db)):
    deleted = user_service.bulk_delete_users(db, data.ids)
    return BulkDeleteResponse(deleted=deleted, message=f"{deleted} users deleted successfully")


@router.get("/users/{user_id}", response_model=UserResponse, summary="Détail d'un compte")
def get_user(user_id: uuid.UUID, db: Session = Depends(get_db)):
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/users/{user_id}", response_model=UserResponse, summary="Modifier un compte")
def update_user(user_id: uuid.UUID, data: UserUpdate, db: Session = Depends(get_db)):
    """Met à jour les champs fournis. Les champs absents ne sont pas modifiés."""
    try:
        user = user_service.update_user(db, user_id, data)
    except user_service.DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/users/{user_id}", status_code=204, summary="Supprimer un compte")
def delete_user(user_id: uuid.UUID, db: Session = Depends(get_db)):
    """Suppression définitive du compte et de sa fiche étudiant."""
    if not user_service.delete_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/dashboard", response_model=DashboardStats, summary="Statistiques administrateur")
def dashboard(db: Session = Depends(get_db)):
    return user_service.dashboard_stats(db)
