"""
Service d'import CSV des comptes (étudiants, enseignants, TPO).

Chaque ligne est validée puis réconciliée par email : compte existant → mise à jour,
sinon création. Pour la catégorie `student`, la fiche étudiant liée est créée ou
mise à jour dans la même transaction que le compte.

Une ligne invalide ou en échec n'interrompt jamais le lot : l'erreur est ajoutée
au rapport et le traitement continue. Seules les erreurs de fichier
(catégorie invalide, fichier illisible) sont fatales.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from placement.config import settings
from placement.models.student import Student
from placement.models.user import User
from placement.schemas.account_import import AccountImportReport, AccountImportRow
from placement.security import hash_password
from placement.services.account_fields import (
    is_valid_email,
    is_valid_phone,
    normalize_date_of_birth,
    normalize_email,
    split_full_name,
)

logger = logging.getLogger(__name__)

IMPORT_CATEGORIES = ("student", "teacher", "tpo")

REQUIRED_COLUMNS: Dict[str, List[str]] = {
    "student": ["name", "father_name", "phone", "date_of_birth", "email"],
    "teacher": ["name", "phone", "email"],
    "tpo": ["name", "phone", "email"],
}

# Variantes d'en-têtes rencontrées dans les exports (après normalisation)
COLUMN_ALIASES = {
    "full_name": "name",
    "student_name": "name",
    "fathers_name": "father_name",
    "guardian_name": "father_name",
    "dob": "date_of_birth",
    "birth_date": "date_of_birth",
    "mobile": "phone",
    "phone_number": "phone",
    "email_address": "email",
    "dept": "department",
}


class ImportFileError(ValueError):
    """Erreur fatale au niveau du fichier : aucune ligne n'est traitée."""


class InvalidCategoryError(ImportFileError):
    pass


class UnreadableFileError(ImportFileError):
    pass


def _normalize_header(raw: str) -> str:
    """Normalise un nom de colonne : minuscules, espaces → underscores, alias résolus."""
    key = "_".join(raw.strip().lower().replace("-", " ").split())
    return COLUMN_ALIASES.get(key, key)


def _detect_separator(sample: str) -> str:
    """Détecte le séparateur CSV (virgule ou point-virgule)."""
    if sample.count(";") > sample.count(","):
        return ";"
    return ","


def validate_category(category: Optional[str]) -> str:
    """Catégorie déclarée de l'import ; `student` par défaut."""
    value = (category or "student").strip().lower()
    if value not in IMPORT_CATEGORIES:
        raise InvalidCategoryError("Invalid user type. Must be student, teacher, or tpo")
    return value


def read_rows(path: Path) -> List[Dict[str, str]]:
    """
    Lit le fichier et retourne les lignes sous forme de dictionnaires
    indexés par nom de colonne normalisé.
    """
    try:
        text = path.read_bytes().decode("utf-8-sig")  # utf-8-sig gère le BOM Excel
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableFileError(f"Unable to read CSV file: {exc}")

    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise UnreadableFileError("CSV file is empty or has no header line")

    reader = csv.reader(io.StringIO(text), delimiter=_detect_separator(lines[0]))
    header = [_normalize_header(h) for h in next(reader)]

    rows = []
    for values in reader:
        rows.append({
            column: value.strip()
            for column, value in zip(header, values)
            if column
        })
    return rows


def _validate_row(
    row_num: int, raw: Dict[str, str], category: str, seen_emails: set
) -> AccountImportRow:
    """Valide une ligne brute ; lève ValueError avec un message lisible si invalide."""
    missing = [c for c in REQUIRED_COLUMNS[category] if not raw.get(c)]
    if missing:
        fields = ", ".join(f"'{c}'" for c in missing)
        raise ValueError(f"Missing required field(s) {fields}")

    email = normalize_email(raw["email"])
    if email in seen_emails:
        raise ValueError(f"Duplicate email {email} found in this CSV file")
    seen_emails.add(email)

    domain = settings.STUDENT_EMAIL_DOMAIN if category == "student" else ""
    if not is_valid_email(email, domain):
        if domain:
            raise ValueError(f"Invalid email format for student ({email}). Must end with @{domain}")
        raise ValueError(f"Invalid email format ({email})")

    if not is_valid_phone(raw["phone"]):
        raise ValueError(f"Invalid phone number format ({raw['phone']}) - must be at least 7 digits")

    date_of_birth = None
    if raw.get("date_of_birth"):
        date_of_birth = normalize_date_of_birth(raw["date_of_birth"])

    first_name, last_name = split_full_name(raw["name"])
    if not first_name:
        raise ValueError("Invalid name field")

    return AccountImportRow(
        row=row_num,
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=raw["phone"],
        department=raw.get("department") or None,
        date_of_birth=date_of_birth,
        guardian_name=raw.get("father_name") or None,
    )


def _upsert_student_record(db: Session, user: User, row: AccountImportRow) -> None:
    student = db.execute(
        select(Student).where(Student.user_id == user.id)
    ).scalar_one_or_none()

    if student is None:
        db.add(Student(
            user_id=user.id,
            guardian_name=row.guardian_name,
            phone=row.phone,
            date_of_birth=row.date_of_birth,
        ))
        return

    student.guardian_name = row.guardian_name
    student.phone = row.phone
    student.date_of_birth = row.date_of_birth


def _apply_row(db: Session, row: AccountImportRow, category: str, temp_hash: str) -> bool:
    """
    Crée ou met à jour le compte correspondant à la ligne.
    Retourne True si le compte a été créé, False s'il a été mis à jour.
    """
    user = db.execute(select(User).where(User.email == row.email)).scalar_one_or_none()
    created = user is None

    if created:
        user = User(
            email=row.email,
            password_hash=temp_hash,
            role=category,
            first_name=row.first_name,
            last_name=row.last_name,
            phone=row.phone,
            department=row.department or "",
            date_of_birth=row.date_of_birth,
            is_active=True,
        )
        db.add(user)
        db.flush()  # obtenir l'ID avant de créer la fiche étudiant
    else:
        user.first_name = row.first_name
        user.last_name = row.last_name
        user.phone = row.phone
        if row.department:
            user.department = row.department
        if row.date_of_birth:
            user.date_of_birth = row.date_of_birth
        user.role = category

    if category == "student":
        _upsert_student_record(db, user, row)

    return created


def import_accounts_csv(path: Path, category: Optional[str], db: Session) -> AccountImportReport:
    """
    Importe les comptes décrits dans le fichier CSV `path`.

    Règles :
    - Catégorie invalide ou fichier illisible → ImportFileError, aucune écriture
    - Colonnes requises selon la catégorie (cf. REQUIRED_COLUMNS)
    - Réconciliation par email : existant → mise à jour, sinon création
    - Chaque ligne est committée séparément ; un échec n'annule que sa ligne
    """
    category = validate_category(category)
    raw_rows = read_rows(path)

    logger.info("Import CSV (%s) : %d ligne(s) à traiter", category, len(raw_rows))

    errors: List[str] = []
    seen_emails: set = set()
    created_count = 0
    updated_count = 0
    temp_hash: Optional[str] = None

    for row_num, raw in enumerate(raw_rows, start=2):  # enregistrement 1 = en-tête
        # Ligne vide
        if not any(raw.values()):
            continue

        try:
            row = _validate_row(row_num, raw, category, seen_emails)
        except ValueError as exc:
            logger.warning("Ligne %d rejetée : %s", row_num, exc)
            errors.append(f"Row {row_num}: {exc}")
            continue

        if temp_hash is None:
            temp_hash = hash_password(settings.IMPORT_TEMP_PASSWORD)

        try:
            created = _apply_row(db, row, category, temp_hash)
            db.commit()
        except IntegrityError:
            db.rollback()
            errors.append(
                f"Row {row_num}: Email {row.email} already exists in the database. Skipping duplicate entry."
            )
            continue
        except Exception as exc:
            db.rollback()
            logger.exception("Ligne %d : échec de l'enregistrement", row_num)
            errors.append(f"Row {row_num}: {str(exc) or 'Error processing row'}")
            continue

        if created:
            created_count += 1
        else:
            updated_count += 1

    logger.info(
        "Import CSV terminé : %d créé(s), %d mis à jour, %d erreur(s)",
        created_count, updated_count, len(errors),
    )

    return AccountImportReport(
        success=True,
        message=(
            f"Users uploaded successfully: {created_count} created, "
            f"{updated_count} updated, {len(errors)} error(s)"
        ),
        created_count=created_count,
        updated_count=updated_count,
        total_processed=created_count + updated_count,
        errors=errors,
    )
