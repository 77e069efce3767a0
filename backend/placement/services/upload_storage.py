"""
Stockage temporaire des fichiers CSV uploadés.

Chaque requête d'import possède son propre fichier, supprimé en fin de traitement
quel que soit le résultat. Le planificateur purge les fichiers oubliés
(crash du worker pendant un import).
"""

import logging
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from placement.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class UploadTooLargeError(ValueError):
    """Le fichier uploadé dépasse la taille maximale autorisée."""


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_upload(file: UploadFile, max_bytes: int) -> Path:
    """
    Écrit le flux uploadé sur disque par blocs et retourne le chemin local.
    Au-delà de max_bytes, le fichier partiel est supprimé et UploadTooLargeError est levée.
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    path = upload_dir() / f"csv_{timestamp}_{uuid.uuid4().hex[:8]}.csv"

    written = 0
    try:
        with path.open("wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(
                        f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
                    )
                out.write(chunk)
    except Exception:
        discard(path)
        raise

    logger.debug("Upload enregistré : %s (%d octets)", path, written)
    return path


def discard(path: Optional[Path]) -> None:
    """Supprime le fichier s'il existe encore (idempotent)."""
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def purge_stale_uploads(max_age_seconds: float, directory: Optional[Path] = None) -> int:
    """Supprime les fichiers plus anciens que max_age_seconds. Retourne le nombre supprimé."""
    directory = directory or Path(settings.UPLOAD_DIR)
    if not directory.is_dir():
        return 0

    cutoff = time.time() - max_age_seconds
    removed = 0
    for path in directory.glob("csv_*"):
        if path.is_file() and path.stat().st_mtime < cutoff:
            discard(path)
            removed += 1
    if removed:
        logger.info("Purge uploads : %d fichier(s) orphelin(s) supprimé(s) dans %s", removed, directory)
    return removed
