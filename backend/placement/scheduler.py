"""
Planificateur APScheduler : purge horaire des fichiers CSV uploadés restés sur disque
(import interrompu par un arrêt du worker).
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from placement.config import settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _purge_stale_uploads_scheduled() -> None:
    """Tâche planifiée : supprime les uploads plus anciens que UPLOAD_RETENTION_MINUTES."""
    from placement.services.upload_storage import purge_stale_uploads

    try:
        purge_stale_uploads(settings.UPLOAD_RETENTION_MINUTES * 60)
    except OSError as exc:
        logger.error("Erreur lors de la purge des uploads : %s", exc)


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _purge_stale_uploads_scheduled,
        trigger="interval",
        hours=1,
        id="purge_stale_uploads",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré — purge des uploads toutes les heures.")


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
