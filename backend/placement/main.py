"""
Point d'entrée de l'API Placement Prep.
Démarrage : uvicorn placement.main:app --reload  (depuis le dossier backend/)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import placement.models  # noqa: F401 — enregistre tous les modèles dans Base.metadata avant les routers
from placement.config import settings
from placement.database import init_db
from placement.routers import admin_users, departments, practice, resume
from placement.scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crée les tables manquantes puis démarre le planificateur (si activé)."""
    init_db()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    logger.info("Placement Prep API prête (env=%s)", settings.ENV)
    yield
    stop_scheduler()


app = FastAPI(
    title="Placement Prep API",
    description="Comptes, import CSV des utilisateurs, entraînement aptitude / DSA, analyse de CV",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# localhost toujours autorisé ; les origines de production viennent de CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

for module in (admin_users, departments, practice, resume):
    app.include_router(module.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Toute exception non gérée devient un 500 générique, sans détail interne,
    et passe par CORSMiddleware comme les autres réponses.
    """
    logger.error("Exception non gérée sur %s %s : %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API répond et que la configuration est chargée."""
    return {"status": "ok", "service": "Placement Prep API", "env": settings.ENV}
