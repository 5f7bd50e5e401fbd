"""
Application FastAPI principale pour le Machine Segment Tracker
Point d'entrée de l'API backend
"""
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.requests import Request
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi.errors import RateLimitExceeded
import sentry_sdk

from segment_tracker.core.settings import get_settings
from segment_tracker.core.database import create_db_and_tables, check_database_health
from segment_tracker.core.metrics import MetricsRecorder
from segment_tracker.api.routers import router, limiter
from segment_tracker.domain.services.segment_service import (
    SegmentNotFoundError,
    SegmentValidationError,
)

APP_VERSION = "1.0.0"

settings = get_settings()

# Initialiser Sentry (uniquement si SENTRY_DSN est configure)
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.is_production else 1.0,
        send_default_pii=False,
    )

# Configuration du logging conditionnée par ENVIRONMENT
_log_level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

_handler = logging.StreamHandler(sys.stdout)

if settings.is_production:
    from pythonjsonlogger import jsonlogger
    _handler.setFormatter(jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    ))
else:
    _handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

_handlers: list[logging.Handler] = [_handler]
if not settings.is_production:
    _handlers.append(RotatingFileHandler(
        'app.log', maxBytes=5_000_000, backupCount=3,
    ))

logging.basicConfig(
    level=_log_level,
    handlers=_handlers,
)

# En production, réduire le bruit des modules tiers
if settings.is_production:
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestionnaire de cycle de vie de l'application"""
    logger.info(f"Démarrage de Machine Segment Tracker API v{APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    create_db_and_tables()
    logger.info("Base de données initialisée")

    yield

    logger.info("Arrêt de l'API")


app = FastAPI(
    title="Machine Segment Tracker API",
    description="Suivi des segments uptime / downtime / idle des machines",
    version=APP_VERSION,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan
)

# Rate limiting
app.state.limiter = limiter

# Mesures de performance, propres a cette instance d'application
app.state.metrics = MetricsRecorder(
    max_entries=settings.METRICS_BUFFER_SIZE,
    slow_threshold_ms=settings.SLOW_REQUEST_MS,
)


async def _custom_rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Retourne un 429 propre."""
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": f"Trop de requetes, reessayez plus tard ({exc.detail})",
        },
    )


app.add_exception_handler(RateLimitExceeded, _custom_rate_limit_handler)


@app.exception_handler(SegmentValidationError)
async def segment_validation_handler(request: Request, exc: SegmentValidationError):
    """Erreurs de validation -> 400 avec la liste des champs en erreur"""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation Error",
            "errors": exc.result.as_list(),
        },
    )


@app.exception_handler(SegmentNotFoundError)
async def segment_not_found_handler(request: Request, exc: SegmentNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Segment non trouve"},
    )


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Journalise chaque requete (niveau selon le status) et enregistre sa duree."""
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        message = f"{request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms"
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.debug(message)

        request.app.state.metrics.record(
            "api",
            f"{request.method} {request.url.path}",
            duration_ms,
            status_code=response.status_code,
        )
        return response


app.add_middleware(RequestTimingMiddleware)

# Configuration CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)

# Inclure les routes
app.include_router(router, prefix="/api/v1")


@app.get("/")
async def index():
    return {"message": "Machine Segment Tracker API is running"}


@app.get("/health")
@limiter.exempt
async def health_check():
    """Point de santé de l'API"""
    db_ok = check_database_health()
    status = "healthy" if db_ok else "degraded"
    return JSONResponse(
        content={
            "status": status,
            "version": APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "services": {
                "database": "connected" if db_ok else "disconnected",
            },
        }
    )


@app.get("/metrics")
@limiter.exempt
async def get_metrics(request: Request):
    """Resume des temps de reponse enregistres"""
    metrics: MetricsRecorder = request.app.state.metrics
    return {
        "summary": metrics.summary(),
        "slow": metrics.slow_entries(),
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc):
    """Gestionnaire global des exceptions"""
    logger.error(f"Erreur non gérée: {type(exc).__name__}: {str(exc)}", exc_info=True)
    if settings.DEBUG:
        content = {
            "success": False,
            "message": "Erreur interne du serveur",
            "type": type(exc).__name__,
            "error": str(exc),
        }
    else:
        content = {
            "success": False,
            "message": "Erreur interne du serveur",
        }
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn
    logger.info("Lancement de l'application sur le port 8000")
    uvicorn.run(
        "segment_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
