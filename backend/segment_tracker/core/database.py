"""
Configuration de la base de données avec SQLModel
"""
import logging

from sqlalchemy import text
from sqlmodel import create_engine, SQLModel, Session
from segment_tracker.core.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# SQLite (dev/tests) : la connexion est partagee entre les threads de FastAPI
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Créer l'engine de base de données
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    connect_args=_connect_args,
)


def create_db_and_tables():
    """Créer toutes les tables de la base de données"""
    # Import necessaire pour enregistrer la table dans la metadata
    from segment_tracker.domain.entities import Segment  # noqa: F401
    SQLModel.metadata.create_all(engine)


def check_database_health() -> bool:
    """Vérifie que la base répond à un SELECT 1. Retourne True si OK, False sinon."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning(f"Database health check échoué: {exc}")
        return False


def get_session():
    """Générateur de session de base de données pour l'injection de dépendance"""
    with Session(engine) as session:
        yield session
