"""
Utilitaires partages entre les routers API.
"""
import logging
from typing import Optional
from uuid import UUID

from slowapi import Limiter
from slowapi.util import get_remote_address

from segment_tracker.core.settings import get_settings
from segment_tracker.domain.services.segment_service import SegmentValidationError
from segment_tracker.domain.services.segment_validation import ValidationResult
from segment_tracker.domain.services.time_arithmetic import is_valid_date_format

logger = logging.getLogger(__name__)

_settings = get_settings()

# Rate limiting par IP, actif uniquement en production
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.RATE_LIMIT],
    enabled=_settings.is_production,
)


def parse_segment_id(segment_id: str) -> UUID:
    """Convertit l'id de chemin en UUID, erreur de validation (400) si le format est invalide."""
    try:
        return UUID(segment_id)
    except ValueError:
        raise SegmentValidationError(
            ValidationResult({"id": "Format d'identifiant de segment invalide"})
        )


def check_date_params(**params: Optional[str]) -> None:
    """Verifie les parametres de date YYYY-MM-DD ; leve une erreur de validation sinon."""
    errors = {
        name: f"{name} doit etre au format YYYY-MM-DD"
        for name, value in params.items()
        if value and not is_valid_date_format(value)
    }
    if errors:
        raise SegmentValidationError(ValidationResult(errors))
