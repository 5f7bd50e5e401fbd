"""
Validation des segments - Domain Layer
Logique unique utilisee par l'API (ecriture) et par la pre-validation du formulaire.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..entities.segment import SegmentType, normalize_machine_name
from .overlap_service import intervals_overlap
from .time_arithmetic import (
    InvalidFormat,
    duration_minutes,
    is_valid_date_format,
    is_valid_time_format,
    resolve_interval,
)

logger = logging.getLogger(__name__)

MACHINE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
ALLOWED_SEGMENT_TYPES = tuple(t.value for t in SegmentType)

GENERAL = "general"

REQUIRED_MESSAGES = {
    "date": "La date est requise",
    "start_time": "L'heure de debut est requise",
    "end_time": "L'heure de fin est requise",
    "machine_name": "Le nom de machine est requis",
    "segment_type": "Le type de segment est requis",
}


@dataclass
class ValidationResult:
    """Resultat de validation : erreurs par champ (ou 'general')."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": dict(self.errors)}

    def as_list(self) -> List[Dict[str, str]]:
        return [{"field": name, "message": message} for name, message in self.errors.items()]


def _read(candidate, name: str):
    if isinstance(candidate, Mapping):
        return candidate.get(name)
    return getattr(candidate, name, None)


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _type_value(value) -> Any:
    # SegmentType ou chaine brute
    return getattr(value, "value", value)


def _check_fields(values: Dict[str, Any]) -> Dict[str, str]:
    errors = {}

    for name, message in REQUIRED_MESSAGES.items():
        if _is_blank(values[name]):
            errors[name] = message

    if "date" not in errors and not is_valid_date_format(values["date"]):
        errors["date"] = "La date doit etre au format YYYY-MM-DD"

    for name, label in (("start_time", "L'heure de debut"), ("end_time", "L'heure de fin")):
        if name not in errors and not is_valid_time_format(values[name]):
            errors[name] = f"{label} doit etre au format HH:MM:SS"

    machine_name = values["machine_name"]
    if "machine_name" not in errors and (
        not isinstance(machine_name, str) or not MACHINE_NAME_PATTERN.match(machine_name)
    ):
        errors["machine_name"] = "Nom de machine invalide (lettres, chiffres, - et _ uniquement)"

    if "segment_type" not in errors and _type_value(values["segment_type"]) not in ALLOWED_SEGMENT_TYPES:
        errors["segment_type"] = "Le type de segment doit etre uptime, downtime, idle ou select"

    return errors


def _same_id(left, right) -> bool:
    return left is not None and right is not None and str(left) == str(right)


def validate_segment(candidate, existing_segments: Optional[Iterable] = None) -> ValidationResult:
    """
    Valide un segment candidat contre les segments existants de sa machine.

    Ordre : presence, format, coherence debut/fin, puis chevauchement.
    Le chevauchement n'est verifie que si tous les controles precedents passent.
    Le candidat est exclu de la comparaison par son id (mise a jour).

    Ne leve jamais d'exception pour une saisie mal formee.

    Args:
        candidate: objet ou dict avec date, start_time, end_time, machine_name, segment_type et id optionnel
        existing_segments: segments deja enregistres, objets ou dicts (toutes machines acceptees, filtrees ici)

    Returns:
        ValidationResult (valid + erreurs par champ)
    """
    values = {name: _read(candidate, name) for name in REQUIRED_MESSAGES}
    if isinstance(values["machine_name"], str):
        values["machine_name"] = normalize_machine_name(values["machine_name"])

    errors = _check_fields(values)
    if errors:
        return ValidationResult(errors)

    minutes = duration_minutes(values["date"], values["start_time"], values["end_time"])
    if minutes < 1:
        if values["start_time"] == values["end_time"]:
            errors["end_time"] = "L'heure de fin doit etre apres l'heure de debut"
        else:
            errors["end_time"] = "Un segment doit durer au moins une minute"
        return ValidationResult(errors)

    candidate_id = _read(candidate, "id")
    candidate_interval = resolve_interval(values["date"], values["start_time"], values["end_time"])

    for existing in existing_segments or ():
        if normalize_machine_name(_read(existing, "machine_name")) != values["machine_name"]:
            continue
        existing_id = _read(existing, "id")
        if _read(existing, "date") != values["date"] or _same_id(existing_id, candidate_id):
            continue
        try:
            existing_interval = resolve_interval(
                values["date"], _read(existing, "start_time"), _read(existing, "end_time")
            )
        except InvalidFormat as exc:
            logger.warning(f"Segment existant {existing_id} ignore pour le chevauchement: {exc}")
            continue
        if intervals_overlap(candidate_interval, existing_interval):
            errors[GENERAL] = "Ce segment chevauche un segment existant de cette machine"
            break

    return ValidationResult(errors)
