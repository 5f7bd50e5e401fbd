"""
Arithmetique temporelle des segments - Domain Layer
Parsing HH:MM:SS / YYYY-MM-DD, durees avec passage de minuit, formatage.
"""
import math
import re
from datetime import date, datetime, time, timedelta
from numbers import Real
from typing import Tuple

TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9]):([0-5][0-9])$")
DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

MINUTES_PER_DAY = 24 * 60
DAY_START = "00:00:00"


class InvalidFormat(ValueError):
    """Date ou heure mal formee."""


class InvalidInput(ValueError):
    """Valeur numerique invalide (negative, NaN, infinie, non numerique)."""


def is_valid_time_format(value) -> bool:
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def is_valid_date_format(value) -> bool:
    if not isinstance(value, str) or DATE_PATTERN.match(value) is None:
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_date(value: str) -> date:
    """Parse une date YYYY-MM-DD, leve InvalidFormat sinon."""
    if not is_valid_date_format(value):
        raise InvalidFormat(f"{value!r} n'est pas une date valide (YYYY-MM-DD)")
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time(value: str) -> time:
    """Parse une heure HH:MM:SS (24h), leve InvalidFormat sinon."""
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise InvalidFormat(f"{value!r} n'est pas une heure valide (HH:MM:SS)")
    hours, minutes, seconds = (int(part) for part in match.groups())
    return time(hours, minutes, seconds)


def resolve_interval(date_str: str, start_time: str, end_time: str) -> Tuple[datetime, datetime]:
    """
    Convertit un segment en instants absolus.

    Si l'heure de fin est anterieure a l'heure de debut, la fin tombe le
    lendemain (un seul passage de minuit).
    """
    day = parse_date(date_str)
    start = datetime.combine(day, parse_time(start_time))
    end = datetime.combine(day, parse_time(end_time))
    if end < start:
        end += timedelta(days=1)
    return start, end


def duration_minutes(date_str: str, start_time: str, end_time: str) -> int:
    """
    Duree en minutes entieres entre start_time et end_time le jour date_str.

    Les secondes restantes sont tronquees : une duree de moins d'une minute vaut 0.

    Raises:
        InvalidFormat: si la date ou l'une des heures est mal formee
    """
    start, end = resolve_interval(date_str, start_time, end_time)
    return int((end - start).total_seconds() // 60)


def segment_duration_minutes(segment) -> int:
    """Duree d'un segment (objet avec date, start_time, end_time)."""
    return duration_minutes(segment.date, segment.start_time, segment.end_time)


def _split_minutes(minutes) -> Tuple[int, int]:
    if isinstance(minutes, bool) or not isinstance(minutes, Real):
        raise InvalidInput(f"La duree doit etre un nombre, recu {minutes!r}")
    if not math.isfinite(minutes):
        raise InvalidInput(f"La duree doit etre finie, recu {minutes!r}")
    if minutes < 0:
        raise InvalidInput(f"La duree ne peut pas etre negative, recu {minutes!r}")
    whole = int(math.floor(minutes))
    return whole // 60, whole % 60


def format_duration(minutes) -> str:
    """
    Format compact lisible : "1h 30m", "45m", "2h", "0m".

    Raises:
        InvalidInput: si minutes est negatif, non fini ou non numerique
    """
    hours, mins = _split_minutes(minutes)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_duration_clock(minutes) -> str:
    """
    Format horloge a largeur fixe HH:MM:00 (granularite minute).

    Raises:
        InvalidInput: si minutes est negatif, non fini ou non numerique
    """
    hours, mins = _split_minutes(minutes)
    return f"{hours:02d}:{mins:02d}:00"
