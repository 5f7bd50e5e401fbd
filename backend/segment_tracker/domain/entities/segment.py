"""
Entité Segment - Domain Layer
Représente un intervalle de temps d'une machine (uptime, downtime, idle).
"""
from sqlalchemy import DateTime, Index
from sqlmodel import SQLModel, Field
from typing import Any, Optional
from uuid import UUID, uuid4
from datetime import datetime, timezone
from enum import Enum


class SegmentType(str, Enum):
    """Categories d'un segment. SELECT = pas encore categorise."""
    UPTIME = "uptime"
    DOWNTIME = "downtime"
    IDLE = "idle"
    UNSET = "select"


# Categories comptabilisees dans les durees et les analytics
TRACKED_TYPES = (SegmentType.UPTIME, SegmentType.DOWNTIME, SegmentType.IDLE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_machine_name(name: Optional[str]) -> Optional[str]:
    """
    Normalise un nom de machine : tout nom commencant par 'm' ou 'M'
    commence par 'M' majuscule (m1 -> M1).
    """
    if not isinstance(name, str):
        return name
    name = name.strip()
    if name[:1].lower() == "m":
        return "M" + name[1:]
    return name


class SegmentBase(SQLModel):
    """Modèle de base pour Segment"""
    date: str = Field(index=True)  # YYYY-MM-DD
    start_time: str  # HH:MM:SS
    end_time: str  # HH:MM:SS
    machine_name: str = Field(index=True)
    segment_type: SegmentType = Field(default=SegmentType.UNSET, index=True)


class Segment(SegmentBase, table=True):
    """Entité Segment complète pour la base de données"""
    __table_args__ = (Index("ix_segment_machine_name_date", "machine_name", "date"),)

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)

    # Timestamps (UTC, avec fuseau)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class SegmentPayload(SQLModel):
    """
    Saisie brute d'un segment (formulaire ou API).
    Aucun champ n'est type strictement : une valeur mal typee est rapportee
    par segment_validation comme toute autre erreur de saisie.
    """
    id: Optional[Any] = None
    date: Optional[Any] = None
    start_time: Optional[Any] = None
    end_time: Optional[Any] = None
    machine_name: Optional[Any] = None
    segment_type: Optional[Any] = None


class SegmentRead(SegmentBase):
    """Schéma pour lire un segment (réponse API)."""
    id: UUID
    duration_minutes: Optional[int] = None
    duration_formatted: Optional[str] = None
    created_at: datetime
    updated_at: datetime
