"""
Detection de chevauchements entre segments d'une meme machine - Domain Layer
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Tuple

from .time_arithmetic import resolve_interval

logger = logging.getLogger(__name__)

Interval = Tuple[datetime, datetime]


@dataclass
class OverlapReport:
    """Paire de segments qui se chevauchent"""
    segment1: Any
    segment2: Any
    overlap_minutes: int

    def to_dict(self) -> dict:
        return {
            "segment1": self.segment1,
            "segment2": self.segment2,
            "overlap_minutes": self.overlap_minutes,
        }


def segment_interval(segment) -> Interval:
    """Intervalle absolu [debut, fin) d'un segment, passage de minuit applique."""
    return resolve_interval(segment.date, segment.start_time, segment.end_time)


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Intersection stricte : des bornes qui se touchent ne se chevauchent pas."""
    return a[0] < b[1] and b[0] < a[1]


def overlaps(a, b) -> bool:
    """True si les segments a et b se chevauchent en temps absolu."""
    return intervals_overlap(segment_interval(a), segment_interval(b))


def overlap_minutes(a: Interval, b: Interval) -> int:
    """Longueur de l'intersection de deux intervalles, en minutes entieres."""
    start = max(a[0], b[0])
    end = min(a[1], b[1])
    if end <= start:
        return 0
    return int((end - start).total_seconds() // 60)


def sort_chronologically(segments: Iterable) -> List:
    """Trie par (date, start_time) ; les formats fixes permettent un tri lexical."""
    return sorted(segments, key=lambda s: (s.date, s.start_time))


def find_overlaps(segments: Iterable, machine_name: str) -> List[OverlapReport]:
    """
    Rapport de diagnostic des chevauchements pour une machine.

    Seules les paires adjacentes apres tri chronologique sont comparees.
    La verification exhaustive est celle du validateur a l'ecriture.
    """
    if segments is None:
        raise TypeError("segments ne peut pas etre None")
    if not machine_name:
        raise ValueError("machine_name est requis")

    machine_segments = sort_chronologically(
        s for s in segments if s.machine_name == machine_name
    )

    reports = []
    for current, following in zip(machine_segments, machine_segments[1:]):
        current_interval = segment_interval(current)
        following_interval = segment_interval(following)
        if intervals_overlap(current_interval, following_interval):
            reports.append(OverlapReport(
                segment1=current,
                segment2=following,
                overlap_minutes=overlap_minutes(current_interval, following_interval),
            ))

    if reports:
        logger.info(f"{len(reports)} chevauchement(s) detecte(s) pour la machine {machine_name}")
    return reports
