"""
Projection des segments sur l'axe de la timeline - Domain Layer
Produit des positions/largeurs en pourcentage ; le rendu reste cote vue.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from .aggregation_service import totals_by_type
from .overlap_service import segment_interval, sort_chronologically
from .time_arithmetic import (
    DAY_START,
    MINUTES_PER_DAY,
    duration_minutes,
    format_duration_clock,
    segment_duration_minutes,
)

# En dessous de cette largeur (%) un libelle serait illisible
LABEL_WIDTH_THRESHOLD = 10.0


@dataclass
class ProjectedSegment:
    """Segment positionne sur l'axe"""
    segment: Any
    left_percent: float
    width_percent: float
    show_label: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment": self.segment,
            "left_percent": self.left_percent,
            "width_percent": self.width_percent,
            "show_label": self.show_label,
        }


def project(machine_segments: Iterable, axis_minutes: float = MINUTES_PER_DAY) -> List[ProjectedSegment]:
    """
    Projette les segments d'une machine sur un axe de axis_minutes.

    left = minutes depuis 00:00:00 du jour du segment, width = duree,
    les deux en pourcentage de l'axe. Les chevauchements visuels ne sont
    pas resolus.

    Raises:
        TypeError: si machine_segments est None
        ValueError: si axis_minutes n'est pas strictement positif
    """
    if machine_segments is None:
        raise TypeError("machine_segments ne peut pas etre None")
    if not axis_minutes or axis_minutes <= 0 or not math.isfinite(axis_minutes):
        raise ValueError(f"axis_minutes doit etre strictement positif, recu {axis_minutes!r}")

    projected = []
    for segment in sort_chronologically(machine_segments):
        width = segment_duration_minutes(segment) / axis_minutes * 100
        left = duration_minutes(segment.date, DAY_START, segment.start_time) / axis_minutes * 100
        projected.append(ProjectedSegment(
            segment=segment,
            left_percent=left,
            width_percent=width,
            show_label=width > LABEL_WIDTH_THRESHOLD,
        ))
    return projected


def dynamic_axis_minutes(segments_by_machine: Mapping[str, Iterable]) -> int:
    """
    Axe dimensionne sur la machine ayant le plus de temps suivi.
    Retombe sur 24h si aucune duree n'est suivie.
    """
    longest = 0
    for machine_segments in segments_by_machine.values():
        longest = max(longest, sum(totals_by_type(machine_segments).values()))
    return longest or MINUTES_PER_DAY


def time_markers(axis_minutes: float) -> List[Dict[str, Any]]:
    """Reperes horaires 0h..Nh pour l'axe."""
    total_hours = int(math.ceil(axis_minutes / 60))
    return [{"time": hour * 60, "label": f"{hour}h"} for hour in range(total_hours + 1)]


def build_timeline(segments: Iterable) -> List[Dict[str, Any]]:
    """Entrees chronologiques {id, start, end, type, machine, duration} avec passage de minuit."""
    entries = []
    for segment in sort_chronologically(segments):
        start, end = segment_interval(segment)
        minutes = int((end - start).total_seconds() // 60)
        entries.append({
            "id": segment.id,
            "start": start,
            "end": end,
            "type": getattr(segment.segment_type, "value", segment.segment_type),
            "machine": segment.machine_name,
            "duration": {
                "minutes": minutes,
                "formatted": format_duration_clock(minutes),
            },
        })
    return entries
