"""
Moteur d'agregation des segments - Domain Layer
Regroupements par machine / type / date, totaux de duree et pourcentages.
Les segments de type 'select' (non categorises) sont exclus de toutes les durees.
"""
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..entities.segment import SegmentType, TRACKED_TYPES
from .time_arithmetic import format_duration, format_duration_clock, segment_duration_minutes

TRACKED_TYPE_VALUES = tuple(t.value for t in TRACKED_TYPES)


def _type_value(segment) -> str:
    return getattr(segment.segment_type, "value", segment.segment_type)


def is_tracked(segment) -> bool:
    return _type_value(segment) in TRACKED_TYPE_VALUES


def group_by_machine(segments: Iterable) -> Dict[str, List]:
    """Regroupe les segments par nom de machine (ordre d'insertion conserve)."""
    grouped: Dict[str, List] = {}
    for segment in segments:
        grouped.setdefault(segment.machine_name, []).append(segment)
    return grouped


def totals_by_type(segments: Iterable) -> Dict[str, int]:
    """Somme des durees (minutes) par categorie ; 'select' est ignore."""
    totals = {type_value: 0 for type_value in TRACKED_TYPE_VALUES}
    for segment in segments:
        if is_tracked(segment):
            totals[_type_value(segment)] += segment_duration_minutes(segment)
    return totals


def round_percent(value: float) -> int:
    """Arrondi au pourcentage entier le plus proche (demi vers le haut)."""
    return int(math.floor(value + 0.5))


def percentages_by_type(totals: Mapping[str, float]) -> Dict[str, int]:
    """
    Part de chaque categorie dans le total des categories non nulles.
    Un total nul donne 0 partout (pas de division par zero).
    """
    grand_total = sum(value for value in totals.values() if value and value > 0)
    if grand_total <= 0:
        return {type_value: 0 for type_value in totals}
    return {
        type_value: round_percent(value / grand_total * 100) if value and value > 0 else 0
        for type_value, value in totals.items()
    }


def filter_segments(
    segments: Iterable,
    machine_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List:
    """Filtre machine + plage de dates inclusive (dates YYYY-MM-DD comparees lexicalement)."""
    result = []
    for segment in segments:
        if machine_name and segment.machine_name != machine_name:
            continue
        if start_date and segment.date < start_date:
            continue
        if end_date and segment.date > end_date:
            continue
        result.append(segment)
    return result


def statistics(
    segments: Iterable,
    machine_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Rapport composite sur les segments filtres.

    Returns:
        dict avec:
            - by_type: par categorie suivie, count / total_duration / formatted_duration / percentage
            - by_machine: par machine, count (tous types) et total_duration (categories suivies)
            - by_date: par date, count
            - totals: total_segments, unique_machine_count, unique_date_count
    """
    filtered = filter_segments(segments, machine_name, start_date, end_date)

    type_counts: Dict[str, int] = {}
    machines: Dict[str, Dict[str, int]] = {}
    dates: Dict[str, int] = {}

    for segment in filtered:
        machine = machines.setdefault(segment.machine_name, {"count": 0, "total_duration": 0})
        machine["count"] += 1
        dates[segment.date] = dates.get(segment.date, 0) + 1
        if is_tracked(segment):
            type_value = _type_value(segment)
            type_counts[type_value] = type_counts.get(type_value, 0) + 1
            machine["total_duration"] += segment_duration_minutes(segment)

    totals = totals_by_type(filtered)
    percentages = percentages_by_type(totals)

    by_type = [
        {
            "type": type_value,
            "count": type_counts[type_value],
            "total_duration": totals[type_value],
            "formatted_duration": format_duration_clock(totals[type_value]),
            "percentage": percentages[type_value],
        }
        for type_value in sorted(type_counts)
    ]
    by_machine = [
        {"machine_name": name, **values}
        for name, values in sorted(machines.items())
    ]
    by_date = [{"date": day, "count": count} for day, count in sorted(dates.items())]

    return {
        "by_type": by_type,
        "by_machine": by_machine,
        "by_date": by_date,
        "totals": {
            "total_segments": len(filtered),
            "unique_machine_count": len(machines),
            "unique_date_count": len(dates),
        },
    }


def machine_analytics(segments: Iterable) -> List[Dict[str, Any]]:
    """
    Rapport par machine puis par categorie suivie : nombre, duree totale,
    duree au format HH:MM:00. Trie par nom de machine.
    """
    report = []
    for name, machine_segments in sorted(group_by_machine(segments).items()):
        totals = totals_by_type(machine_segments)
        counts: Dict[str, int] = {}
        for segment in machine_segments:
            if is_tracked(segment):
                counts[_type_value(segment)] = counts.get(_type_value(segment), 0) + 1
        report.append({
            "machine_name": name,
            "segments": [
                {
                    "type": type_value,
                    "count": counts[type_value],
                    "total_duration": totals[type_value],
                    "formatted_duration": format_duration_clock(totals[type_value]),
                }
                for type_value in sorted(counts)
            ],
            "total_segments": len(machine_segments),
        })
    return report


def machine_summary(segments: Iterable) -> Dict[str, Any]:
    """Resume d'une machine pour la vue timeline (durees lisibles + taux d'uptime)."""
    totals = totals_by_type(segments)
    total = sum(totals.values())
    percentages = percentages_by_type(totals)
    return {
        "total_minutes": total,
        "minutes": totals,
        "total_duration": format_duration(total),
        "uptime": format_duration(totals[SegmentType.UPTIME.value]),
        "downtime": format_duration(totals[SegmentType.DOWNTIME.value]),
        "idle": format_duration(totals[SegmentType.IDLE.value]),
        "uptime_percentage": percentages[SegmentType.UPTIME.value],
        "percentages": percentages,
        # Downtime non planifie = downtime, ecart planifie = idle
        "downtime_analytics": {
            "unplanned_downtime": format_duration_clock(totals[SegmentType.DOWNTIME.value]),
            "planned_deviated": format_duration_clock(totals[SegmentType.IDLE.value]),
        },
    }
