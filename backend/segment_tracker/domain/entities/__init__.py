"""
Initialisation des entités du domaine
"""

from .segment import (
    Segment,
    SegmentBase,
    SegmentPayload,
    SegmentRead,
    SegmentType,
    TRACKED_TYPES,
    normalize_machine_name,
    utc_now,
)

__all__ = [
    "Segment", "SegmentBase", "SegmentPayload", "SegmentRead",
    "SegmentType", "TRACKED_TYPES", "normalize_machine_name", "utc_now",
]
