"""
Tests pour le rapport de chevauchements (paires adjacentes).
"""
import pytest
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4

from segment_tracker.domain.services.overlap_service import (
    find_overlaps,
    overlaps,
    sort_chronologically,
)


@dataclass
class MockSegment:
    start_time: str
    end_time: str
    date: str = "2025-07-15"
    machine_name: str = "M1"
    segment_type: str = "uptime"
    id: Optional[UUID] = field(default_factory=uuid4)


class TestOverlaps:

    def test_intersecting(self):
        assert overlaps(MockSegment("08:00:00", "10:00:00"), MockSegment("09:00:00", "11:00:00"))

    def test_touching(self):
        assert not overlaps(MockSegment("08:00:00", "10:00:00"), MockSegment("10:00:00", "11:00:00"))

    def test_rollover(self):
        assert overlaps(MockSegment("23:00:00", "01:00:00"), MockSegment("23:30:00", "23:50:00"))

    def test_different_dates(self):
        assert not overlaps(
            MockSegment("08:00:00", "10:00:00", date="2025-07-15"),
            MockSegment("08:00:00", "10:00:00", date="2025-07-16"),
        )


class TestFindOverlaps:

    def test_reports_overlap_minutes(self):
        a = MockSegment("08:00:00", "10:00:00")
        b = MockSegment("09:30:00", "11:00:00")
        reports = find_overlaps([b, a], "M1")
        assert len(reports) == 1
        assert reports[0].segment1 is a
        assert reports[0].segment2 is b
        assert reports[0].overlap_minutes == 30

    def test_contained_segment_reports_intersection(self):
        outer = MockSegment("08:00:00", "12:00:00")
        inner = MockSegment("09:00:00", "09:45:00")
        reports = find_overlaps([outer, inner], "M1")
        assert reports[0].overlap_minutes == 45

    def test_only_adjacent_pairs(self):
        """A chevauche B et C, mais seule la paire adjacente (A, B) est signalee."""
        a = MockSegment("08:00:00", "12:00:00")
        b = MockSegment("08:30:00", "08:31:00")
        c = MockSegment("11:00:00", "11:30:00")
        reports = find_overlaps([a, b, c], "M1")
        assert [(r.segment1, r.segment2) for r in reports] == [(a, b)]

    def test_other_machines_filtered(self):
        a = MockSegment("08:00:00", "10:00:00")
        b = MockSegment("09:00:00", "11:00:00", machine_name="M2")
        assert find_overlaps([a, b], "M1") == []

    def test_empty(self):
        assert find_overlaps([], "M1") == []

    def test_none_segments(self):
        with pytest.raises(TypeError):
            find_overlaps(None, "M1")

    def test_empty_machine_name(self):
        with pytest.raises(ValueError):
            find_overlaps([], "")

    def test_to_dict(self):
        a = MockSegment("08:00:00", "10:00:00")
        b = MockSegment("09:00:00", "11:00:00")
        report = find_overlaps([a, b], "M1")[0].to_dict()
        assert report == {"segment1": a, "segment2": b, "overlap_minutes": 60}


def test_sort_chronologically():
    late = MockSegment("10:00:00", "11:00:00")
    early = MockSegment("08:00:00", "09:00:00")
    previous_day = MockSegment("12:00:00", "13:00:00", date="2025-07-14")
    assert sort_chronologically([late, early, previous_day]) == [previous_day, early, late]
