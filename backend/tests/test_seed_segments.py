"""
Tests pour le script de peuplement : les segments chevauchants sont ignores.
"""
from scripts.seed_segments import INITIAL_SEGMENTS, seed_segments
from segment_tracker.domain.services.segment_service import segment_service


class TestSeedSegments:

    def test_overlapping_reference_segments_skipped(self, session):
        result = seed_segments(session, INITIAL_SEGMENTS)
        assert result["created"] + result["skipped"] == len(INITIAL_SEGMENTS)
        # M1 15:12-20:16 / 16:12-21:16 / 17:12-22:16 : seul le premier passe
        assert result["skipped"] >= 2

        m1 = segment_service.machine_segments(session, "M1", "2025-07-15")
        assert [s.start_time for s in m1] == ["06:00:00", "09:15:00", "15:12:00"]

    def test_lowercase_machine_normalized(self, session):
        seed_segments(session, INITIAL_SEGMENTS)
        assert len(segment_service.machine_segments(session, "M4")) == 1

    def test_clear_then_reseed_is_stable(self, session):
        first = seed_segments(session, INITIAL_SEGMENTS)
        second = seed_segments(session, INITIAL_SEGMENTS, clear=True)
        assert first == second

    def test_keep_existing_rejects_duplicates(self, session):
        first = seed_segments(session, INITIAL_SEGMENTS)
        second = seed_segments(session, INITIAL_SEGMENTS, clear=False)
        assert second["created"] == 0
        assert second["skipped"] == len(INITIAL_SEGMENTS)
        assert first["created"] > 0
