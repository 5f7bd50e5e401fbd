"""
Tests pour SegmentService : creation, mise a jour, suppression, pagination.
Base SQLite en memoire (fixture session de conftest).
"""
import pytest
from datetime import datetime
from uuid import uuid4

from segment_tracker.domain.entities import SegmentPayload, SegmentType, utc_now
from segment_tracker.domain.services.segment_service import (
    SegmentNotFoundError,
    SegmentValidationError,
    segment_service,
    to_segment_read,
)


def _payload(**overrides) -> SegmentPayload:
    data = {
        "date": "2025-07-15",
        "start_time": "08:00:00",
        "end_time": "10:00:00",
        "machine_name": "M1",
        "segment_type": "uptime",
    }
    data.update(overrides)
    return SegmentPayload(**data)


class TestCreateSegment:

    def test_create(self, session):
        segment = segment_service.create_segment(session, _payload())
        assert segment.id is not None
        assert segment.segment_type == SegmentType.UPTIME
        assert segment.machine_name == "M1"

    def test_machine_name_normalized(self, session):
        segment = segment_service.create_segment(session, _payload(machine_name="m7"))
        assert segment.machine_name == "M7"

    def test_overlap_rejected(self, session):
        segment_service.create_segment(session, _payload())
        with pytest.raises(SegmentValidationError) as exc_info:
            segment_service.create_segment(session, _payload(start_time="09:00:00", end_time="11:00:00"))
        assert "general" in exc_info.value.errors

    def test_overlap_detected_across_name_case(self, session):
        segment_service.create_segment(session, _payload(machine_name="M1"))
        with pytest.raises(SegmentValidationError):
            segment_service.create_segment(
                session, _payload(machine_name="m1", start_time="09:00:00", end_time="11:00:00")
            )

    def test_touching_accepted(self, session):
        segment_service.create_segment(session, _payload())
        segment = segment_service.create_segment(session, _payload(start_time="10:00:00", end_time="11:00:00"))
        assert segment.start_time == "10:00:00"

    def test_same_slot_other_machine(self, session):
        segment_service.create_segment(session, _payload())
        segment_service.create_segment(session, _payload(machine_name="M2"))
        assert segment_service.list_segments(session)["total"] == 2

    def test_invalid_payload(self, session):
        with pytest.raises(SegmentValidationError) as exc_info:
            segment_service.create_segment(session, _payload(start_time="8h"))
        assert "start_time" in exc_info.value.errors

    def test_client_id_ignored(self, session):
        forced = uuid4()
        segment = segment_service.create_segment(session, _payload(id=forced))
        assert segment.id != forced


class TestUpdateSegment:

    def test_partial_update(self, session):
        segment = segment_service.create_segment(session, _payload())
        updated = segment_service.update_segment(
            session, segment.id, SegmentPayload(segment_type="idle")
        )
        assert updated.segment_type == SegmentType.IDLE
        assert updated.start_time == "08:00:00"

    def test_update_does_not_conflict_with_itself(self, session):
        segment = segment_service.create_segment(session, _payload())
        updated = segment_service.update_segment(
            session, segment.id, SegmentPayload(end_time="10:30:00")
        )
        assert updated.end_time == "10:30:00"

    def test_update_into_overlap_rejected(self, session):
        segment_service.create_segment(session, _payload())
        other = segment_service.create_segment(session, _payload(start_time="10:00:00", end_time="11:00:00"))
        with pytest.raises(SegmentValidationError):
            segment_service.update_segment(session, other.id, SegmentPayload(start_time="09:30:00"))

    def test_update_missing(self, session):
        with pytest.raises(SegmentNotFoundError):
            segment_service.update_segment(session, uuid4(), SegmentPayload(segment_type="idle"))


class TestDeleteSegment:

    def test_delete(self, session):
        segment = segment_service.create_segment(session, _payload())
        segment_service.delete_segment(session, segment.id)
        with pytest.raises(SegmentNotFoundError):
            segment_service.get_segment(session, segment.id)

    def test_delete_missing(self, session):
        with pytest.raises(SegmentNotFoundError):
            segment_service.delete_segment(session, uuid4())


class TestListSegments:

    def _seed(self, session):
        for hour in range(8, 13):
            segment_service.create_segment(
                session, _payload(start_time=f"{hour:02d}:00:00", end_time=f"{hour:02d}:30:00")
            )
        segment_service.create_segment(session, _payload(date="2025-07-16", segment_type="downtime"))
        segment_service.create_segment(session, _payload(machine_name="M2", segment_type="select"))

    def test_pagination(self, session):
        self._seed(session)
        first = segment_service.list_segments(session, page=1, limit=3)
        assert first["total"] == 7
        assert first["total_pages"] == 3
        assert len(first["items"]) == 3
        last = segment_service.list_segments(session, page=3, limit=3)
        assert len(last["items"]) == 1

    def test_sorted_by_date_then_start(self, session):
        self._seed(session)
        items = segment_service.list_segments(session, limit=100)["items"]
        keys = [(s.date, s.start_time) for s in items]
        assert keys == sorted(keys)

    def test_filters(self, session):
        self._seed(session)
        assert segment_service.list_segments(session, machine_name="m2")["total"] == 1
        assert segment_service.list_segments(session, segment_type="downtime")["total"] == 1
        assert segment_service.list_segments(session, date="2025-07-16")["total"] == 1
        assert segment_service.list_segments(session, start_date="2025-07-16")["total"] == 1
        assert segment_service.list_segments(session, end_date="2025-07-15")["total"] == 6

    def test_empty(self, session):
        result = segment_service.list_segments(session)
        assert result["total"] == 0
        assert result["total_pages"] == 1


class TestValidateAndRead:

    def test_validate_has_no_side_effect(self, session):
        result = segment_service.validate(session, _payload())
        assert result.valid
        assert segment_service.list_segments(session)["total"] == 0

    def test_validate_sees_existing(self, session):
        segment_service.create_segment(session, _payload())
        result = segment_service.validate(session, _payload(start_time="09:00:00", end_time="09:30:00"))
        assert not result.valid

    def test_to_segment_read(self, session):
        segment = segment_service.create_segment(session, _payload(start_time="23:30:00", end_time="00:15:00"))
        read = to_segment_read(segment)
        assert read.duration_minutes == 45
        assert read.duration_formatted == "00:45:00"
        assert read.id == segment.id


def _naive(value):
    return value.replace(tzinfo=None)


class TestTimestamps:

    def test_utc_now_is_timezone_aware(self):
        assert utc_now().tzinfo is not None

    def test_created_and_updated_persisted(self, session):
        segment = segment_service.create_segment(session, _payload())
        session.expire_all()
        stored = segment_service.get_segment(session, segment.id)
        assert isinstance(stored.created_at, datetime)
        assert isinstance(stored.updated_at, datetime)

    def test_update_refreshes_updated_at(self, session):
        segment = segment_service.create_segment(session, _payload())
        created_at = _naive(segment.created_at)
        updated = segment_service.update_segment(session, segment.id, SegmentPayload(segment_type="idle"))
        session.expire_all()
        stored = segment_service.get_segment(session, updated.id)
        assert _naive(stored.created_at) == created_at
        assert _naive(stored.updated_at) >= created_at
