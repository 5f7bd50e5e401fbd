"""
Service des segments : persistance, filtrage, pagination.
Toute ecriture passe par segment_validation avec les segments de la machine
lus dans la meme session.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlmodel import Session, select, func

from segment_tracker.domain.entities import (
    Segment,
    SegmentPayload,
    SegmentRead,
    SegmentType,
    normalize_machine_name,
    utc_now,
)
from segment_tracker.domain.services.segment_validation import ValidationResult, validate_segment
from segment_tracker.domain.services.time_arithmetic import (
    format_duration_clock,
    segment_duration_minutes,
)

logger = logging.getLogger(__name__)


class SegmentNotFoundError(LookupError):
    """Aucun segment avec cet id."""

    def __init__(self, segment_id):
        super().__init__(f"Segment {segment_id} non trouve")
        self.segment_id = segment_id


class SegmentValidationError(ValueError):
    """Le segment soumis ne passe pas la validation."""

    def __init__(self, result: ValidationResult):
        super().__init__("Validation Error")
        self.result = result

    @property
    def errors(self) -> dict:
        return self.result.errors


def to_segment_read(segment: Segment) -> SegmentRead:
    """Segment -> schema de lecture avec duree derivee."""
    minutes = segment_duration_minutes(segment)
    return SegmentRead(
        id=segment.id,
        date=segment.date,
        start_time=segment.start_time,
        end_time=segment.end_time,
        machine_name=segment.machine_name,
        segment_type=segment.segment_type,
        duration_minutes=minutes,
        duration_formatted=format_duration_clock(minutes),
        created_at=segment.created_at,
        updated_at=segment.updated_at,
    )


class SegmentService:

    def _filtered_query(
        self,
        machine_name: Optional[str] = None,
        segment_type: Optional[str] = None,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ):
        query = select(Segment)
        if machine_name:
            query = query.where(Segment.machine_name == normalize_machine_name(machine_name))
        if segment_type:
            query = query.where(Segment.segment_type == SegmentType(segment_type))
        if date:
            query = query.where(Segment.date == date)
        else:
            if start_date:
                query = query.where(Segment.date >= start_date)
            if end_date:
                query = query.where(Segment.date <= end_date)
        return query

    def list_segments(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
        machine_name: Optional[str] = None,
        segment_type: Optional[str] = None,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        base_query = self._filtered_query(machine_name, segment_type, date, start_date, end_date)

        total = session.exec(select(func.count()).select_from(base_query.subquery())).one()
        offset = (page - 1) * limit
        query = base_query.order_by(Segment.date, Segment.start_time).offset(offset).limit(limit)
        segments = session.exec(query).all()
        total_pages = (total + limit - 1) // limit if total > 0 else 1

        return {
            "items": segments,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
        }

    def filtered_segments(
        self,
        session: Session,
        machine_name: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Segment]:
        query = self._filtered_query(machine_name, None, None, start_date, end_date)
        return list(session.exec(query.order_by(Segment.date, Segment.start_time)).all())

    def machine_segments(
        self, session: Session, machine_name: str, date: Optional[str] = None
    ) -> List[Segment]:
        """Segments d'une machine (optionnellement d'un jour), ordre chronologique."""
        query = select(Segment).where(Segment.machine_name == normalize_machine_name(machine_name))
        if date:
            query = query.where(Segment.date == date)
        return list(session.exec(query.order_by(Segment.date, Segment.start_time)).all())

    def get_segment(self, session: Session, segment_id: UUID) -> Segment:
        segment = session.get(Segment, segment_id)
        if not segment:
            raise SegmentNotFoundError(segment_id)
        return segment

    def _existing_for(self, session: Session, candidate: SegmentPayload) -> List[Segment]:
        machine_name = candidate.machine_name
        if not isinstance(machine_name, str) or not machine_name.strip() or not isinstance(candidate.date, str):
            return []
        return self.machine_segments(session, machine_name, candidate.date)

    def validate(self, session: Session, payload: SegmentPayload) -> ValidationResult:
        """Pre-validation sans ecriture (meme logique que create/update)."""
        return validate_segment(payload, self._existing_for(session, payload))

    def create_segment(self, session: Session, payload: SegmentPayload) -> Segment:
        candidate = payload.model_copy(update={
            "id": None,
            "machine_name": normalize_machine_name(payload.machine_name),
        })
        result = validate_segment(candidate, self._existing_for(session, candidate))
        if not result.valid:
            logger.info(f"Segment refuse pour {candidate.machine_name}: {result.errors}")
            raise SegmentValidationError(result)

        segment = Segment(
            date=candidate.date,
            start_time=candidate.start_time,
            end_time=candidate.end_time,
            machine_name=candidate.machine_name,
            segment_type=SegmentType(candidate.segment_type),
        )
        session.add(segment)
        session.commit()
        session.refresh(segment)
        logger.info(f"Segment cree: {segment.id}")
        return segment

    def update_segment(self, session: Session, segment_id: UUID, payload: SegmentPayload) -> Segment:
        """Mise a jour partielle : les champs fournis remplacent les existants, puis re-validation."""
        segment = self.get_segment(session, segment_id)

        changes = payload.model_dump(exclude_unset=True, exclude={"id"})
        merged = SegmentPayload(
            id=segment.id,
            date=segment.date,
            start_time=segment.start_time,
            end_time=segment.end_time,
            machine_name=segment.machine_name,
            segment_type=segment.segment_type.value,
        ).model_copy(update=changes)
        merged.machine_name = normalize_machine_name(merged.machine_name)

        result = validate_segment(merged, self._existing_for(session, merged))
        if not result.valid:
            logger.info(f"Mise a jour refusee pour le segment {segment_id}: {result.errors}")
            raise SegmentValidationError(result)

        segment.date = merged.date
        segment.start_time = merged.start_time
        segment.end_time = merged.end_time
        segment.machine_name = merged.machine_name
        segment.segment_type = SegmentType(merged.segment_type)
        segment.updated_at = utc_now()

        session.add(segment)
        session.commit()
        session.refresh(segment)
        logger.info(f"Segment mis a jour: {segment.id}")
        return segment

    def delete_segment(self, session: Session, segment_id: UUID) -> None:
        segment = self.get_segment(session, segment_id)
        session.delete(segment)
        session.commit()
        logger.info(f"Segment supprime: {segment_id}")


segment_service = SegmentService()
