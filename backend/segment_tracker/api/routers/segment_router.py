"""
Routes des segments machine : CRUD, pre-validation, statistiques, timeline.
Routes = validation des parametres + delegation aux services. Pas de logique metier ici.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel import Session

from segment_tracker.core.database import get_session
from segment_tracker.core.settings import get_settings
from segment_tracker.domain.entities import SegmentPayload, SegmentType, normalize_machine_name
from segment_tracker.domain.services import aggregation_service, timeline_service
from segment_tracker.domain.services.overlap_service import find_overlaps
from segment_tracker.domain.services.segment_service import segment_service, to_segment_read
from segment_tracker.api.routers._shared import limiter, parse_segment_id, check_date_params

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()

SEGMENT_TYPE_PATTERN = "^(" + "|".join(t.value for t in SegmentType) + ")?$"


@router.get("/segments")
async def get_segments(
    session: Session = Depends(get_session),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    machine_name: Optional[str] = None,
    segment_type: Optional[str] = Query(None, pattern=SEGMENT_TYPE_PATTERN),
    date: Optional[str] = Query(None, description="Date exacte YYYY-MM-DD"),
    start_date: Optional[str] = Query(None, description="Date minimale YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="Date maximale YYYY-MM-DD"),
):
    """Liste filtree et paginee des segments, triee par date puis heure de debut"""
    check_date_params(date=date, start_date=start_date, end_date=end_date)
    result = segment_service.list_segments(
        session, page, limit, machine_name, segment_type or None, date, start_date, end_date
    )
    return {
        "success": True,
        "count": len(result["items"]),
        "total": result["total"],
        "pagination": {
            "page": result["page"],
            "limit": result["limit"],
            "total_pages": result["total_pages"],
        },
        "data": [to_segment_read(s) for s in result["items"]],
    }


@router.get("/segments/analytics")
async def get_segment_analytics(
    session: Session = Depends(get_session),
    machine_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
):
    """Nombre et duree par machine puis par categorie"""
    check_date_params(start_date=start_date, end_date=end_date)
    segments = segment_service.filtered_segments(session, machine_name, start_date, end_date)
    return {"success": True, "data": aggregation_service.machine_analytics(segments)}


@router.get("/segments/stats")
async def get_segment_stats(
    session: Session = Depends(get_session),
    machine_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
):
    """Statistiques par type, par machine, par date et totaux"""
    check_date_params(start_date=start_date, end_date=end_date)
    segments = segment_service.filtered_segments(session, machine_name, start_date, end_date)
    return {"success": True, "data": aggregation_service.statistics(segments)}


@router.get("/segments/timeline/{machine_name}")
async def get_timeline_data(
    machine_name: str,
    session: Session = Depends(get_session),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    axis: str = Query("fixed", pattern="^(fixed|dynamic)$"),
):
    """
    Donnees de timeline d'une machine.
    axis=fixed : axe de TIMELINE_AXIS_MINUTES ; axis=dynamic : axe dimensionne
    sur la machine la plus chargee de la periode.
    """
    check_date_params(start_date=start_date, end_date=end_date)
    machine_name = normalize_machine_name(machine_name)
    logger.info(f"Timeline demandee pour la machine {machine_name}")

    segments = segment_service.filtered_segments(session, machine_name, start_date, end_date)

    if axis == "dynamic":
        all_segments = segment_service.filtered_segments(session, None, start_date, end_date)
        axis_minutes = timeline_service.dynamic_axis_minutes(
            aggregation_service.group_by_machine(all_segments)
        )
    else:
        axis_minutes = settings.TIMELINE_AXIS_MINUTES

    projection = [
        {**item.to_dict(), "segment": to_segment_read(item.segment)}
        for item in timeline_service.project(segments, axis_minutes)
    ]

    return {
        "success": True,
        "count": len(segments),
        "axis_minutes": axis_minutes,
        "markers": timeline_service.time_markers(axis_minutes),
        "data": timeline_service.build_timeline(segments),
        "projection": projection,
    }


@router.get("/segments/overlaps/{machine_name}")
async def get_segment_overlaps(
    machine_name: str,
    session: Session = Depends(get_session),
):
    """Rapport de diagnostic : paires de segments adjacents qui se chevauchent"""
    machine_name = normalize_machine_name(machine_name)
    segments = segment_service.machine_segments(session, machine_name)
    reports = find_overlaps(segments, machine_name)
    return {
        "success": True,
        "count": len(reports),
        "data": [
            {
                "segment1": to_segment_read(r.segment1),
                "segment2": to_segment_read(r.segment2),
                "overlap_minutes": r.overlap_minutes,
            }
            for r in reports
        ],
    }


@router.get("/segments/machines/{machine_name}/summary")
async def get_machine_summary(
    machine_name: str,
    session: Session = Depends(get_session),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
):
    """Resume d'une machine : durees par categorie, taux d'uptime, analyse des arrets"""
    check_date_params(start_date=start_date, end_date=end_date)
    machine_name = normalize_machine_name(machine_name)
    segments = segment_service.filtered_segments(session, machine_name, start_date, end_date)
    return {
        "success": True,
        "data": {"machine_name": machine_name, **aggregation_service.machine_summary(segments)},
    }


@router.post("/segments/validate")
async def validate_segment(
    payload: SegmentPayload,
    session: Session = Depends(get_session),
):
    """Pre-validation du formulaire : memes regles que l'ecriture, rien n'est enregistre"""
    result = segment_service.validate(session, payload)
    return {"success": True, "data": result.to_dict()}


@router.get("/segments/{segment_id}")
async def get_segment(
    segment_id: str,
    session: Session = Depends(get_session),
):
    """Recupere un segment par son id"""
    segment = segment_service.get_segment(session, parse_segment_id(segment_id))
    return {"success": True, "data": to_segment_read(segment)}


@router.post("/segments", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT)
async def create_segment(
    request: Request,
    payload: SegmentPayload,
    session: Session = Depends(get_session),
):
    """Cree un segment apres validation (format, coherence, chevauchement)"""
    segment = segment_service.create_segment(session, payload)
    return {"success": True, "data": to_segment_read(segment)}


@router.put("/segments/{segment_id}")
@limiter.limit(settings.RATE_LIMIT)
async def update_segment(
    request: Request,
    segment_id: str,
    payload: SegmentPayload,
    session: Session = Depends(get_session),
):
    """Met a jour un segment ; re-validation contre les autres segments de la machine"""
    segment = segment_service.update_segment(session, parse_segment_id(segment_id), payload)
    return {"success": True, "data": to_segment_read(segment)}


@router.delete("/segments/{segment_id}")
@limiter.limit(settings.RATE_LIMIT)
async def delete_segment(
    request: Request,
    segment_id: str,
    session: Session = Depends(get_session),
):
    """Supprime un segment"""
    segment_service.delete_segment(session, parse_segment_id(segment_id))
    return {"success": True, "message": "Segment supprime"}
