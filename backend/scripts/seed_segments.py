#!/usr/bin/env python3
"""
Script de peuplement de la base avec le jeu de segments de reference.
Chaque segment passe par la meme validation que l'API : les segments
invalides ou chevauchants sont journalises puis ignores.
"""
import argparse
import logging
import os
import sys
from typing import Any, Dict, List

sys.path.append(os.path.dirname(os.path.abspath(__file__)) + "/..")

from sqlmodel import Session, select

from segment_tracker.core.database import engine, create_db_and_tables
from segment_tracker.domain.entities import Segment, SegmentPayload
from segment_tracker.domain.services.segment_service import (
    SegmentValidationError,
    segment_service,
)

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

INITIAL_SEGMENTS: List[Dict[str, Any]] = [
    {"date": "2025-07-15", "start_time": "06:00:00", "end_time": "07:30:00", "machine_name": "M1", "segment_type": "uptime"},
    {"date": "2025-07-15", "start_time": "07:30:00", "end_time": "08:00:00", "machine_name": "M2", "segment_type": "idle"},
    {"date": "2025-07-15", "start_time": "08:00:00", "end_time": "09:15:00", "machine_name": "M3", "segment_type": "downtime"},
    {"date": "2025-07-15", "start_time": "09:15:00", "end_time": "10:45:00", "machine_name": "M1", "segment_type": "uptime"},
    {"date": "2025-07-15", "start_time": "15:12:00", "end_time": "20:16:00", "machine_name": "M1", "segment_type": "idle"},
    {"date": "2025-07-15", "start_time": "16:12:00", "end_time": "21:16:00", "machine_name": "M1", "segment_type": "uptime"},
    {"date": "2025-07-15", "start_time": "17:12:00", "end_time": "22:16:00", "machine_name": "M1", "segment_type": "downtime"},
    {"date": "2025-07-15", "start_time": "18:12:00", "end_time": "23:16:00", "machine_name": "M2", "segment_type": "select"},
    {"date": "2025-07-15", "start_time": "19:12:00", "end_time": "00:16:00", "machine_name": "M2", "segment_type": "select"},
    {"date": "2025-07-15", "start_time": "20:12:00", "end_time": "01:16:00", "machine_name": "M3", "segment_type": "select"},
    {"date": "2025-07-15", "start_time": "21:12:00", "end_time": "02:16:00", "machine_name": "m4", "segment_type": "select"},
]


def seed_segments(session: Session, segments: List[Dict[str, Any]], clear: bool = True) -> Dict[str, int]:
    """Insere les segments valides ; retourne le nombre de segments crees et ignores."""
    if clear:
        for segment in session.exec(select(Segment)).all():
            session.delete(segment)
        session.commit()
        logger.info("Segments existants supprimes")

    created = 0
    skipped = 0
    for data in segments:
        try:
            segment_service.create_segment(session, SegmentPayload(**data))
            created += 1
        except SegmentValidationError as exc:
            skipped += 1
            logger.warning(f"Segment ignore {data}: {exc.errors}")

    logger.info(f"{created} segments inseres, {skipped} ignores")
    return {"created": created, "skipped": skipped}


def main():
    parser = argparse.ArgumentParser(description="Peuple la base avec les segments de reference")
    parser.add_argument("--keep", action="store_true", help="Ne pas vider la table avant insertion")
    args = parser.parse_args()

    create_db_and_tables()
    with Session(engine) as session:
        seed_segments(session, INITIAL_SEGMENTS, clear=not args.keep)


if __name__ == "__main__":
    main()
