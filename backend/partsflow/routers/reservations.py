"""
Reservations Router — Thin Controller (SRP / DIP)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from partsflow.database import get_db
from partsflow.schemas.reservation import ReservationIntegrityReport
from partsflow.services.reservation_manager import ReservationManager

router = APIRouter(prefix="/reservations", tags=["Reservations"])


def get_reservation_manager(db: Session = Depends(get_db)) -> ReservationManager:
    return ReservationManager(db)


@router.get("/integrity", response_model=ReservationIntegrityReport)
def check_integrity(manager: ReservationManager = Depends(get_reservation_manager)):
    return manager.check_integrity()
