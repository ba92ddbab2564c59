"""
Reports Router — Thin Controller (SRP / DIP)
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from partsflow.database import get_db
from partsflow.schemas.shortage_report import ShortageReport, SupplierShortageGroup
from partsflow.services.shortage_report_service import ShortageReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


def get_shortage_service(db: Session = Depends(get_db)) -> ShortageReportService:
    return ShortageReportService(db)


@router.get("/shortages", response_model=ShortageReport)
def list_shortages(
    as_of: Optional[date] = Query(None),
    service: ShortageReportService = Depends(get_shortage_service),
):
    return service.list_shortages(today=as_of)


@router.get("/shortages/by-supplier", response_model=List[SupplierShortageGroup])
def shortages_by_supplier(
    as_of: Optional[date] = Query(None),
    service: ShortageReportService = Depends(get_shortage_service),
):
    return service.shortages_by_supplier(today=as_of)
