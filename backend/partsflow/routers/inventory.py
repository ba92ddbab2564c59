"""
Inventory Router — Thin Controller (SRP / DIP)
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from partsflow.database import get_db
from partsflow.dependencies import get_actor
from partsflow.schemas.inventory import (
    ReceiptReceiveResponse,
    StockAdjustmentRequest,
    StockMovementResponse,
)
from partsflow.schemas.requirement import AvailabilitySnapshot
from partsflow.services.availability_resolver import AvailabilityResolver
from partsflow.services.stock_ledger_service import StockLedgerService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def get_ledger_service(db: Session = Depends(get_db)) -> StockLedgerService:
    return StockLedgerService(db)


def get_availability_resolver(db: Session = Depends(get_db)) -> AvailabilityResolver:
    return AvailabilityResolver(db)


@router.get("/{part_code}/availability", response_model=AvailabilitySnapshot)
def part_availability(
    part_code: str,
    exclude_plan_id: Optional[int] = None,
    cutoff_date: Optional[date] = None,
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
):
    return resolver.resolve(part_code, exclude_plan_id=exclude_plan_id, cutoff_date=cutoff_date or date.today())


@router.post("/{part_code}/adjustments", response_model=StockMovementResponse, status_code=201)
def adjust_stock(
    part_code: str,
    body: StockAdjustmentRequest,
    service: StockLedgerService = Depends(get_ledger_service),
    actor: str = Depends(get_actor),
):
    return service.adjust_stock(
        part_code,
        body.quantity,
        transaction_type=body.transaction_type,
        actor=actor,
        remarks=body.remarks,
        validate_part=True,
    )


@router.post("/receipts/{receipt_id}/receive", response_model=ReceiptReceiveResponse)
def receive_receipt(
    receipt_id: int,
    received_on: Optional[date] = Query(None),
    service: StockLedgerService = Depends(get_ledger_service),
    actor: str = Depends(get_actor),
):
    return service.receive_receipt(receipt_id, actor=actor, received_on=received_on)
