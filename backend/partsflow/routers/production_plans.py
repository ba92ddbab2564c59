"""
Production Plans Router — Thin Controller (SRP / DIP)
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from partsflow.database import get_db
from partsflow.dependencies import get_actor
from partsflow.schemas.production_plan import (
    ProductionPlanCreate,
    ProductionPlanResponse,
    ProductionPlanUpdate,
    ProductionStartResponse,
)
from partsflow.schemas.requirement import RequirementReport
from partsflow.schemas.reservation import (
    ReleaseResponse,
    ReservationRequest,
    ReservationResponse,
    ReservationStatusResponse,
)
from partsflow.services.netting_engine import NettingEngine
from partsflow.services.production_plan_service import ProductionPlanService
from partsflow.services.reservation_manager import ReservationManager

router = APIRouter(prefix="/production-plans", tags=["Production Plans"])


def get_plan_service(db: Session = Depends(get_db)) -> ProductionPlanService:
    return ProductionPlanService(db)


def get_netting_engine(db: Session = Depends(get_db)) -> NettingEngine:
    return NettingEngine(db)


def get_reservation_manager(db: Session = Depends(get_db)) -> ReservationManager:
    return ReservationManager(db)


@router.get("", response_model=List[ProductionPlanResponse])
def list_plans(
    status: Optional[str] = Query(None, pattern="^(planned|in_progress|completed|cancelled)$"),
    product_code: Optional[str] = None,
    building_no: Optional[str] = None,
    service: ProductionPlanService = Depends(get_plan_service),
):
    return service.list_plans(status=status, product_code=product_code, building_no=building_no)


@router.post("", response_model=ProductionPlanResponse, status_code=201)
def create_plan(
    body: ProductionPlanCreate,
    service: ProductionPlanService = Depends(get_plan_service),
    actor: str = Depends(get_actor),
):
    return service.create_plan(body, actor=actor)


@router.get("/{plan_id}", response_model=ProductionPlanResponse)
def get_plan(
    plan_id: int,
    service: ProductionPlanService = Depends(get_plan_service),
):
    return service.get_plan(plan_id)


@router.put("/{plan_id}", response_model=ProductionPlanResponse)
def update_plan(
    plan_id: int,
    body: ProductionPlanUpdate,
    service: ProductionPlanService = Depends(get_plan_service),
    actor: str = Depends(get_actor),
):
    return service.update_plan(plan_id, body, actor=actor)


@router.post("/{plan_id}/start", response_model=ProductionStartResponse)
def start_production(
    plan_id: int,
    service: ProductionPlanService = Depends(get_plan_service),
    actor: str = Depends(get_actor),
):
    return service.start_production(plan_id, actor=actor)


@router.post("/{plan_id}/complete", response_model=ProductionPlanResponse)
def complete_production(
    plan_id: int,
    service: ProductionPlanService = Depends(get_plan_service),
    actor: str = Depends(get_actor),
):
    return service.complete_production(plan_id, actor=actor)


@router.post("/{plan_id}/cancel", response_model=ProductionPlanResponse)
def cancel_plan(
    plan_id: int,
    service: ProductionPlanService = Depends(get_plan_service),
    actor: str = Depends(get_actor),
):
    return service.cancel_plan(plan_id, actor=actor)


@router.post("/{plan_id}/requirements", response_model=RequirementReport)
def calculate_requirements(
    plan_id: int,
    as_of: Optional[date] = Query(None, description="Reference date for lead-time breach flags"),
    engine: NettingEngine = Depends(get_netting_engine),
):
    return engine.calculate(plan_id, today=as_of)


# ── Reservations ─────────────────────────────────────────────────────────────

@router.get("/{plan_id}/reservations", response_model=ReservationStatusResponse)
def reservation_status(
    plan_id: int,
    manager: ReservationManager = Depends(get_reservation_manager),
):
    return manager.reservation_status(plan_id)


@router.put("/{plan_id}/reservations/{part_code}", response_model=ReservationResponse)
def reserve_part(
    plan_id: int,
    part_code: str,
    body: ReservationRequest,
    manager: ReservationManager = Depends(get_reservation_manager),
    actor: str = Depends(get_actor),
):
    return manager.reserve(plan_id, part_code, body.quantity, actor=actor, remarks=body.remarks)


@router.delete("/{plan_id}/reservations/{part_code}", status_code=204)
def release_part(
    plan_id: int,
    part_code: str,
    manager: ReservationManager = Depends(get_reservation_manager),
    actor: str = Depends(get_actor),
):
    manager.release(plan_id, part_code, actor=actor)


@router.delete("/{plan_id}/reservations", response_model=ReleaseResponse)
def release_all(
    plan_id: int,
    manager: ReservationManager = Depends(get_reservation_manager),
    actor: str = Depends(get_actor),
):
    return manager.release_all(plan_id, actor=actor)
