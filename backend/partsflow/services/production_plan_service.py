"""
Production Plan Service — plan lifecycle and the reservations that follow it.

    planned ──start──▶ in_progress ──complete──▶ completed
       │
       └──cancel──▶ cancelled

Active plans hold reservations for their aggregated BOM requirement. Starting
production consumes that requirement from stock, after which the reservations
are removed in the same transaction since the stock is no longer on hand.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from partsflow.config import settings
from partsflow.core.exceptions import (
    EmptyBOM,
    InsufficientInventory,
    InvalidPlanStatus,
    InvalidStateTransitionException,
    PlanNotFound,
    ProductNotFound,
    dependency_guard,
)
from partsflow.core.locks import PartLockRegistry, get_part_locks
from partsflow.models.production_plan import ProductionPlan
from partsflow.repositories.inventory_repository import InventoryRepository
from partsflow.repositories.product_repository import ProductRepository
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.schemas.production_plan import (
    ConsumptionLine,
    ProductionPlanCreate,
    ProductionPlanResponse,
    ProductionPlanUpdate,
    ProductionStartResponse,
)
from partsflow.services.bom_index import BOMIndex
from partsflow.services.netting_engine import NettingEngine
from partsflow.services.reservation_manager import ReservationManager
from partsflow.services.stock_ledger_service import StockLedgerService
from partsflow.utils.events import (
    EntityCreatedEvent,
    EntityUpdatedEvent,
    PlanStatusChangedEvent,
    get_event_bus,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    "planned": {"in_progress", "cancelled"},
    "in_progress": {"completed"},
}


class ProductionPlanService:

    def __init__(self, db: Session, locks: Optional[PartLockRegistry] = None):
        self._db = db
        self._locks = locks or get_part_locks()
        self._repo = ProductionPlanRepository(db)
        self._product_repo = ProductRepository(db)
        self._inventory_repo = InventoryRepository(db)
        self._bom_index = BOMIndex(db)
        self._engine = NettingEngine(db)
        self._reservations = ReservationManager(db, locks=self._locks)
        self._ledger = StockLedgerService(db, locks=self._locks)
        self._bus = get_event_bus()

    # ── CRUD ─────────────────────────────────────────────────────────────────

    def list_plans(
        self,
        status: Optional[str] = None,
        product_code: Optional[str] = None,
        building_no: Optional[str] = None,
    ) -> List[ProductionPlan]:
        with dependency_guard("production_plans"):
            return self._repo.list_filtered(status=status, product_code=product_code, building_no=building_no)

    def get_plan(self, plan_id: int) -> ProductionPlan:
        with dependency_guard("production_plans"):
            plan = self._repo.get_by_id(plan_id)
        if plan is None:
            raise PlanNotFound(plan_id)
        return plan

    def create_plan(self, data: ProductionPlanCreate, actor: Optional[str] = None) -> ProductionPlan:
        actor = actor or settings.DEFAULT_ACTOR
        with dependency_guard("products"):
            if self._product_repo.get_active(data.product_code) is None:
                raise ProductNotFound(data.product_code)
        if not self._bom_index.resolve_parts(data.product_code):
            raise EmptyBOM(data.product_code)

        with dependency_guard("production_plans", self._db):
            plan = self._repo.create(ProductionPlan(
                building_no=data.building_no,
                product_code=data.product_code,
                planned_quantity=data.planned_quantity,
                start_date=data.start_date,
                status="planned",
                remarks=data.remarks,
                created_by=actor,
            ))
        self._reservations.sync_plan_reservations(plan, actor=actor)

        logger.info(
            "production_plan_created plan_id=%s product_code=%s quantity=%s start_date=%s",
            plan.id,
            plan.product_code,
            plan.planned_quantity,
            plan.start_date.isoformat(),
        )
        self._bus.publish(EntityCreatedEvent(
            entity_type="production_plan",
            entity_id=plan.id,
            user=actor,
            new_values=ProductionPlanResponse.model_validate(plan).model_dump(mode="json"),
        ))
        return plan

    def update_plan(self, plan_id: int, data: ProductionPlanUpdate, actor: Optional[str] = None) -> ProductionPlan:
        actor = actor or settings.DEFAULT_ACTOR
        plan = self.get_plan(plan_id)
        if plan.status != "planned":
            raise InvalidPlanStatus(plan.id, plan.status, "changes")

        updates = data.model_dump(exclude_unset=True)
        old_values = {key: getattr(plan, key) for key in updates}
        with dependency_guard("production_plans", self._db):
            plan = self._repo.update(plan, updates)
        if "planned_quantity" in updates:
            self._reservations.sync_plan_reservations(plan, actor=actor)

        self._bus.publish(EntityUpdatedEvent(
            entity_type="production_plan",
            entity_id=plan.id,
            user=actor,
            old_values={k: str(v) for k, v in old_values.items()},
            new_values={k: str(v) for k, v in updates.items()},
        ))
        return plan

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start_production(
        self,
        plan_id: int,
        actor: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ProductionStartResponse:
        actor = actor or settings.DEFAULT_ACTOR
        plan = self.get_plan(plan_id)
        self._check_transition(plan, "in_progress")

        report = self._engine.calculate_for_plan(plan, today=today)
        if report.shortage_summary.has_shortage:
            raise InsufficientInventory(plan.id, [
                {"part_code": line.part_code, "shortage_quantity": line.shortage_quantity}
                for line in report.shortage_summary.shortage_lines
            ])

        required = {line.part_code: line.required_quantity for line in report.requirements}
        with dependency_guard("inventory_reservations", self._db):
            reserved = self._reservations.reserved_parts(plan.id)
        movements = []
        # Stock issue, reservation removal and the status change commit together
        with self._locks.hold_many(set(required) | reserved):
            with dependency_guard("inventory", self._db):
                on_hand = self._inventory_repo.get_stock_map(required)
            # Receipts still in transit cover the netting but cannot be consumed yet
            missing = [
                {"part_code": code, "shortage_quantity": qty - on_hand.get(code, 0)}
                for code, qty in required.items()
                if on_hand.get(code, 0) < qty
            ]
            if missing:
                raise InsufficientInventory(plan.id, missing)

            try:
                for part_code, quantity in required.items():
                    movements.append(self._ledger.adjust_stock(
                        part_code,
                        -quantity,
                        transaction_type="issue",
                        actor=actor,
                        reference_id=plan.id,
                        reference_type="production_plan",
                        remarks=f"Consumed for production plan {plan.id}",
                        commit=False,
                    ))
                with dependency_guard("inventory_reservations", self._db):
                    released = self._reservations.discard_all(plan.id)
                with dependency_guard("production_plans", self._db):
                    old_status = plan.status
                    plan.status = "in_progress"
                    self._db.commit()
            except Exception:
                self._db.rollback()
                raise
            self._db.refresh(plan)

        for movement in movements:
            self._ledger.announce(movement)
        self._reservations.announce_released(plan.id, released, actor)
        self._announce_transition(plan, old_status, actor)

        return ProductionStartResponse(
            plan=ProductionPlanResponse.model_validate(plan),
            consumed_parts_count=len(movements),
            total_consumed_quantity=sum(-m.quantity for m in movements),
            consumption=[
                ConsumptionLine(
                    part_code=m.part_code,
                    consumed_quantity=-m.quantity,
                    stock_before=m.before_stock,
                    stock_after=m.after_stock,
                )
                for m in movements
            ],
        )

    def complete_production(self, plan_id: int, actor: Optional[str] = None) -> ProductionPlan:
        return self._finish(plan_id, "completed", actor)

    def cancel_plan(self, plan_id: int, actor: Optional[str] = None) -> ProductionPlan:
        return self._finish(plan_id, "cancelled", actor)

    def _finish(self, plan_id: int, new_status: str, actor: Optional[str]) -> ProductionPlan:
        actor = actor or settings.DEFAULT_ACTOR
        plan = self.get_plan(plan_id)
        self._check_transition(plan, new_status)

        old_status = plan.status
        with dependency_guard("production_plans", self._db):
            plan = self._repo.update(plan, {"status": new_status})
        self._reservations.sync_plan_reservations(plan, actor=actor)
        self._announce_transition(plan, old_status, actor)
        return plan

    @staticmethod
    def _check_transition(plan: ProductionPlan, new_status: str) -> None:
        if new_status not in ALLOWED_TRANSITIONS.get(plan.status, set()):
            raise InvalidStateTransitionException("ProductionPlan", plan.status, new_status)

    def _announce_transition(self, plan: ProductionPlan, old_status: str, actor: str) -> None:
        logger.info(
            "production_plan_status_changed plan_id=%s from=%s to=%s",
            plan.id,
            old_status,
            plan.status,
        )
        self._bus.publish(PlanStatusChangedEvent(
            entity_type="production_plan",
            entity_id=plan.id,
            user=actor,
            old_status=old_status,
            new_status=plan.status,
        ))
