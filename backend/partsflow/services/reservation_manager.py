"""
Reservation Manager — owns every write to ``inventory_reservations``.

A reservation is an explicit commitment of stock to an active production plan.
Writes for a part run inside that part's critical section so concurrent
changes to the same part serialize while different parts proceed in parallel.
Calculating requirements never creates reservations; they follow plan
lifecycle transitions through ``sync_plan_reservations``.
"""
import logging
from typing import List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from partsflow.config import settings
from partsflow.core.exceptions import (
    BusinessRuleViolationException,
    InvalidPlanStatus,
    PlanNotFound,
    dependency_guard,
)
from partsflow.core.locks import PartLockRegistry, get_part_locks
from partsflow.models.production_plan import ProductionPlan
from partsflow.models.reservation import InventoryReservation
from partsflow.repositories.inventory_repository import InventoryRepository
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.repositories.reservation_repository import ReservationRepository
from partsflow.repositories.scheduled_receipt_repository import ScheduledReceiptRepository
from partsflow.schemas.reservation import (
    OrphanedReservation,
    OverCommittedPart,
    ReleaseResponse,
    ReservationIntegrityReport,
    ReservationResponse,
    ReservationStatusResponse,
    StatusMismatch,
)
from partsflow.services.bom_index import BOMIndex
from partsflow.services.netting_engine import aggregate_requirements
from partsflow.utils.events import ReservationChangedEvent, get_event_bus

logger = logging.getLogger(__name__)

# Bounded retries when new parts get reserved for a plan while it is being released
_RELEASE_ALL_ATTEMPTS = 5


class ReservationManager:

    def __init__(self, db: Session, locks: Optional[PartLockRegistry] = None):
        self._db = db
        self._repo = ReservationRepository(db)
        self._plan_repo = ProductionPlanRepository(db)
        self._inventory_repo = InventoryRepository(db)
        self._receipt_repo = ScheduledReceiptRepository(db)
        self._bom_index = BOMIndex(db)
        self._locks = locks or get_part_locks()
        self._bus = get_event_bus()

    # ── Commit / release ─────────────────────────────────────────────────────

    def reserve(
        self,
        plan_id: int,
        part_code: str,
        quantity: int,
        actor: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> InventoryReservation:
        """Set the plan's reservation for a part; repeated calls replace, never add."""
        if quantity <= 0:
            raise BusinessRuleViolationException(
                f"Reservation quantity must be positive, got {quantity}.",
                code="INVALID_RESERVATION_QUANTITY",
            )
        actor = actor or settings.DEFAULT_ACTOR
        self._get_active_plan(plan_id, action="reservation")

        with self._locks.hold(part_code):
            # The plan may have been cancelled or completed while waiting for the part
            plan = self._get_active_plan(plan_id, action="reservation", for_update=True)
            with dependency_guard("inventory_reservations", self._db):
                reservation = self._repo.get_for_update(plan.id, part_code)
                old_quantity = 0
                if reservation is None:
                    reservation = InventoryReservation(
                        production_plan_id=plan.id,
                        part_code=part_code,
                        reserved_quantity=quantity,
                        remarks=remarks or f"Plan {plan.id} ({plan.product_code})",
                        created_by=actor,
                    )
                    self._db.add(reservation)
                else:
                    old_quantity = int(reservation.reserved_quantity or 0)
                    reservation.reserved_quantity = quantity
                    reservation.reservation_date = func.now()
                    if remarks:
                        reservation.remarks = remarks
                self._db.commit()
                self._db.refresh(reservation)

        if old_quantity != quantity:
            logger.info(
                "reservation_set plan_id=%s part_code=%s old_quantity=%s new_quantity=%s",
                plan.id,
                part_code,
                old_quantity,
                quantity,
            )
            self._bus.publish(ReservationChangedEvent(
                entity_type="inventory_reservation",
                entity_id=reservation.id,
                user=actor,
                part_code=part_code,
                old_quantity=old_quantity,
                new_quantity=quantity,
            ))
        return reservation

    def release(self, plan_id: int, part_code: str, actor: Optional[str] = None) -> bool:
        with self._locks.hold(part_code), dependency_guard("inventory_reservations", self._db):
            reservation = self._repo.get_for_update(plan_id, part_code)
            if reservation is None:
                return False
            old_quantity = int(reservation.reserved_quantity or 0)
            reservation_id = reservation.id
            self._db.delete(reservation)
            self._db.commit()

        logger.info("reservation_released plan_id=%s part_code=%s quantity=%s", plan_id, part_code, old_quantity)
        self._bus.publish(ReservationChangedEvent(
            entity_type="inventory_reservation",
            entity_id=reservation_id,
            user=actor or settings.DEFAULT_ACTOR,
            part_code=part_code,
            old_quantity=old_quantity,
            new_quantity=0,
        ))
        return True

    def release_all(self, plan_id: int, actor: Optional[str] = None) -> ReleaseResponse:
        released: List[Tuple[str, int]] = []
        for _ in range(_RELEASE_ALL_ATTEMPTS):
            with dependency_guard("inventory_reservations", self._db):
                codes = self.reserved_parts(plan_id)
            if not codes:
                break
            with self._locks.hold_many(codes), dependency_guard("inventory_reservations", self._db):
                if not self.reserved_parts(plan_id) <= codes:
                    # A part was reserved after the locks were chosen; take them again
                    continue
                released = self.discard_all(plan_id)
                self._db.commit()
            break
        else:
            raise BusinessRuleViolationException(
                f"Reservations of plan {plan_id} kept changing while being released.",
                code="RESERVATION_RELEASE_CONFLICT",
            )

        self.announce_released(plan_id, released, actor)
        return ReleaseResponse(
            plan_id=plan_id,
            released_count=len(released),
            released_parts=sorted(code for code, _ in released),
        )

    def reserved_parts(self, plan_id: int) -> Set[str]:
        return {r.part_code for r in self._repo.list_for_plan(plan_id)}

    def discard_all(self, plan_id: int) -> List[Tuple[str, int]]:
        """Delete every reservation of the plan inside the caller's transaction.

        The caller must hold the locks of the plan's reserved parts, commit, and
        then pass the result to ``announce_released``.
        """
        released = []
        for row in self._repo.list_for_plan(plan_id):
            released.append((row.part_code, int(row.reserved_quantity or 0)))
            self._db.delete(row)
        self._db.flush()
        return released

    def announce_released(self, plan_id: int, released: List[Tuple[str, int]], actor: Optional[str] = None) -> None:
        if not released:
            return
        logger.info("reservations_released plan_id=%s count=%s", plan_id, len(released))
        for part_code, quantity in released:
            self._bus.publish(ReservationChangedEvent(
                entity_type="production_plan",
                entity_id=plan_id,
                user=actor or settings.DEFAULT_ACTOR,
                part_code=part_code,
                old_quantity=quantity,
                new_quantity=0,
            ))

    def sync_plan_reservations(self, plan: ProductionPlan, actor: Optional[str] = None) -> List[InventoryReservation]:
        """Make the plan's reservations match its current BOM requirement.

        Inactive plans hold nothing. Active plans reserve the aggregated
        requirement of every part and drop parts no longer in the BOM.
        """
        if not plan.is_active:
            self.release_all(plan.id, actor=actor)
            return []

        demand = aggregate_requirements(self._bom_index.resolve_parts(plan.product_code), plan.planned_quantity)
        with dependency_guard("inventory_reservations"):
            existing = {r.part_code for r in self._repo.list_for_plan(plan.id)}

        for stale in sorted(existing - set(demand)):
            self.release(plan.id, stale, actor=actor)

        return [
            self.reserve(plan.id, code, entry.required_quantity, actor=actor)
            for code, entry in demand.items()
            if entry.required_quantity > 0
        ]

    # ── Queries ──────────────────────────────────────────────────────────────

    def reservation_status(self, plan_id: int) -> ReservationStatusResponse:
        with dependency_guard("inventory_reservations"):
            if self._plan_repo.get_by_id(plan_id) is None:
                raise PlanNotFound(plan_id)
            rows = self._repo.list_for_plan(plan_id)
        return ReservationStatusResponse(
            plan_id=plan_id,
            reservations=[ReservationResponse.model_validate(r) for r in rows],
            total_parts=len(rows),
            total_reserved_quantity=sum(int(r.reserved_quantity or 0) for r in rows),
        )

    def check_integrity(self) -> ReservationIntegrityReport:
        with dependency_guard("inventory_reservations"):
            orphaned = self._repo.list_orphaned()
            mismatches = self._repo.list_status_mismatches()
            reserved = self._repo.active_totals_by_part()
            stock = self._inventory_repo.get_stock_map(reserved.keys())
            inbound = self._receipt_repo.inbound_totals_by_part()

        over_committed = []
        for part_code in sorted(reserved):
            supply = stock.get(part_code, 0) + inbound.get(part_code, 0)
            excess = reserved[part_code] - supply
            if excess > 0:
                logger.warning(
                    "reservations_over_committed part_code=%s reserved=%s supply=%s",
                    part_code,
                    reserved[part_code],
                    supply,
                )
                over_committed.append(OverCommittedPart(
                    part_code=part_code,
                    total_reserved=reserved[part_code],
                    current_stock=stock.get(part_code, 0),
                    scheduled_inbound=inbound.get(part_code, 0),
                    excess_quantity=excess,
                ))

        healthy = not orphaned and not mismatches and not over_committed
        return ReservationIntegrityReport(
            overall_status="HEALTHY" if healthy else "ISSUES_FOUND",
            orphaned_reservations=[
                OrphanedReservation(
                    id=r.id,
                    production_plan_id=r.production_plan_id,
                    part_code=r.part_code,
                    reserved_quantity=r.reserved_quantity,
                )
                for r in orphaned
            ],
            status_mismatches=[
                StatusMismatch(plan_id=plan_id, status=status, reservation_count=count)
                for plan_id, status, count in mismatches
            ],
            over_committed_parts=over_committed,
        )

    def _get_active_plan(self, plan_id: int, action: str, for_update: bool = False) -> ProductionPlan:
        with dependency_guard("production_plans", self._db if for_update else None):
            if for_update:
                plan = self._plan_repo.get_for_update(plan_id)
            else:
                plan = self._plan_repo.get_by_id(plan_id)
        if plan is None:
            raise PlanNotFound(plan_id)
        if not plan.is_active:
            plan_status = plan.status
            if for_update:
                self._db.rollback()
            raise InvalidPlanStatus(plan_id, plan_status, action)
        return plan
