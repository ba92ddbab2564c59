from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from partsflow.models.production_plan import ProductionPlan, ACTIVE_PLAN_STATUSES
from partsflow.models.reservation import InventoryReservation
from partsflow.repositories.base import BaseRepository


class ReservationRepository(BaseRepository[InventoryReservation]):
    def __init__(self, db: Session):
        super().__init__(InventoryReservation, db)

    def list_for_part(self, part_code: str) -> List[Tuple[int, int]]:
        """(plan_id, quantity) of every reservation held by an active plan."""
        rows = (
            self.db.query(InventoryReservation.production_plan_id, InventoryReservation.reserved_quantity)
            .join(ProductionPlan, ProductionPlan.id == InventoryReservation.production_plan_id)
            .filter(
                InventoryReservation.part_code == part_code,
                ProductionPlan.status.in_(ACTIVE_PLAN_STATUSES),
            )
            .order_by(InventoryReservation.production_plan_id)
            .all()
        )
        return [(int(plan_id), int(qty or 0)) for plan_id, qty in rows]

    def get_quantity(self, plan_id: int, part_code: str) -> Optional[int]:
        row = (
            self.db.query(InventoryReservation.reserved_quantity)
            .filter(
                InventoryReservation.production_plan_id == plan_id,
                InventoryReservation.part_code == part_code,
            )
            .first()
        )
        return None if row is None else int(row[0] or 0)

    def get_for_update(self, plan_id: int, part_code: str) -> Optional[InventoryReservation]:
        return (
            self.db.query(InventoryReservation)
            .filter(
                InventoryReservation.production_plan_id == plan_id,
                InventoryReservation.part_code == part_code,
            )
            .with_for_update()
            .first()
        )

    def list_for_plan(self, plan_id: int) -> List[InventoryReservation]:
        return (
            self.db.query(InventoryReservation)
            .filter(InventoryReservation.production_plan_id == plan_id)
            .order_by(InventoryReservation.part_code)
            .all()
        )

    def list_orphaned(self) -> List[InventoryReservation]:
        return (
            self.db.query(InventoryReservation)
            .outerjoin(ProductionPlan, ProductionPlan.id == InventoryReservation.production_plan_id)
            .filter(ProductionPlan.id.is_(None))
            .order_by(InventoryReservation.production_plan_id, InventoryReservation.part_code)
            .all()
        )

    def list_status_mismatches(self) -> List[Tuple[int, str, int]]:
        """(plan_id, status, reservation_count) for finished plans still holding stock."""
        rows = (
            self.db.query(
                ProductionPlan.id,
                ProductionPlan.status,
                func.count(InventoryReservation.id),
            )
            .join(InventoryReservation, InventoryReservation.production_plan_id == ProductionPlan.id)
            .filter(ProductionPlan.status.notin_(ACTIVE_PLAN_STATUSES))
            .group_by(ProductionPlan.id, ProductionPlan.status)
            .order_by(ProductionPlan.id)
            .all()
        )
        return [(int(plan_id), status, int(count)) for plan_id, status, count in rows]

    def active_totals_by_part(self) -> Dict[str, int]:
        rows = (
            self.db.query(InventoryReservation.part_code, func.sum(InventoryReservation.reserved_quantity))
            .join(ProductionPlan, ProductionPlan.id == InventoryReservation.production_plan_id)
            .filter(ProductionPlan.status.in_(ACTIVE_PLAN_STATUSES))
            .group_by(InventoryReservation.part_code)
            .all()
        )
        return {code: int(total or 0) for code, total in rows}
