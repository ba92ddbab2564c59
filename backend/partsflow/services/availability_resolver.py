"""
Availability Resolver — per-part stock, contention and inbound supply.
"""
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from partsflow.core.exceptions import dependency_guard
from partsflow.repositories.inventory_repository import InventoryRepository
from partsflow.repositories.reservation_repository import ReservationRepository
from partsflow.repositories.scheduled_receipt_repository import ScheduledReceiptRepository
from partsflow.schemas.requirement import AvailabilitySnapshot


class AvailabilityResolver:
    """Pure reads; never mutates stock, reservations or receipts."""

    def __init__(self, db: Session):
        self._inventory_repo = InventoryRepository(db)
        self._reservation_repo = ReservationRepository(db)
        self._receipt_repo = ScheduledReceiptRepository(db)

    def resolve(
        self,
        part_code: str,
        exclude_plan_id: Optional[int],
        cutoff_date: date,
    ) -> AvailabilitySnapshot:
        with dependency_guard("availability"):
            current_stock = self._inventory_repo.get_stock(part_code)
            reserved_by_others = sum(
                qty
                for plan_id, qty in self._reservation_repo.list_for_part(part_code)
                if plan_id != exclude_plan_id
            )
            receipts = sum(self._receipt_repo.list_quantities(part_code, not_after=cutoff_date))

        return AvailabilitySnapshot(
            part_code=part_code,
            cutoff_date=cutoff_date,
            exclude_plan_id=exclude_plan_id,
            current_stock=current_stock,
            total_reserved_by_others=reserved_by_others,
            scheduled_receipts_until_cutoff=receipts,
        )

    def plan_reservation(self, plan_id: int, part_code: str) -> int:
        with dependency_guard("inventory_reservations"):
            qty = self._reservation_repo.get_quantity(plan_id, part_code)
        return qty or 0
