from datetime import date
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from partsflow.models.scheduled_receipt import ScheduledReceipt
from partsflow.repositories.base import BaseRepository

INBOUND_STATUS = "scheduled"


class ScheduledReceiptRepository(BaseRepository[ScheduledReceipt]):
    def __init__(self, db: Session):
        super().__init__(ScheduledReceipt, db)

    def list_quantities(self, part_code: str, not_after: date) -> List[int]:
        """Confirmed inbound quantities for a part arriving on or before ``not_after``."""
        rows = (
            self.db.query(ScheduledReceipt.scheduled_quantity)
            .filter(
                ScheduledReceipt.part_code == part_code,
                ScheduledReceipt.status == INBOUND_STATUS,
                ScheduledReceipt.scheduled_date.isnot(None),
                ScheduledReceipt.scheduled_date <= not_after,
                ScheduledReceipt.scheduled_quantity.isnot(None),
            )
            .order_by(ScheduledReceipt.scheduled_date, ScheduledReceipt.id)
            .all()
        )
        return [int(qty) for (qty,) in rows]

    def inbound_totals_by_part(self) -> Dict[str, int]:
        rows = (
            self.db.query(ScheduledReceipt.part_code, func.sum(ScheduledReceipt.scheduled_quantity))
            .filter(
                ScheduledReceipt.status == INBOUND_STATUS,
                ScheduledReceipt.scheduled_quantity.isnot(None),
            )
            .group_by(ScheduledReceipt.part_code)
            .all()
        )
        return {code: int(total or 0) for code, total in rows}
