from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from partsflow.models.inventory import Inventory, InventoryTransaction
from partsflow.repositories.base import BaseRepository


class InventoryRepository(BaseRepository[Inventory]):
    def __init__(self, db: Session):
        super().__init__(Inventory, db)

    def get_stock(self, part_code: str) -> int:
        """Current on-hand quantity; a part without a record has none."""
        row = self.db.query(Inventory.current_stock).filter(Inventory.part_code == part_code).first()
        if row is None or row[0] is None:
            return 0
        return int(row[0])

    def get_stock_map(self, part_codes: Iterable[str]) -> Dict[str, int]:
        codes = list(set(part_codes))
        if not codes:
            return {}
        rows = (
            self.db.query(Inventory.part_code, Inventory.current_stock)
            .filter(Inventory.part_code.in_(codes))
            .all()
        )
        return {code: int(stock or 0) for code, stock in rows}

    def get_for_update(self, part_code: str) -> Optional[Inventory]:
        return (
            self.db.query(Inventory)
            .filter(Inventory.part_code == part_code)
            .with_for_update()
            .first()
        )

    def add_transaction(self, transaction: InventoryTransaction) -> InventoryTransaction:
        self.db.add(transaction)
        self.db.flush()
        return transaction
