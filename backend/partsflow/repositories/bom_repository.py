from typing import List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from partsflow.models.bom import BOMItem
from partsflow.models.product import WorkStation
from partsflow.repositories.base import BaseRepository


class BOMRepository(BaseRepository[BOMItem]):
    def __init__(self, db: Session):
        super().__init__(BOMItem, db)

    def list_active_rows(self, product_code: str) -> List[Tuple[BOMItem, str]]:
        """Active BOM rows of a product with the process group of their station.

        Rows attached to a deactivated station are dropped; rows whose station
        record is missing are kept with an empty process group.
        """
        rows = (
            self.db.query(BOMItem, WorkStation.process_group)
            .outerjoin(WorkStation, WorkStation.station_code == BOMItem.station_code)
            .filter(
                BOMItem.product_code == product_code,
                BOMItem.is_active.is_(True),
                or_(WorkStation.station_code.is_(None), WorkStation.is_active.is_(True)),
            )
            .order_by(WorkStation.process_group, BOMItem.station_code, BOMItem.part_code)
            .all()
        )
        return [(item, process_group or "") for item, process_group in rows]
