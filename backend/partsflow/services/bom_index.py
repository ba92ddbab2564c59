"""
BOM Index — flattens a product's bill of materials into per-station rows.
"""
from typing import List

from sqlalchemy.orm import Session

from partsflow.core.exceptions import ProductNotFound, dependency_guard
from partsflow.repositories.bom_repository import BOMRepository
from partsflow.repositories.product_repository import ProductRepository
from partsflow.schemas.requirement import BOMRow


class BOMIndex:

    def __init__(self, db: Session):
        self._repo = BOMRepository(db)
        self._product_repo = ProductRepository(db)

    def resolve_parts(self, product_code: str) -> List[BOMRow]:
        """Raw (station, part, quantity-per-unit) rows for a product.

        A part used at several stations appears once per station; aggregation
        is left to the caller so station attribution survives.
        """
        with dependency_guard("bom"):
            product = self._product_repo.get_active(product_code)
            if product is None:
                raise ProductNotFound(product_code)
            rows = self._repo.list_active_rows(product_code)

        return [
            BOMRow(
                station_code=item.station_code,
                process_group=process_group,
                part_code=item.part_code,
                quantity_per_unit=int(item.quantity),
            )
            for item, process_group in rows
        ]
