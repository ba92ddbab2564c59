from typing import List, Optional

from sqlalchemy.orm import Session

from partsflow.models.production_plan import ProductionPlan, ACTIVE_PLAN_STATUSES
from partsflow.repositories.base import BaseRepository


class ProductionPlanRepository(BaseRepository[ProductionPlan]):
    def __init__(self, db: Session):
        super().__init__(ProductionPlan, db)

    def list_filtered(
        self,
        status: Optional[str] = None,
        product_code: Optional[str] = None,
        building_no: Optional[str] = None,
    ) -> List[ProductionPlan]:
        q = self.db.query(ProductionPlan)
        if status:
            q = q.filter(ProductionPlan.status == status)
        if product_code:
            q = q.filter(ProductionPlan.product_code == product_code)
        if building_no:
            q = q.filter(ProductionPlan.building_no == building_no)
        return q.order_by(ProductionPlan.start_date, ProductionPlan.id).all()

    def list_active(self) -> List[ProductionPlan]:
        return (
            self.db.query(ProductionPlan)
            .filter(ProductionPlan.status.in_(ACTIVE_PLAN_STATUSES))
            .order_by(ProductionPlan.start_date, ProductionPlan.id)
            .all()
        )

    def get_for_update(self, plan_id: int) -> Optional[ProductionPlan]:
        """Row-locked read that bypasses any stale copy in the session."""
        return (
            self.db.query(ProductionPlan)
            .filter(ProductionPlan.id == plan_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
