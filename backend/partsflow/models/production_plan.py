from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from partsflow.database import Base

PLAN_STATUSES = ("planned", "in_progress", "completed", "cancelled")
ACTIVE_PLAN_STATUSES = ("planned", "in_progress")


class ProductionPlan(Base):
    __tablename__ = "production_plans"
    __table_args__ = (
        CheckConstraint("planned_quantity > 0", name="ck_production_plans_quantity_positive"),
        CheckConstraint(
            "status IN ('planned', 'in_progress', 'completed', 'cancelled')",
            name="ck_production_plans_status",
        ),
        Index("ix_production_plans_status_start", "status", "start_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    building_no = Column(String(10), nullable=True)
    product_code = Column(String(20), ForeignKey("products.product_code"), nullable=False, index=True)
    planned_quantity = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="planned")
    remarks = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=False, default="system")
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_PLAN_STATUSES
