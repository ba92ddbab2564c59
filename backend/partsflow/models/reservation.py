from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    CheckConstraint,
    UniqueConstraint,
    Index,
    func,
)
from partsflow.database import Base


class InventoryReservation(Base):
    __tablename__ = "inventory_reservations"
    __table_args__ = (
        UniqueConstraint("production_plan_id", "part_code", name="uq_inventory_reservations_plan_part"),
        CheckConstraint("reserved_quantity >= 0", name="ck_inventory_reservations_quantity_non_negative"),
        Index("ix_inventory_reservations_part", "part_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # No FK to production_plans; orphaned rows are reported by the integrity check
    production_plan_id = Column(Integer, nullable=False, index=True)
    part_code = Column(String(30), nullable=False)
    reserved_quantity = Column(Integer, nullable=False)
    reservation_date = Column(DateTime, default=func.now(), nullable=False)
    remarks = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=False, default="system")
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
