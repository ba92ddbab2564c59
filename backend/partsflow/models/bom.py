from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
    func,
)
from partsflow.database import Base


class BOMItem(Base):
    __tablename__ = "bom_items"
    __table_args__ = (
        UniqueConstraint("product_code", "station_code", "part_code", name="uq_bom_product_station_part"),
        CheckConstraint("quantity > 0", name="ck_bom_items_quantity_positive"),
        Index("ix_bom_items_product_active", "product_code", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_code = Column(String(20), ForeignKey("products.product_code", ondelete="CASCADE"), nullable=False)
    station_code = Column(String(20), ForeignKey("work_stations.station_code", ondelete="CASCADE"), nullable=False)
    # No FK to parts: a BOM row may outlive its part master record
    part_code = Column(String(30), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    remarks = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
