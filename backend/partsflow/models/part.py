from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Text,
    Boolean,
    DateTime,
    CheckConstraint,
    Index,
    func,
)
from partsflow.database import Base


class Part(Base):
    __tablename__ = "parts"
    __table_args__ = (
        CheckConstraint("lead_time_days >= 0", name="ck_parts_lead_time_non_negative"),
        CheckConstraint("safety_stock >= 0", name="ck_parts_safety_stock_non_negative"),
        Index("ix_parts_supplier", "supplier"),
        Index("ix_parts_active", "is_active"),
    )

    part_code = Column(String(30), primary_key=True)
    part_name = Column(String(100), nullable=False)
    specification = Column(String(200), nullable=True)
    unit = Column(String(10), nullable=False, default="pcs")
    lead_time_days = Column(Integer, nullable=False, default=7)
    safety_stock = Column(Integer, nullable=False, default=0)
    supplier = Column(String(100), nullable=True)
    category = Column(String(50), nullable=True)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
