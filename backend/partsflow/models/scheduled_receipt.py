from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    CheckConstraint,
    Index,
    func,
)
from partsflow.database import Base

RECEIPT_STATUSES = ("awaiting_confirmation", "scheduled", "received", "cancelled")


class ScheduledReceipt(Base):
    __tablename__ = "scheduled_receipts"
    __table_args__ = (
        CheckConstraint("order_quantity > 0", name="ck_scheduled_receipts_order_quantity_positive"),
        CheckConstraint(
            "scheduled_quantity IS NULL OR scheduled_quantity >= 0",
            name="ck_scheduled_receipts_scheduled_quantity_non_negative",
        ),
        CheckConstraint(
            "status IN ('awaiting_confirmation', 'scheduled', 'received', 'cancelled')",
            name="ck_scheduled_receipts_status",
        ),
        Index("ix_scheduled_receipts_part_status_date", "part_code", "status", "scheduled_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_no = Column(String(20), nullable=False, unique=True)
    part_code = Column(String(30), nullable=False)
    supplier = Column(String(100), nullable=True)
    order_quantity = Column(Integer, nullable=False)
    # Confirmed by the supplier together with scheduled_date
    scheduled_quantity = Column(Integer, nullable=True)
    order_date = Column(Date, nullable=False)
    scheduled_date = Column(Date, nullable=True)
    status = Column(String(30), nullable=False, default="awaiting_confirmation")
    remarks = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=False, default="system")
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
