from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    CheckConstraint,
    Index,
    func,
)
from partsflow.database import Base

TRANSACTION_TYPES = ("receipt", "issue", "adjustment", "stocktake", "initial")


class Inventory(Base):
    __tablename__ = "inventory"

    part_code = Column(String(30), primary_key=True)
    current_stock = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    created_at = Column(DateTime, default=func.now())


class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        CheckConstraint(
            "transaction_type IN ('receipt', 'issue', 'adjustment', 'stocktake', 'initial')",
            name="ck_inventory_transactions_type",
        ),
        Index("ix_inventory_transactions_part_date", "part_code", "transaction_date"),
        Index("ix_inventory_transactions_reference", "reference_type", "reference_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    part_code = Column(String(30), nullable=False)
    transaction_type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    before_stock = Column(Integer, nullable=False)
    after_stock = Column(Integer, nullable=False)
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String(50), nullable=True)
    transaction_date = Column(DateTime, default=func.now(), nullable=False)
    remarks = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=False, default="system")
