from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class StockAdjustmentRequest(BaseModel):
    quantity: int
    transaction_type: str = Field(default="adjustment", pattern="^(receipt|issue|adjustment|stocktake|initial)$")
    remarks: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def quantity_not_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("quantity must be non-zero")
        return value


class StockMovementResponse(BaseModel):
    id: int
    part_code: str
    transaction_type: str
    quantity: int
    before_stock: int
    after_stock: int
    reference_id: Optional[int] = None
    reference_type: Optional[str] = None
    transaction_date: datetime
    remarks: Optional[str] = None
    created_by: str

    class Config:
        from_attributes = True


class ReceiptReceiveResponse(BaseModel):
    receipt_id: int
    order_no: str
    part_code: str
    received_quantity: int
    received_on: date
    movement: StockMovementResponse
