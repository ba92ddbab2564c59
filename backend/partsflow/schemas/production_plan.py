from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProductionPlanCreate(BaseModel):
    product_code: str = Field(min_length=1, max_length=20)
    planned_quantity: int = Field(gt=0)
    start_date: date
    building_no: Optional[str] = Field(default=None, max_length=10)
    remarks: Optional[str] = None


class ProductionPlanUpdate(BaseModel):
    planned_quantity: Optional[int] = Field(default=None, gt=0)
    start_date: Optional[date] = None
    building_no: Optional[str] = Field(default=None, max_length=10)
    remarks: Optional[str] = None

    @field_validator("planned_quantity", "start_date")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class ProductionPlanResponse(BaseModel):
    id: int
    building_no: Optional[str] = None
    product_code: str
    planned_quantity: int
    start_date: date
    status: str
    remarks: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConsumptionLine(BaseModel):
    part_code: str
    consumed_quantity: int
    stock_before: int
    stock_after: int


class ProductionStartResponse(BaseModel):
    plan: ProductionPlanResponse
    consumed_parts_count: int
    total_consumed_quantity: int
    consumption: List[ConsumptionLine]
