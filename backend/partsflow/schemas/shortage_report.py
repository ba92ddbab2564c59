from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ShortageReportLine(BaseModel):
    plan_id: int
    product_code: str
    production_quantity: int
    production_start_date: date
    part_code: str
    part_name: Optional[str] = None
    supplier: Optional[str] = None
    lead_time_days: Optional[int] = None
    shortage_quantity: int
    required_quantity: int
    current_stock: int
    total_reserved_stock: int
    scheduled_receipts_until_start: int
    available_stock: int
    procurement_due_date: Optional[date] = None
    procurement_priority: str
    overdue_days: int
    estimated_cost: Decimal


class PriorityBreakdown(BaseModel):
    emergency: int = 0
    warning: int = 0
    caution: int = 0
    normal: int = 0


class ShortageReportSummary(BaseModel):
    total_shortage_lines: int
    total_estimated_cost: Decimal
    priority_breakdown: PriorityBreakdown
    max_overdue_days: int
    suppliers_affected: int


class ShortageReport(BaseModel):
    as_of: date
    summary: ShortageReportSummary
    shortage_lines: List[ShortageReportLine]


class SupplierShortageGroup(BaseModel):
    supplier: str
    shortage_lines_count: int
    total_shortage_quantity: int
    total_estimated_cost: Decimal
    earliest_due_date: Optional[date] = None
    max_overdue_days: int
    part_codes: List[str] = Field(default_factory=list)
    lines: List[ShortageReportLine] = Field(default_factory=list)
