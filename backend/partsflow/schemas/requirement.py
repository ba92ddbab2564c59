from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class BOMRow(BaseModel):
    station_code: str
    process_group: str = ""
    part_code: str
    quantity_per_unit: int


class AvailabilitySnapshot(BaseModel):
    part_code: str
    cutoff_date: date
    exclude_plan_id: Optional[int] = None
    current_stock: int
    total_reserved_by_others: int
    scheduled_receipts_until_cutoff: int


class StationUsage(BaseModel):
    station_code: str
    process_group: str = ""
    unit_quantity: int
    required_quantity: int


class RequirementLine(BaseModel):
    part_code: str
    required_quantity: int
    current_stock: int
    total_reserved_stock: int
    plan_reserved_quantity: int
    scheduled_receipts_until_start: int
    available_stock: int
    shortage_quantity: int
    is_sufficient: bool
    is_awaiting_receipt: bool = False
    procurement_due_date: Optional[date] = None
    is_lead_time_breached: bool = False
    supplier: Optional[str] = None
    lead_time_days: Optional[int] = None
    part_master_missing: bool = False
    used_in_stations: List[str] = Field(default_factory=list)
    station_breakdown: List[StationUsage] = Field(default_factory=list)


class ShortageSummary(BaseModel):
    has_shortage: bool
    shortage_count: int
    total_shortage_quantity: int = 0
    shortage_lines: List[RequirementLine] = Field(default_factory=list)


class RequirementReport(BaseModel):
    plan_id: int
    product_code: str
    planned_quantity: int
    start_date: date
    status: str
    requirements: List[RequirementLine]
    shortage_summary: ShortageSummary
    total_parts_count: int
    sufficient_parts_count: int
