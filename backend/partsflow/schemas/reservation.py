from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReservationRequest(BaseModel):
    quantity: int = Field(gt=0)
    remarks: Optional[str] = None


class ReservationResponse(BaseModel):
    id: int
    production_plan_id: int
    part_code: str
    reserved_quantity: int
    reservation_date: datetime
    remarks: Optional[str] = None
    created_by: str

    class Config:
        from_attributes = True


class ReservationStatusResponse(BaseModel):
    plan_id: int
    reservations: List[ReservationResponse]
    total_parts: int
    total_reserved_quantity: int


class ReleaseResponse(BaseModel):
    plan_id: int
    released_count: int
    released_parts: List[str]


class OrphanedReservation(BaseModel):
    id: int
    production_plan_id: int
    part_code: str
    reserved_quantity: int


class StatusMismatch(BaseModel):
    plan_id: int
    status: str
    reservation_count: int


class OverCommittedPart(BaseModel):
    part_code: str
    total_reserved: int
    current_stock: int
    scheduled_inbound: int
    excess_quantity: int


class ReservationIntegrityReport(BaseModel):
    overall_status: str
    orphaned_reservations: List[OrphanedReservation]
    status_mismatches: List[StatusMismatch]
    over_committed_parts: List[OverCommittedPart]
