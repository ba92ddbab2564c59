"""
Shortage Report Service — procurement view of shortages across active plans.

Each shortage line is ranked by how late its procurement already is:

    emergency  due date overdue by SHORTAGE_EMERGENCY_OVERDUE_DAYS or more
    warning    overdue by SHORTAGE_WARNING_OVERDUE_DAYS or more
    caution    due within SHORTAGE_CAUTION_WINDOW_DAYS
    normal     anything later

Lines without a due date (part master missing) cannot be scheduled and are
treated as emergencies.
"""
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from partsflow.config import settings
from partsflow.core.exceptions import EmptyBOM, ProductNotFound, dependency_guard
from partsflow.models.part import Part
from partsflow.repositories.part_repository import PartRepository
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.schemas.requirement import RequirementLine, RequirementReport
from partsflow.schemas.shortage_report import (
    PriorityBreakdown,
    ShortageReport,
    ShortageReportLine,
    ShortageReportSummary,
    SupplierShortageGroup,
)
from partsflow.services.netting_engine import NettingEngine

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"emergency": 0, "warning": 1, "caution": 2, "normal": 3}
UNKNOWN_SUPPLIER = "(unknown)"
CENT = Decimal("0.01")


def procurement_priority(due_date: Optional[date], today: date) -> str:
    if due_date is None:
        return "emergency"
    days_until_due = (due_date - today).days
    if -days_until_due >= settings.SHORTAGE_EMERGENCY_OVERDUE_DAYS:
        return "emergency"
    if -days_until_due >= settings.SHORTAGE_WARNING_OVERDUE_DAYS:
        return "warning"
    if days_until_due <= settings.SHORTAGE_CAUTION_WINDOW_DAYS:
        return "caution"
    return "normal"


def overdue_days(due_date: Optional[date], today: date) -> int:
    if due_date is None:
        return 0
    return max(0, (today - due_date).days)


class ShortageReportService:

    def __init__(self, db: Session):
        self._plan_repo = ProductionPlanRepository(db)
        self._part_repo = PartRepository(db)
        self._engine = NettingEngine(db)

    def list_shortages(self, today: Optional[date] = None) -> ShortageReport:
        today = today or date.today()
        lines = self._collect_lines(today)

        breakdown = PriorityBreakdown()
        for line in lines:
            setattr(breakdown, line.procurement_priority, getattr(breakdown, line.procurement_priority) + 1)

        return ShortageReport(
            as_of=today,
            summary=ShortageReportSummary(
                total_shortage_lines=len(lines),
                total_estimated_cost=sum((line.estimated_cost for line in lines), Decimal("0.00")),
                priority_breakdown=breakdown,
                max_overdue_days=max((line.overdue_days for line in lines), default=0),
                suppliers_affected=len({line.supplier or UNKNOWN_SUPPLIER for line in lines}),
            ),
            shortage_lines=lines,
        )

    def shortages_by_supplier(self, today: Optional[date] = None) -> List[SupplierShortageGroup]:
        today = today or date.today()
        grouped: Dict[str, List[ShortageReportLine]] = OrderedDict()
        for line in self._collect_lines(today):
            grouped.setdefault(line.supplier or UNKNOWN_SUPPLIER, []).append(line)

        groups = []
        for supplier, lines in grouped.items():
            due_dates = [line.procurement_due_date for line in lines if line.procurement_due_date is not None]
            groups.append(SupplierShortageGroup(
                supplier=supplier,
                shortage_lines_count=len(lines),
                total_shortage_quantity=sum(line.shortage_quantity for line in lines),
                total_estimated_cost=sum((line.estimated_cost for line in lines), Decimal("0.00")),
                earliest_due_date=min(due_dates) if due_dates else None,
                max_overdue_days=max(line.overdue_days for line in lines),
                part_codes=sorted({line.part_code for line in lines}),
                lines=lines,
            ))
        groups.sort(key=lambda g: (-g.total_estimated_cost, g.supplier))
        return groups

    def _collect_lines(self, today: date) -> List[ShortageReportLine]:
        with dependency_guard("production_plans"):
            plans = self._plan_repo.list_active()

        reports: List[RequirementReport] = []
        for plan in plans:
            try:
                reports.append(self._engine.calculate_for_plan(plan, today=today))
            except (EmptyBOM, ProductNotFound) as exc:
                logger.warning("shortage_report_plan_skipped plan_id=%s reason=%s", plan.id, exc.code)

        short_codes = {
            line.part_code
            for report in reports
            for line in report.shortage_summary.shortage_lines
        }
        with dependency_guard("parts"):
            parts = self._part_repo.get_active_map(short_codes)

        lines = [
            self._to_line(report, line, parts.get(line.part_code), today)
            for report in reports
            for line in report.shortage_summary.shortage_lines
        ]
        lines.sort(key=lambda l: (
            PRIORITY_RANK[l.procurement_priority],
            l.procurement_due_date is None,
            l.procurement_due_date or date.max,
            -l.shortage_quantity,
            l.plan_id,
            l.part_code,
        ))
        return lines

    @staticmethod
    def _to_line(
        report: RequirementReport,
        line: RequirementLine,
        part: Optional[Part],
        today: date,
    ) -> ShortageReportLine:
        unit_price = Decimal(str(part.unit_price or 0)) if part is not None else Decimal("0")
        return ShortageReportLine(
            plan_id=report.plan_id,
            product_code=report.product_code,
            production_quantity=report.planned_quantity,
            production_start_date=report.start_date,
            part_code=line.part_code,
            part_name=part.part_name if part is not None else None,
            supplier=line.supplier,
            lead_time_days=line.lead_time_days,
            shortage_quantity=line.shortage_quantity,
            required_quantity=line.required_quantity,
            current_stock=line.current_stock,
            total_reserved_stock=line.total_reserved_stock,
            scheduled_receipts_until_start=line.scheduled_receipts_until_start,
            available_stock=line.available_stock,
            procurement_due_date=line.procurement_due_date,
            procurement_priority=procurement_priority(line.procurement_due_date, today),
            overdue_days=overdue_days(line.procurement_due_date, today),
            estimated_cost=(unit_price * line.shortage_quantity).quantize(CENT, rounding=ROUND_HALF_UP),
        )
