"""
Netting Engine — material requirements and shortages for a production plan.

For every part in the plan's bill of materials:

    required  = Σ quantity_per_unit(station, part) × planned_quantity
    available = current_stock − reserved_by_other_plans
                + receipts_arriving_by_start + own_reservation
    shortage  = max(0, required − available)

Parts that come up short get a procurement due date of
``start_date − lead_time_days`` (plain calendar days). Calculation is read-only
and deterministic for unchanged data.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from partsflow.core.exceptions import EmptyBOM, InvalidPlanStatus, PlanNotFound, dependency_guard
from partsflow.models.part import Part
from partsflow.models.production_plan import ProductionPlan, ACTIVE_PLAN_STATUSES
from partsflow.repositories.part_repository import PartRepository
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.schemas.requirement import (
    BOMRow,
    RequirementLine,
    RequirementReport,
    ShortageSummary,
    StationUsage,
)
from partsflow.services.availability_resolver import AvailabilityResolver
from partsflow.services.bom_index import BOMIndex

logger = logging.getLogger(__name__)


@dataclass
class PartDemand:
    part_code: str
    required_quantity: int = 0
    stations: List[StationUsage] = field(default_factory=list)

    @property
    def station_codes(self) -> List[str]:
        seen: List[str] = []
        for usage in self.stations:
            if usage.station_code not in seen:
                seen.append(usage.station_code)
        return seen


def aggregate_requirements(rows: Iterable[BOMRow], planned_quantity: int) -> Dict[str, PartDemand]:
    """Fold per-station BOM rows into one demand per part code, sorted by part."""
    demand: Dict[str, PartDemand] = {}
    for row in rows:
        required = row.quantity_per_unit * planned_quantity
        entry = demand.setdefault(row.part_code, PartDemand(part_code=row.part_code))
        entry.required_quantity += required
        entry.stations.append(
            StationUsage(
                station_code=row.station_code,
                process_group=row.process_group,
                unit_quantity=row.quantity_per_unit,
                required_quantity=required,
            )
        )
    return {code: demand[code] for code in sorted(demand)}


class NettingEngine:

    def __init__(self, db: Session):
        self._plan_repo = ProductionPlanRepository(db)
        self._part_repo = PartRepository(db)
        self._bom_index = BOMIndex(db)
        self._resolver = AvailabilityResolver(db)

    def calculate(self, plan_id: int, today: Optional[date] = None) -> RequirementReport:
        with dependency_guard("production_plans"):
            plan = self._plan_repo.get_by_id(plan_id)
        if plan is None:
            raise PlanNotFound(plan_id)
        return self.calculate_for_plan(plan, today=today)

    def calculate_for_plan(self, plan: ProductionPlan, today: Optional[date] = None) -> RequirementReport:
        if plan.status not in ACTIVE_PLAN_STATUSES:
            raise InvalidPlanStatus(plan.id, plan.status, "requirement calculation")

        today = today or date.today()
        logger.info(
            "requirements_calculation_started plan_id=%s product_code=%s planned_quantity=%s",
            plan.id,
            plan.product_code,
            plan.planned_quantity,
        )

        rows = self._bom_index.resolve_parts(plan.product_code)
        if not rows:
            raise EmptyBOM(plan.product_code)

        demand = aggregate_requirements(rows, plan.planned_quantity)
        with dependency_guard("parts"):
            parts = self._part_repo.get_active_map(demand.keys())

        lines = [
            self._build_line(plan, entry, parts.get(code), today)
            for code, entry in demand.items()
        ]
        report = self._assemble(plan, lines)

        logger.info(
            "requirements_calculation_completed plan_id=%s parts=%s shortages=%s",
            plan.id,
            report.total_parts_count,
            report.shortage_summary.shortage_count,
        )
        return report

    def _build_line(
        self,
        plan: ProductionPlan,
        entry: PartDemand,
        part: Optional[Part],
        today: date,
    ) -> RequirementLine:
        snapshot = self._resolver.resolve(
            entry.part_code,
            exclude_plan_id=plan.id,
            cutoff_date=plan.start_date,
        )
        own_reserved = self._resolver.plan_reservation(plan.id, entry.part_code)

        # Own reservation is stock already set aside for this plan, not contention
        available = (
            snapshot.current_stock
            - snapshot.total_reserved_by_others
            + snapshot.scheduled_receipts_until_cutoff
            + own_reserved
        )
        shortage = max(0, entry.required_quantity - available)

        supplier = None
        lead_time_days = None
        due_date = None
        if part is None:
            logger.warning(
                "part_master_missing plan_id=%s part_code=%s",
                plan.id,
                entry.part_code,
            )
        else:
            supplier = part.supplier
            lead_time_days = int(part.lead_time_days or 0)
            if shortage > 0:
                due_date = plan.start_date - timedelta(days=lead_time_days)

        breached = due_date is not None and due_date < today
        if breached:
            logger.warning(
                "lead_time_breach plan_id=%s part_code=%s due_date=%s",
                plan.id,
                entry.part_code,
                due_date.isoformat(),
            )

        return RequirementLine(
            part_code=entry.part_code,
            required_quantity=entry.required_quantity,
            current_stock=snapshot.current_stock,
            total_reserved_stock=snapshot.total_reserved_by_others,
            plan_reserved_quantity=own_reserved,
            scheduled_receipts_until_start=snapshot.scheduled_receipts_until_cutoff,
            available_stock=available,
            shortage_quantity=shortage,
            is_sufficient=shortage == 0,
            is_awaiting_receipt=shortage == 0 and snapshot.current_stock < entry.required_quantity,
            procurement_due_date=due_date,
            is_lead_time_breached=breached,
            supplier=supplier,
            lead_time_days=lead_time_days,
            part_master_missing=part is None,
            used_in_stations=entry.station_codes,
            station_breakdown=list(entry.stations),
        )

    @staticmethod
    def _assemble(plan: ProductionPlan, lines: List[RequirementLine]) -> RequirementReport:
        short = [line for line in lines if line.shortage_quantity > 0]
        return RequirementReport(
            plan_id=plan.id,
            product_code=plan.product_code,
            planned_quantity=plan.planned_quantity,
            start_date=plan.start_date,
            status=plan.status,
            requirements=lines,
            shortage_summary=ShortageSummary(
                has_shortage=bool(short),
                shortage_count=len(short),
                total_shortage_quantity=sum(line.shortage_quantity for line in short),
                shortage_lines=short,
            ),
            total_parts_count=len(lines),
            sufficient_parts_count=len(lines) - len(short),
        )
