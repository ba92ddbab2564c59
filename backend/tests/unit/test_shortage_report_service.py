from datetime import date
from decimal import Decimal

from partsflow.services.shortage_report_service import (
    ShortageReportService,
    overdue_days,
    procurement_priority,
)

TODAY = date(2030, 1, 1)


def test_priority_bands():
    assert procurement_priority(date(2029, 12, 25), TODAY) == "emergency"
    assert procurement_priority(date(2029, 12, 31), TODAY) == "warning"
    assert procurement_priority(TODAY, TODAY) == "caution"
    assert procurement_priority(date(2030, 1, 4), TODAY) == "caution"
    assert procurement_priority(date(2030, 1, 5), TODAY) == "normal"
    assert procurement_priority(None, TODAY) == "emergency"


def test_overdue_days():
    assert overdue_days(date(2029, 12, 22), TODAY) == 10
    assert overdue_days(date(2030, 2, 1), TODAY) == 0
    assert overdue_days(None, TODAY) == 0


def _seed(catalog):
    catalog.part("P1", lead_time_days=10, supplier="ACME", unit_price="2.50")
    catalog.part("P2", lead_time_days=10, supplier="Bolt Co", unit_price="1.00")
    catalog.product("PRD-1", bom=[("ST-10", "P1", 1)])
    catalog.product("PRD-2", bom=[("ST-10", "P2", 1), ("ST-10", "GHOST", 1)])
    catalog.product("PRD-EMPTY")

    plans = {
        "normal": catalog.plan("PRD-1", 4, start_date=date(2030, 1, 30)),
        "caution": catalog.plan("PRD-1", 3, start_date=date(2030, 1, 13)),
        "warning": catalog.plan("PRD-1", 2, start_date=date(2030, 1, 9)),
        "emergency": catalog.plan("PRD-2", 6, start_date=date(2029, 12, 30)),
    }
    catalog.plan("PRD-1", 50, status="completed")
    catalog.plan("PRD-EMPTY", 1)
    return plans


def test_list_shortages_ranks_and_summarizes(db, catalog):
    plans = _seed(catalog)

    report = ShortageReportService(db).list_shortages(today=TODAY)
    lines = report.shortage_lines

    assert [(l.plan_id, l.part_code, l.procurement_priority) for l in lines] == [
        (plans["emergency"].id, "P2", "emergency"),
        (plans["emergency"].id, "GHOST", "emergency"),
        (plans["warning"].id, "P1", "warning"),
        (plans["caution"].id, "P1", "caution"),
        (plans["normal"].id, "P1", "normal"),
    ]
    assert lines[0].overdue_days == 12
    assert lines[0].estimated_cost == Decimal("6.00")
    assert lines[1].procurement_due_date is None
    assert lines[1].estimated_cost == Decimal("0.00")
    assert lines[2].estimated_cost == Decimal("5.00")

    summary = report.summary
    assert summary.total_shortage_lines == 5
    assert summary.priority_breakdown.emergency == 2
    assert summary.priority_breakdown.warning == 1
    assert summary.priority_breakdown.caution == 1
    assert summary.priority_breakdown.normal == 1
    assert summary.max_overdue_days == 12
    assert summary.total_estimated_cost == Decimal("6.00") + Decimal("5.00") + Decimal("7.50") + Decimal("10.00")
    assert summary.suppliers_affected == 3


def test_shortages_by_supplier_groups_lines(db, catalog):
    _seed(catalog)

    groups = ShortageReportService(db).shortages_by_supplier(today=TODAY)

    assert [g.supplier for g in groups] == ["ACME", "Bolt Co", "(unknown)"]
    acme = groups[0]
    assert acme.shortage_lines_count == 3
    assert acme.total_shortage_quantity == 9
    assert acme.total_estimated_cost == Decimal("22.50")
    assert acme.earliest_due_date == date(2029, 12, 30)
    assert acme.part_codes == ["P1"]
    assert groups[2].earliest_due_date is None


def test_no_active_plans_gives_empty_report(db):
    report = ShortageReportService(db).list_shortages(today=TODAY)

    assert report.shortage_lines == []
    assert report.summary.total_estimated_cost == Decimal("0.00")
    assert report.summary.max_overdue_days == 0
