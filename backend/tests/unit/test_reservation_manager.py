import threading
from contextlib import contextmanager
from datetime import date

import pytest

from partsflow.core.exceptions import (
    BusinessRuleViolationException,
    InvalidPlanStatus,
    PlanNotFound,
)
from partsflow.core.locks import PartLockRegistry
from partsflow.models import InventoryReservation, ProductionPlan
from partsflow.services.availability_resolver import AvailabilityResolver
from partsflow.services.reservation_manager import ReservationManager
from partsflow.utils.events import ReservationChangedEvent

START = date(2030, 1, 20)


@pytest.fixture()
def plan(catalog):
    catalog.part("P1")
    catalog.part("P2")
    catalog.product("PRD-1", bom=[("ST-10", "P1", 2), ("ST-20", "P2", 1)])
    return catalog.plan("PRD-1", 10)


def _reservations(db, plan_id):
    db.expire_all()
    return {
        r.part_code: r.reserved_quantity
        for r in db.query(InventoryReservation).filter(InventoryReservation.production_plan_id == plan_id)
    }


class _FinishPlanWhileWaiting(PartLockRegistry):
    """Runs ``on_wait`` just before the part lock is acquired."""

    def __init__(self, on_wait):
        super().__init__()
        self._on_wait = on_wait

    @contextmanager
    def hold(self, *part_codes):
        self._on_wait()
        with super().hold(*part_codes):
            yield


class TestReserve:
    def test_reserve_replaces_previous_quantity(self, db, plan):
        manager = ReservationManager(db)

        manager.reserve(plan.id, "P1", 10)
        manager.reserve(plan.id, "P1", 4)

        assert _reservations(db, plan.id) == {"P1": 4}

    def test_reserve_records_actor(self, db, plan):
        row = ReservationManager(db).reserve(plan.id, "P1", 3, actor="planner.kim")

        assert row.created_by == "planner.kim"

    def test_reserve_rejects_non_positive_quantity(self, db, plan):
        with pytest.raises(BusinessRuleViolationException):
            ReservationManager(db).reserve(plan.id, "P1", 0)

    def test_reserve_unknown_plan(self, db):
        with pytest.raises(PlanNotFound):
            ReservationManager(db).reserve(424242, "P1", 1)

    def test_reserve_for_finished_plan_is_refused(self, db, catalog, plan):
        plan.status = "completed"
        db.commit()

        with pytest.raises(InvalidPlanStatus):
            ReservationManager(db).reserve(plan.id, "P1", 1)

    def test_reserve_publishes_event(self, db, plan, event_bus):
        seen = []
        event_bus.subscribe(ReservationChangedEvent, seen.append)

        ReservationManager(db).reserve(plan.id, "P1", 6)

        assert len(seen) == 1
        assert seen[0].part_code == "P1"
        assert seen[0].old_quantity == 0
        assert seen[0].new_quantity == 6
        assert seen[0].occurred_at.tzinfo is not None

    def test_reserve_rechecks_plan_once_part_is_locked(self, db, session_factory, plan):
        plan_id = plan.id

        def cancel_elsewhere():
            other = session_factory()
            try:
                other.get(ProductionPlan, plan_id).status = "cancelled"
                other.commit()
            finally:
                other.close()

        manager = ReservationManager(db, locks=_FinishPlanWhileWaiting(cancel_elsewhere))

        with pytest.raises(InvalidPlanStatus):
            manager.reserve(plan_id, "P1", 5)

        assert _reservations(db, plan_id) == {}


class TestRelease:
    def test_release_removes_contention_for_other_plans(self, db, catalog, plan):
        other = catalog.plan("PRD-1", 5)
        manager = ReservationManager(db)
        manager.reserve(plan.id, "P1", 30)
        resolver = AvailabilityResolver(db)
        assert resolver.resolve("P1", exclude_plan_id=other.id, cutoff_date=START).total_reserved_by_others == 30

        assert manager.release(plan.id, "P1") is True

        assert resolver.resolve("P1", exclude_plan_id=other.id, cutoff_date=START).total_reserved_by_others == 0

    def test_release_missing_reservation_is_a_no_op(self, db, plan):
        assert ReservationManager(db).release(plan.id, "P1") is False

    def test_release_all(self, db, plan):
        manager = ReservationManager(db)
        manager.reserve(plan.id, "P1", 3)
        manager.reserve(plan.id, "P2", 4)

        result = manager.release_all(plan.id)

        assert result.released_count == 2
        assert result.released_parts == ["P1", "P2"]
        assert _reservations(db, plan.id) == {}

    def test_release_all_without_reservations(self, db, plan):
        result = ReservationManager(db).release_all(plan.id)

        assert result.released_count == 0


class TestSync:
    def test_sync_reserves_aggregated_requirement(self, db, plan):
        ReservationManager(db).sync_plan_reservations(plan)

        assert _reservations(db, plan.id) == {"P1": 20, "P2": 10}

    def test_sync_follows_quantity_change_and_drops_stale_parts(self, db, catalog, plan):
        manager = ReservationManager(db)
        manager.reserve(plan.id, "OLD-PART", 9)
        plan.planned_quantity = 3
        db.commit()

        manager.sync_plan_reservations(plan)

        assert _reservations(db, plan.id) == {"P1": 6, "P2": 3}

    def test_sync_releases_everything_for_inactive_plan(self, db, plan):
        manager = ReservationManager(db)
        manager.sync_plan_reservations(plan)
        plan.status = "cancelled"
        db.commit()

        assert manager.sync_plan_reservations(plan) == []
        assert _reservations(db, plan.id) == {}


class TestStatusAndIntegrity:
    def test_reservation_status_totals(self, db, plan):
        manager = ReservationManager(db)
        manager.reserve(plan.id, "P1", 3)
        manager.reserve(plan.id, "P2", 4)

        status = manager.reservation_status(plan.id)

        assert status.total_parts == 2
        assert status.total_reserved_quantity == 7
        assert [r.part_code for r in status.reservations] == ["P1", "P2"]

    def test_reservation_status_unknown_plan(self, db):
        with pytest.raises(PlanNotFound):
            ReservationManager(db).reservation_status(31337)

    def test_integrity_is_healthy_when_covered(self, db, catalog, plan):
        catalog.stock("P1", 100)
        ReservationManager(db).reserve(plan.id, "P1", 20)

        report = ReservationManager(db).check_integrity()

        assert report.overall_status == "HEALTHY"
        assert report.over_committed_parts == []

    def test_integrity_reports_every_kind_of_issue(self, db, catalog, plan):
        catalog.stock("P1", 5)
        catalog.receipt("P1", 3, START)
        ReservationManager(db).reserve(plan.id, "P1", 20)
        catalog.reservation(999, "P2", 4)
        finished = catalog.plan("PRD-1", 1, status="completed")
        catalog.reservation(finished.id, "P2", 1)

        report = ReservationManager(db).check_integrity()

        assert report.overall_status == "ISSUES_FOUND"
        assert [(o.production_plan_id, o.part_code) for o in report.orphaned_reservations] == [(999, "P2")]
        assert [(m.plan_id, m.status, m.reservation_count) for m in report.status_mismatches] == [
            (finished.id, "completed", 1)
        ]
        assert len(report.over_committed_parts) == 1
        over = report.over_committed_parts[0]
        assert over.part_code == "P1"
        assert over.excess_quantity == 20 - 5 - 3


def test_concurrent_reserves_on_same_part_serialize(session_factory, catalog, plan):
    plan_id = plan.id
    quantities = [7, 13]
    barrier = threading.Barrier(len(quantities))
    errors = []

    def worker(quantity):
        session = session_factory()
        try:
            barrier.wait()
            ReservationManager(session).reserve(plan_id, "P1", quantity)
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(q,)) for q in quantities]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    check = session_factory()
    try:
        rows = (
            check.query(InventoryReservation)
            .filter(InventoryReservation.production_plan_id == plan_id, InventoryReservation.part_code == "P1")
            .all()
        )
        assert len(rows) == 1
        assert rows[0].reserved_quantity in quantities
        assert check.get(ProductionPlan, plan_id).status == "planned"
    finally:
        check.close()
