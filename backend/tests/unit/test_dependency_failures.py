"""Storage failures surface as UnavailableDependency and leave the session usable."""
import pytest
from sqlalchemy.exc import OperationalError

from partsflow.core.exceptions import UnavailableDependency, dependency_guard
from partsflow.models import Inventory, InventoryReservation
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.repositories.reservation_repository import ReservationRepository
from partsflow.services.netting_engine import NettingEngine
from partsflow.services.reservation_manager import ReservationManager


def _lost_connection(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))


@pytest.fixture()
def plan(catalog):
    catalog.part("P1")
    catalog.product("PRD-1", bom=[("ST-10", "P1", 2)])
    return catalog.plan("PRD-1", 5)


def test_guard_translates_and_rolls_back(db, catalog):
    catalog.stock("P1", 5)
    db.get(Inventory, "P1").current_stock = 99

    with pytest.raises(UnavailableDependency) as exc_info:
        with dependency_guard("inventory", db):
            db.flush()
            _lost_connection()

    assert exc_info.value.status_code == 503
    assert exc_info.value.code == "UNAVAILABLE_DEPENDENCY"
    assert "inventory" in exc_info.value.message
    assert db.get(Inventory, "P1").current_stock == 5


def test_guard_lets_domain_errors_through(db):
    with pytest.raises(KeyError):
        with dependency_guard("inventory", db):
            raise KeyError("P1")


def test_calculation_reports_unavailable_storage(db, plan, monkeypatch):
    monkeypatch.setattr(ProductionPlanRepository, "get_by_id", _lost_connection)

    with pytest.raises(UnavailableDependency) as exc_info:
        NettingEngine(db).calculate(plan.id)

    assert exc_info.value.dependency == "production_plans"


def test_failed_reserve_leaves_session_usable(db, plan, monkeypatch):
    plan_id = plan.id
    monkeypatch.setattr(ReservationRepository, "get_for_update", _lost_connection)

    with pytest.raises(UnavailableDependency):
        ReservationManager(db).reserve(plan_id, "P1", 4)

    assert not db.in_transaction()
    monkeypatch.undo()
    ReservationManager(db).reserve(plan_id, "P1", 4)
    assert db.query(InventoryReservation).filter_by(production_plan_id=plan_id).one().reserved_quantity == 4
