"""
Shared fixtures.

Every test gets its own SQLite file database so that tests spawning threads
can open independent sessions against the same data.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from partsflow.database import Base, get_db
from partsflow.main import app
from partsflow.models import (
    BOMItem,
    Inventory,
    InventoryReservation,
    Part,
    Product,
    ProductionPlan,
    ScheduledReceipt,
    WorkStation,
)
from partsflow.utils.events import configure_event_bus

START = date(2030, 1, 20)
TODAY = date(2030, 1, 1)


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'partsflow_test.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def event_bus():
    bus = configure_event_bus()
    yield bus
    bus.clear()


class Catalog:
    """Seeds master data, stock, receipts and plans directly through the ORM."""

    def __init__(self, db):
        self.db = db
        self._order_seq = 0

    def station(self, code: str, process_group: str = "ASSY", is_active: bool = True) -> WorkStation:
        station = self.db.get(WorkStation, code)
        if station is None:
            station = WorkStation(station_code=code, process_group=process_group, is_active=is_active)
            self.db.add(station)
            self.db.commit()
        return station

    def product(self, code: str, bom: Iterable[Tuple[str, str, int]] = (), is_active: bool = True) -> Product:
        product = Product(product_code=code, is_active=is_active)
        self.db.add(product)
        self.db.commit()
        for station_code, part_code, quantity in bom:
            self.station(station_code)
            self.db.add(BOMItem(
                product_code=code,
                station_code=station_code,
                part_code=part_code,
                quantity=quantity,
            ))
        self.db.commit()
        return product

    def part(
        self,
        code: str,
        lead_time_days: int = 7,
        supplier: Optional[str] = "ACME",
        unit_price: str = "1.00",
        name: Optional[str] = None,
    ) -> Part:
        part = Part(
            part_code=code,
            part_name=name or f"Part {code}",
            lead_time_days=lead_time_days,
            supplier=supplier,
            unit_price=Decimal(unit_price),
        )
        self.db.add(part)
        self.db.commit()
        return part

    def stock(self, part_code: str, quantity: int) -> Inventory:
        row = self.db.get(Inventory, part_code)
        if row is None:
            row = Inventory(part_code=part_code, current_stock=quantity)
            self.db.add(row)
        else:
            row.current_stock = quantity
        self.db.commit()
        return row

    def receipt(
        self,
        part_code: str,
        quantity: int,
        scheduled_date: Optional[date],
        status: str = "scheduled",
    ) -> ScheduledReceipt:
        self._order_seq += 1
        receipt = ScheduledReceipt(
            order_no=f"PO-{self._order_seq:05d}",
            part_code=part_code,
            supplier="ACME",
            order_quantity=quantity,
            scheduled_quantity=quantity if status == "scheduled" else None,
            order_date=TODAY,
            scheduled_date=scheduled_date,
            status=status,
        )
        self.db.add(receipt)
        self.db.commit()
        self.db.refresh(receipt)
        return receipt

    def plan(
        self,
        product_code: str,
        quantity: int,
        start_date: date = START,
        status: str = "planned",
    ) -> ProductionPlan:
        plan = ProductionPlan(
            product_code=product_code,
            planned_quantity=quantity,
            start_date=start_date,
            status=status,
        )
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def reservation(self, plan_id: int, part_code: str, quantity: int) -> InventoryReservation:
        row = InventoryReservation(production_plan_id=plan_id, part_code=part_code, reserved_quantity=quantity)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row


@pytest.fixture()
def catalog(db):
    return Catalog(db)
