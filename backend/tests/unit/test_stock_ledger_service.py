from datetime import date

import pytest

from partsflow.core.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    InvalidStateTransitionException,
    PartNotFound,
)
from partsflow.models import Inventory, InventoryTransaction, ScheduledReceipt
from partsflow.services.stock_ledger_service import StockLedgerService
from partsflow.utils.events import StockMovedEvent


def _stock(db, part_code):
    db.expire_all()
    row = db.get(Inventory, part_code)
    return None if row is None else row.current_stock


def test_adjust_creates_inventory_record_and_ledger_row(db, catalog):
    catalog.part("P1")

    movement = StockLedgerService(db).adjust_stock("P1", 25, transaction_type="initial", actor="stores")

    assert _stock(db, "P1") == 25
    assert movement.before_stock == 0
    assert movement.after_stock == 25
    assert movement.created_by == "stores"
    assert db.query(InventoryTransaction).count() == 1


def test_adjust_applies_signed_deltas(db, catalog):
    catalog.stock("P1", 10)
    ledger = StockLedgerService(db)

    ledger.adjust_stock("P1", -4, transaction_type="issue")
    ledger.adjust_stock("P1", 2)

    assert _stock(db, "P1") == 8
    history = db.query(InventoryTransaction).order_by(InventoryTransaction.id).all()
    assert [(t.before_stock, t.after_stock) for t in history] == [(10, 6), (6, 8)]


def test_adjust_refuses_to_go_negative(db, catalog):
    catalog.stock("P1", 3)

    with pytest.raises(BusinessRuleViolationException) as exc_info:
        StockLedgerService(db).adjust_stock("P1", -5)

    assert exc_info.value.code == "NEGATIVE_STOCK"
    assert _stock(db, "P1") == 3
    assert db.query(InventoryTransaction).count() == 0


@pytest.mark.parametrize(
    "quantity,transaction_type",
    [(0, "adjustment"), (-1, "receipt"), (1, "issue"), (1, "gift")],
)
def test_adjust_rejects_malformed_movements(db, quantity, transaction_type):
    with pytest.raises(BusinessRuleViolationException):
        StockLedgerService(db).adjust_stock("P1", quantity, transaction_type=transaction_type)


def test_adjust_can_require_a_known_part(db):
    with pytest.raises(PartNotFound):
        StockLedgerService(db).adjust_stock("GHOST", 1, validate_part=True)


def test_adjust_publishes_stock_moved(db, catalog, event_bus):
    seen = []
    event_bus.subscribe(StockMovedEvent, seen.append)
    catalog.stock("P1", 1)

    StockLedgerService(db).adjust_stock("P1", 4, transaction_type="receipt")

    assert [(e.entity_id, e.before_stock, e.after_stock) for e in seen] == [("P1", 1, 5)]


def test_receive_receipt_books_stock_and_closes_order(db, catalog):
    catalog.stock("P2", 5)
    receipt = catalog.receipt("P2", 30, date(2030, 1, 10))

    result = StockLedgerService(db).receive_receipt(receipt.id, received_on=date(2030, 1, 9))

    assert result.received_quantity == 30
    assert result.movement.transaction_type == "receipt"
    assert result.movement.reference_id == receipt.id
    assert _stock(db, "P2") == 35
    closed = db.get(ScheduledReceipt, receipt.id)
    assert closed.status == "received"
    assert closed.scheduled_date == date(2030, 1, 9)


def test_receive_unconfirmed_receipt_uses_order_quantity(db, catalog):
    receipt = catalog.receipt("P2", 12, None, status="awaiting_confirmation")

    result = StockLedgerService(db).receive_receipt(receipt.id, received_on=date(2030, 1, 9))

    assert result.received_quantity == 12
    assert _stock(db, "P2") == 12


def test_receive_receipt_twice_is_refused(db, catalog):
    receipt = catalog.receipt("P2", 5, date(2030, 1, 10))
    ledger = StockLedgerService(db)
    ledger.receive_receipt(receipt.id)

    with pytest.raises(InvalidStateTransitionException):
        ledger.receive_receipt(receipt.id)


def test_receive_unknown_receipt(db):
    with pytest.raises(EntityNotFoundException):
        StockLedgerService(db).receive_receipt(404)
