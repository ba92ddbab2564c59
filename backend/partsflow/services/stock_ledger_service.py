"""
Stock Ledger Service — the only writer of on-hand stock.

Every change to ``inventory.current_stock`` is recorded as an
``InventoryTransaction`` carrying the stock before and after the movement.
Quantities are signed deltas; stock never goes negative.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from partsflow.config import settings
from partsflow.core.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    InvalidStateTransitionException,
    PartNotFound,
    dependency_guard,
)
from partsflow.core.locks import PartLockRegistry, get_part_locks
from partsflow.models.inventory import Inventory, InventoryTransaction, TRANSACTION_TYPES
from partsflow.repositories.inventory_repository import InventoryRepository
from partsflow.repositories.part_repository import PartRepository
from partsflow.repositories.scheduled_receipt_repository import ScheduledReceiptRepository
from partsflow.schemas.inventory import ReceiptReceiveResponse, StockMovementResponse
from partsflow.utils.events import StockMovedEvent, get_event_bus

logger = logging.getLogger(__name__)

RECEIVABLE_RECEIPT_STATUSES = ("awaiting_confirmation", "scheduled")


class StockLedgerService:

    def __init__(self, db: Session, locks: Optional[PartLockRegistry] = None):
        self._db = db
        self._repo = InventoryRepository(db)
        self._part_repo = PartRepository(db)
        self._receipt_repo = ScheduledReceiptRepository(db)
        self._locks = locks or get_part_locks()
        self._bus = get_event_bus()

    def adjust_stock(
        self,
        part_code: str,
        quantity: int,
        transaction_type: str = "adjustment",
        actor: Optional[str] = None,
        reference_id: Optional[int] = None,
        reference_type: Optional[str] = None,
        remarks: Optional[str] = None,
        commit: bool = True,
        validate_part: bool = False,
    ) -> InventoryTransaction:
        """Apply a signed stock movement and record it in the ledger.

        With ``commit=False`` the movement is only flushed; the caller owns the
        transaction and should ``announce`` the movement once it has committed.
        """
        self._validate_movement(quantity, transaction_type)
        actor = actor or settings.DEFAULT_ACTOR

        if validate_part:
            with dependency_guard("parts"):
                if self._part_repo.get_active(part_code) is None:
                    raise PartNotFound(part_code)

        with self._locks.hold(part_code), dependency_guard("inventory", self._db):
            inventory = self._repo.get_for_update(part_code)
            if inventory is None:
                inventory = Inventory(part_code=part_code, current_stock=0)
                self._db.add(inventory)
            before = int(inventory.current_stock or 0)
            after = before + quantity
            if after < 0:
                self._db.rollback()
                raise BusinessRuleViolationException(
                    f"Stock of '{part_code}' cannot go below zero "
                    f"(on hand {before}, movement {quantity}).",
                    code="NEGATIVE_STOCK",
                    details={"part_code": part_code, "current_stock": before, "quantity": quantity},
                )
            inventory.current_stock = after
            movement = self._repo.add_transaction(InventoryTransaction(
                part_code=part_code,
                transaction_type=transaction_type,
                quantity=quantity,
                before_stock=before,
                after_stock=after,
                reference_id=reference_id,
                reference_type=reference_type,
                remarks=remarks,
                created_by=actor,
            ))
            if commit:
                self._db.commit()
                self._db.refresh(movement)

        if commit:
            self.announce(movement)
        return movement

    def announce(self, movement: InventoryTransaction) -> None:
        logger.info(
            "stock_moved part_code=%s type=%s quantity=%s before=%s after=%s",
            movement.part_code,
            movement.transaction_type,
            movement.quantity,
            movement.before_stock,
            movement.after_stock,
        )
        self._bus.publish(StockMovedEvent(
            entity_type="inventory",
            entity_id=movement.part_code,
            user=movement.created_by,
            transaction_type=movement.transaction_type,
            quantity=movement.quantity,
            before_stock=movement.before_stock,
            after_stock=movement.after_stock,
        ))

    def receive_receipt(
        self,
        receipt_id: int,
        actor: Optional[str] = None,
        received_on: Optional[date] = None,
    ) -> ReceiptReceiveResponse:
        """Book an inbound order into stock and close it."""
        actor = actor or settings.DEFAULT_ACTOR
        received_on = received_on or date.today()

        with dependency_guard("scheduled_receipts"):
            receipt = self._receipt_repo.get_by_id(receipt_id)
        if receipt is None:
            raise EntityNotFoundException("ScheduledReceipt", receipt_id)
        if receipt.status not in RECEIVABLE_RECEIPT_STATUSES:
            raise InvalidStateTransitionException("ScheduledReceipt", receipt.status, "received")

        quantity = receipt.scheduled_quantity or receipt.order_quantity
        movement = self.adjust_stock(
            receipt.part_code,
            quantity,
            transaction_type="receipt",
            actor=actor,
            reference_id=receipt.id,
            reference_type="scheduled_receipt",
            remarks=f"Received order {receipt.order_no}",
            commit=False,
        )
        with dependency_guard("scheduled_receipts", self._db):
            receipt.status = "received"
            receipt.scheduled_quantity = quantity
            receipt.scheduled_date = received_on
            self._db.commit()
            self._db.refresh(movement)
        self.announce(movement)

        logger.info(
            "receipt_received receipt_id=%s order_no=%s part_code=%s quantity=%s",
            receipt.id,
            receipt.order_no,
            receipt.part_code,
            quantity,
        )
        return ReceiptReceiveResponse(
            receipt_id=receipt.id,
            order_no=receipt.order_no,
            part_code=receipt.part_code,
            received_quantity=quantity,
            received_on=received_on,
            movement=StockMovementResponse.model_validate(movement),
        )

    @staticmethod
    def _validate_movement(quantity: int, transaction_type: str) -> None:
        if transaction_type not in TRANSACTION_TYPES:
            raise BusinessRuleViolationException(
                f"Unknown transaction type '{transaction_type}'.",
                code="INVALID_TRANSACTION_TYPE",
            )
        if quantity == 0:
            raise BusinessRuleViolationException("Stock movement quantity must be non-zero.", code="EMPTY_MOVEMENT")
        if transaction_type == "receipt" and quantity < 0:
            raise BusinessRuleViolationException("A receipt must increase stock.", code="INVALID_MOVEMENT_SIGN")
        if transaction_type == "issue" and quantity > 0:
            raise BusinessRuleViolationException("An issue must decrease stock.", code="INVALID_MOVEMENT_SIGN")
