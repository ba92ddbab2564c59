"""
In-process event bus (Observer pattern).

Services publish domain events; handlers registered at startup react to them.
The default wiring only logs, which gives an audit trail of plan lifecycle,
reservation and stock changes in the structured log stream.
"""
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    entity_type: str
    entity_id: object
    user: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class EntityCreatedEvent(DomainEvent):
    new_values: dict = field(default_factory=dict)


@dataclass
class EntityUpdatedEvent(DomainEvent):
    old_values: dict = field(default_factory=dict)
    new_values: dict = field(default_factory=dict)


@dataclass
class PlanStatusChangedEvent(DomainEvent):
    old_status: str = ""
    new_status: str = ""


@dataclass
class ReservationChangedEvent(DomainEvent):
    part_code: str = ""
    old_quantity: int = 0
    new_quantity: int = 0


@dataclass
class StockMovedEvent(DomainEvent):
    transaction_type: str = ""
    quantity: int = 0
    before_stock: int = 0
    after_stock: int = 0


Handler = Callable[[DomainEvent], None]


class EventBus:

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def clear(self) -> None:
        self._handlers.clear()

    def publish(self, event: DomainEvent) -> None:
        for event_type, handlers in self._handlers.items():
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    # A failing observer must not undo the business operation
                    logger.exception("event_handler_failed event=%s", event.name)


class LoggingHandler:

    def __call__(self, event: DomainEvent) -> None:
        payload = asdict(event)
        payload.pop("occurred_at", None)
        logger.info("domain_event %s", event.name, extra={"event": payload})


_bus = EventBus()


def get_event_bus() -> EventBus:
    return _bus


def configure_event_bus() -> EventBus:
    _bus.clear()
    _bus.subscribe(DomainEvent, LoggingHandler())
    return _bus
