# Repository Layer — Data Access (Repository Pattern, GoF)
from partsflow.repositories.base import BaseRepository
from partsflow.repositories.product_repository import ProductRepository
from partsflow.repositories.bom_repository import BOMRepository
from partsflow.repositories.part_repository import PartRepository
from partsflow.repositories.production_plan_repository import ProductionPlanRepository
from partsflow.repositories.inventory_repository import InventoryRepository
from partsflow.repositories.reservation_repository import ReservationRepository
from partsflow.repositories.scheduled_receipt_repository import ScheduledReceiptRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "BOMRepository",
    "PartRepository",
    "ProductionPlanRepository",
    "InventoryRepository",
    "ReservationRepository",
    "ScheduledReceiptRepository",
]
