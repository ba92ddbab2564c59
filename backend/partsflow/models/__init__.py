from partsflow.models.product import Product, WorkStation
from partsflow.models.part import Part
from partsflow.models.bom import BOMItem
from partsflow.models.production_plan import ProductionPlan
from partsflow.models.inventory import Inventory, InventoryTransaction
from partsflow.models.reservation import InventoryReservation
from partsflow.models.scheduled_receipt import ScheduledReceipt

__all__ = [
    "Product",
    "WorkStation",
    "Part",
    "BOMItem",
    "ProductionPlan",
    "Inventory",
    "InventoryTransaction",
    "InventoryReservation",
    "ScheduledReceipt",
]
