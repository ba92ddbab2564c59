# Routers package — Thin Controllers (SRP / DIP)
from partsflow.routers import (
    production_plans,
    reservations,
    inventory,
    reports,
)

__all__ = [
    "production_plans",
    "reservations",
    "inventory",
    "reports",
]
