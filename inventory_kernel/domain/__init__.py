"""Pure domain objects for the inventory kernel."""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.entities import (
    InventorySnapshot,
    Item,
    Purchase,
    UnitOfMeasure,
    Usage,
    Vendor,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "InventorySnapshot",
    "Item",
    "Purchase",
    "UnitOfMeasure",
    "Usage",
    "Vendor",
]
