"""
Inventory Entities (``inventory_kernel.domain.entities``).

Responsibility
--------------
Frozen value objects for the four ledger nouns: items, vendors, purchases
and usage records, plus the ``InventorySnapshot`` that bundles the four
collections handed to the engines.

Architecture
------------
Layer: **Kernel > Domain** -- pure data structures.  The engines only ever
read these objects; creating, editing and deleting them belongs to the
surrounding application.

Invariants
----------
- Stock is never stored.  It is derived from ``Item.purchases`` and
  ``Item.usage_records`` by the ledger engine.
- ``Purchase.remaining_quantity`` tracks the lot only and is never
  reconciled against item-level stock.
- Monetary fields use ``Decimal`` -- never ``float``.
- Nothing here validates quantities; negative or zero values pass through
  untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from inventory_kernel.utils.hashing import content_digest


class UnitOfMeasure(str, Enum):
    """Unit an item is counted in; the value is the display name."""

    EACH = "Each"
    BOX = "Box"
    CASE = "Case"
    PACK = "Pack"
    BOTTLE = "Bottle"
    BAG = "Bag"
    ROLL = "Roll"
    GALLON = "Gallon"
    LITER = "Liter"
    POUND = "Pound"
    OUNCE = "Ounce"
    GRAM = "Gram"
    KILOGRAM = "Kilogram"
    DOZEN = "Dozen"
    PAIR = "Pair"
    SET = "Set"

    @property
    def abbreviation(self) -> str:
        return _ABBREVIATIONS[self]

    @classmethod
    def parse(cls, raw: str) -> UnitOfMeasure:
        """Map a stored display name to a unit, falling back to EACH."""
        try:
            return cls(raw)
        except ValueError:
            return cls.EACH


_ABBREVIATIONS: dict[UnitOfMeasure, str] = {
    UnitOfMeasure.EACH: "ea",
    UnitOfMeasure.BOX: "box",
    UnitOfMeasure.CASE: "cs",
    UnitOfMeasure.PACK: "pk",
    UnitOfMeasure.BOTTLE: "btl",
    UnitOfMeasure.BAG: "bag",
    UnitOfMeasure.ROLL: "roll",
    UnitOfMeasure.GALLON: "gal",
    UnitOfMeasure.LITER: "L",
    UnitOfMeasure.POUND: "lb",
    UnitOfMeasure.OUNCE: "oz",
    UnitOfMeasure.GRAM: "g",
    UnitOfMeasure.KILOGRAM: "kg",
    UnitOfMeasure.DOZEN: "dz",
    UnitOfMeasure.PAIR: "pr",
    UnitOfMeasure.SET: "set",
}


@dataclass(frozen=True)
class Vendor:
    """
    A supplier.  Referenced (not owned) by purchases.

    Contract: Immutable value object.  ``phone`` and ``email`` are stored
    as entered; normalization happens in the duplicate predicates.
    """

    id: UUID
    name: str
    contact_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    notes: str = ""
    created_at: datetime | None = None
    is_deleted: bool = False
    deleted_at: datetime | None = None

    def fingerprint_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "notes": self.notes,
            "is_deleted": self.is_deleted,
        }


@dataclass(frozen=True)
class Purchase:
    """
    A single lot bought for an item.

    Contract: Immutable value object.  ``item_id`` is ``None`` when the
    owning item reference is missing; ``vendor`` is ``None`` when the
    vendor is unknown or was deleted.
    """

    id: UUID
    item_id: UUID | None
    date: datetime
    quantity: int
    price_per_unit: Decimal
    vendor: Vendor | None = None
    lot_number: str = ""
    expiration_date: datetime | None = None
    notes: str = ""
    used_quantity: int = 0

    @property
    def vendor_id(self) -> UUID | None:
        return self.vendor.id if self.vendor is not None else None

    @property
    def remaining_quantity(self) -> int:
        """Lot-level remainder; independent of item-level stock."""
        return self.quantity - self.used_quantity

    @property
    def total_cost(self) -> Decimal:
        return self.price_per_unit * self.quantity

    def fingerprint_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "vendor_id": self.vendor_id,
            "date": self.date,
            "quantity": self.quantity,
            "price_per_unit": self.price_per_unit,
            "lot_number": self.lot_number,
            "expiration_date": self.expiration_date,
            "notes": self.notes,
            "used_quantity": self.used_quantity,
        }


@dataclass(frozen=True)
class Usage:
    """A consumption record for an item."""

    id: UUID
    item_id: UUID | None
    date: datetime
    quantity: int
    notes: str = ""
    is_estimate: bool = True

    def fingerprint_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "date": self.date,
            "quantity": self.quantity,
            "notes": self.notes,
            "is_estimate": self.is_estimate,
        }


@dataclass(frozen=True)
class Item:
    """
    A consumable tracked by the ledger.

    Contract: Immutable value object that owns its purchases and usage
    records (deleting an item deletes both).  ``reorder_level`` is the
    stock threshold at or below which the item is flagged.
    """

    id: UUID
    name: str
    unit_of_measure: UnitOfMeasure = UnitOfMeasure.EACH
    reorder_level: int = 10
    is_perishable: bool = False
    notes: str = ""
    created_at: datetime | None = None
    purchases: tuple[Purchase, ...] = ()
    usage_records: tuple[Usage, ...] = ()
    sort_order: int = 0
    is_pinned: bool = False
    is_deleted: bool = False
    deleted_at: datetime | None = None

    def fingerprint_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit_of_measure": self.unit_of_measure,
            "reorder_level": self.reorder_level,
            "is_perishable": self.is_perishable,
            "notes": self.notes,
            "is_deleted": self.is_deleted,
        }


@dataclass(frozen=True)
class InventorySnapshot:
    """
    The four entity collections as supplied by the caller.

    Contract: Immutable; collection order is the caller's natural order
    and is what the duplicate detector iterates.
    """

    items: tuple[Item, ...] = ()
    vendors: tuple[Vendor, ...] = ()
    purchases: tuple[Purchase, ...] = ()
    usages: tuple[Usage, ...] = ()

    @classmethod
    def from_items(
        cls,
        items: tuple[Item, ...] | list[Item],
        vendors: tuple[Vendor, ...] | list[Vendor] = (),
    ) -> InventorySnapshot:
        """Build a snapshot whose purchase/usage collections are the items' own."""
        items = tuple(items)
        return cls(
            items=items,
            vendors=tuple(vendors),
            purchases=tuple(p for item in items for p in item.purchases),
            usages=tuple(u for item in items for u in item.usage_records),
        )

    def collection_sizes(self) -> tuple[int, int, int, int]:
        return (len(self.items), len(self.vendors), len(self.purchases), len(self.usages))

    def content_fingerprint(self) -> str:
        """SHA-256 over every entity, in collection order."""
        return content_digest({
            "items": [i.fingerprint_payload() for i in self.items],
            "vendors": [v.fingerprint_payload() for v in self.vendors],
            "purchases": [p.fingerprint_payload() for p in self.purchases],
            "usages": [u.fingerprint_payload() for u in self.usages],
        })
