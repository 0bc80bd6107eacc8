"""
inventory_engines.ledger -- Derived stock, usage-rate, reorder and price metrics.

Responsibility:
    Project an item's purchase and usage ledger into the numbers the
    dashboard shows: current stock, reorder flag, consumption rate,
    reorder forecast, price statistics and per-vendor best prices.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    "Now" comes from an injected ``Clock``.

Invariants enforced:
    - Stock is always sum(purchase.quantity) - sum(usage.quantity); it is
      recomputed on every call and never clamped (negative stock is
      returned as-is).
    - Monetary results are ``Decimal``; rates are exact ``Fraction``
      arithmetic internally and exposed as ``Decimal``.
    - "No basis" is ``None``, never zero: no purchases -> no price stats,
      no usage -> no reorder forecast.

Failure modes:
    - InvalidUsageWindowError from ``calculate_usage_rate`` when
      ``over_days <= 0``.

Usage:
    aggregator = LedgerAggregator(clock)
    aggregator.current_inventory(item)             # 50
    aggregator.estimated_days_until_reorder(item)  # 35, 0, or None
    aggregator.lowest_price_by_vendor(item)        # cheapest vendor first
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from fractions import Fraction
from uuid import UUID

from inventory_engines.tracer import traced_engine
from inventory_kernel.domain.calendar import whole_days_between
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.entities import Item, Purchase, Vendor
from inventory_kernel.exceptions import InvalidUsageWindowError
from inventory_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.ledger")


def _to_decimal(value: Fraction) -> Decimal:
    return Decimal(value.numerator) / Decimal(value.denominator)


@dataclass(frozen=True)
class VendorPrice:
    """Best (lowest) unit price a vendor has charged for one item."""

    vendor: Vendor
    price: Decimal


@dataclass(frozen=True)
class ItemMetrics:
    """
    Read-only view-model of every per-item metric.

    Contract:
        Snapshot taken at ``as_of``; it is not refreshed if the ledger
        changes.  Optional fields are ``None`` when there is no history to
        compute them from.
    """

    item_id: UUID
    name: str
    as_of: datetime
    current_inventory: int
    reorder_level: int
    needs_reorder: bool
    usage_rate_per_day: Decimal
    estimated_days_until_reorder: int | None
    estimated_reorder_date: datetime | None
    lowest_price_paid: Decimal | None
    lowest_price_vendor: Vendor | None
    average_price_paid: Decimal | None
    vendor_prices: tuple[VendorPrice, ...]


class LedgerAggregator:
    """
    Per-item ledger projections.

    Contract:
        Pure functions -- no I/O, no caching.  Every call walks the item's
        own purchases and usage records, so cost is linear in those counts.
    Guarantees:
        - ``needs_reorder`` is true iff stock <= reorder level.
        - ``estimated_days_until_reorder`` distinguishes 0 ("reorder now")
          from ``None`` ("no usage to forecast from").
    Non-goals:
        - Does not reconcile item stock with lot ``remaining_quantity``.
        - Does not validate quantities or prices.
    """

    def __init__(self, clock: Clock, usage_window_days: int = 30):
        self._clock = clock
        self.usage_window_days = usage_window_days

    # -------------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------------

    def current_inventory(self, item: Item) -> int:
        purchased = sum(p.quantity for p in item.purchases)
        used = sum(u.quantity for u in item.usage_records)
        return purchased - used

    def needs_reorder(self, item: Item) -> bool:
        return self.current_inventory(item) <= item.reorder_level

    def items_needing_reorder(self, items: Sequence[Item]) -> tuple[Item, ...]:
        return tuple(i for i in items if self.needs_reorder(i))

    # -------------------------------------------------------------------------
    # Usage rate
    # -------------------------------------------------------------------------

    def _history_rate(self, item: Item) -> Fraction:
        if not item.usage_records:
            return Fraction(0)

        dates = [u.date for u in item.usage_records]
        total_used = sum(u.quantity for u in item.usage_records)
        days_between = whole_days_between(min(dates), max(dates))
        if days_between <= 0:
            # Everything happened within one day
            return Fraction(total_used)
        return Fraction(total_used, days_between)

    def _window_rate(self, item: Item, over_days: int) -> Fraction:
        if over_days <= 0:
            raise InvalidUsageWindowError(over_days)
        cutoff = self._clock.now() - timedelta(days=over_days)
        total_used = sum(u.quantity for u in item.usage_records if u.date >= cutoff)
        return Fraction(total_used, over_days)

    def usage_rate_per_day(self, item: Item) -> Decimal:
        """
        Whole-history average consumption per day.

        0 with no usage; total quantity when all usage falls within one
        day; otherwise total / whole days from first to last record.
        """
        return _to_decimal(self._history_rate(item))

    def calculate_usage_rate(self, item: Item, over_days: int | None = None) -> Decimal:
        """
        Consumption per day over the trailing ``over_days`` window.

        Divides by ``over_days`` even when the first usage in the window
        came late.

        Raises:
            InvalidUsageWindowError: If ``over_days <= 0``.
        """
        if over_days is None:
            over_days = self.usage_window_days
        return _to_decimal(self._window_rate(item, over_days))

    # -------------------------------------------------------------------------
    # Reorder forecast
    # -------------------------------------------------------------------------

    @staticmethod
    def _days_until(units_above_reorder: int, rate: Fraction) -> int | None:
        if rate <= 0:
            return None
        if units_above_reorder <= 0:
            return 0
        return math.floor(Fraction(units_above_reorder) / rate)

    def estimated_days_until_reorder(self, item: Item) -> int | None:
        """Days until stock reaches the reorder level at the history rate."""
        units_above = self.current_inventory(item) - item.reorder_level
        days = self._days_until(units_above, self._history_rate(item))
        logger.debug("reorder_forecast_calculated", extra={
            "item_id": str(item.id),
            "units_above_reorder": units_above,
            "days_until_reorder": days,
        })
        return days

    def estimated_reorder_date(self, item: Item) -> datetime | None:
        """Calendar forecast using the trailing-window rate."""
        units_above = self.current_inventory(item) - item.reorder_level
        days = self._days_until(
            units_above, self._window_rate(item, self.usage_window_days)
        )
        if days is None:
            return None
        return self._clock.now() + timedelta(days=days)

    # -------------------------------------------------------------------------
    # Prices
    # -------------------------------------------------------------------------

    def lowest_price_purchase(self, item: Item) -> Purchase | None:
        if not item.purchases:
            return None
        return min(item.purchases, key=lambda p: p.price_per_unit)

    def lowest_price_paid(self, item: Item) -> Decimal | None:
        purchase = self.lowest_price_purchase(item)
        return purchase.price_per_unit if purchase is not None else None

    def average_price_paid(self, item: Item) -> Decimal | None:
        if not item.purchases:
            return None
        total = sum((p.price_per_unit for p in item.purchases), Decimal("0"))
        return total / len(item.purchases)

    def lowest_price_by_vendor(self, item: Item) -> tuple[VendorPrice, ...]:
        """
        Each vendor's minimum unit price for this item, cheapest first.

        Purchases without a vendor are skipped.
        """
        best: dict[UUID, VendorPrice] = {}
        for purchase in item.purchases:
            vendor = purchase.vendor
            if vendor is None:
                continue
            existing = best.get(vendor.id)
            if existing is None or purchase.price_per_unit < existing.price:
                best[vendor.id] = VendorPrice(vendor=vendor, price=purchase.price_per_unit)

        return tuple(sorted(best.values(), key=lambda vp: vp.price))

    def purchase_history(self, item: Item, limit: int | None = None) -> tuple[Purchase, ...]:
        """Purchases newest first, optionally capped at ``limit``."""
        ordered = sorted(item.purchases, key=lambda p: p.date, reverse=True)
        if limit is not None:
            ordered = ordered[:limit]
        return tuple(ordered)

    @traced_engine("ledger", "1.0",
                   fingerprint=lambda args: [item.id for item in args["items"]])
    def total_inventory_value(self, items: Sequence[Item]) -> Decimal:
        """
        Sum of stock x average price over items with purchase history.

        Items never purchased are omitted rather than valued at zero.
        """
        total = Decimal("0")
        valued = 0
        for item in items:
            average = self.average_price_paid(item)
            if average is None:
                continue
            total += Decimal(self.current_inventory(item)) * average
            valued += 1

        logger.info("inventory_value_calculated", extra={
            "item_count": len(items),
            "valued_item_count": valued,
            "total_value": str(total),
        })
        return total

    # -------------------------------------------------------------------------
    # Vendor analytics
    # -------------------------------------------------------------------------

    @staticmethod
    def vendor_purchases(vendor: Vendor, purchases: Sequence[Purchase]) -> tuple[Purchase, ...]:
        return tuple(p for p in purchases if p.vendor_id == vendor.id)

    def vendor_purchase_count(self, vendor: Vendor, purchases: Sequence[Purchase]) -> int:
        return len(self.vendor_purchases(vendor, purchases))

    def vendor_total_spent(self, vendor: Vendor, purchases: Sequence[Purchase]) -> Decimal:
        return sum(
            (p.total_cost for p in self.vendor_purchases(vendor, purchases)),
            Decimal("0"),
        )

    def vendor_purchases_for_item(
        self,
        vendor: Vendor,
        item: Item,
        purchases: Sequence[Purchase],
    ) -> tuple[Purchase, ...]:
        return tuple(
            p for p in self.vendor_purchases(vendor, purchases) if p.item_id == item.id
        )

    def vendor_lowest_price_for_item(
        self,
        vendor: Vendor,
        item: Item,
        purchases: Sequence[Purchase],
    ) -> Decimal | None:
        prices = [p.price_per_unit for p in self.vendor_purchases_for_item(vendor, item, purchases)]
        return min(prices) if prices else None

    def is_cheapest_vendor_for_any(self, vendor: Vendor, items: Sequence[Item]) -> bool:
        """True if ``vendor`` heads the vendor price ranking of any item."""
        for item in items:
            ranking = self.lowest_price_by_vendor(item)
            if ranking and ranking[0].vendor.id == vendor.id:
                return True
        return False

    # -------------------------------------------------------------------------
    # View-model
    # -------------------------------------------------------------------------

    def item_metrics(self, item: Item) -> ItemMetrics:
        """Bundle every per-item metric into one view-model."""
        with LogContext.bind(item_id=str(item.id)):
            lowest = self.lowest_price_purchase(item)
            return ItemMetrics(
                item_id=item.id,
                name=item.name,
                as_of=self._clock.now(),
                current_inventory=self.current_inventory(item),
                reorder_level=item.reorder_level,
                needs_reorder=self.needs_reorder(item),
                usage_rate_per_day=self.usage_rate_per_day(item),
                estimated_days_until_reorder=self.estimated_days_until_reorder(item),
                estimated_reorder_date=self.estimated_reorder_date(item),
                lowest_price_paid=lowest.price_per_unit if lowest is not None else None,
                lowest_price_vendor=lowest.vendor if lowest is not None else None,
                average_price_paid=self.average_price_paid(item),
                vendor_prices=self.lowest_price_by_vendor(item),
            )
