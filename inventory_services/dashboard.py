"""
DashboardService -- Synchronous dashboard view-model.

Contract:
    ``build_summary(items)`` recomputes every figure from the ledger on
    each call (no caching) and returns a frozen ``DashboardSummary``.
    Soft-deleted items are left out.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from inventory_config.bridges import build_expiration_classifier, build_ledger_aggregator
from inventory_config.schema import EngineSettings
from inventory_engines.expiration import ExpirationClassifier, ExpiringLot
from inventory_engines.ledger import ItemMetrics, LedgerAggregator
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.entities import Item, Vendor
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.dashboard")


@dataclass(frozen=True)
class PriceAnalyticsRow:
    """One item in the price-analytics card; only items with purchases appear."""

    item: Item
    lowest_price: Decimal
    average_price: Decimal
    lowest_price_vendor: Vendor | None


@dataclass(frozen=True)
class DashboardSummary:
    as_of: datetime
    total_items: int
    reorder_alerts: tuple[ItemMetrics, ...]
    expiring_soon: tuple[ExpiringLot, ...]
    total_inventory_value: Decimal
    price_analytics: tuple[PriceAnalyticsRow, ...]

    @property
    def reorder_count(self) -> int:
        return len(self.reorder_alerts)


class DashboardService:
    """Builds the dashboard cards from the ledger engines."""

    def __init__(
        self,
        aggregator: LedgerAggregator,
        classifier: ExpirationClassifier,
        clock: Clock,
        lookahead_days: int = 30,
    ):
        self._aggregator = aggregator
        self._classifier = classifier
        self._clock = clock
        self._lookahead_days = lookahead_days

    @classmethod
    def from_settings(cls, settings: EngineSettings, clock: Clock) -> DashboardService:
        return cls(
            aggregator=build_ledger_aggregator(settings, clock),
            classifier=build_expiration_classifier(settings, clock),
            clock=clock,
            lookahead_days=settings.expiration.default_lookahead_days,
        )

    def build_summary(self, items: Sequence[Item]) -> DashboardSummary:
        live = [i for i in items if not i.is_deleted]

        reorder_alerts = tuple(
            self._aggregator.item_metrics(i)
            for i in self._aggregator.items_needing_reorder(live)
        )

        price_rows: list[PriceAnalyticsRow] = []
        for item in live:
            lowest = self._aggregator.lowest_price_purchase(item)
            average = self._aggregator.average_price_paid(item)
            if lowest is None or average is None:
                continue
            price_rows.append(PriceAnalyticsRow(
                item=item,
                lowest_price=lowest.price_per_unit,
                average_price=average,
                lowest_price_vendor=lowest.vendor,
            ))

        summary = DashboardSummary(
            as_of=self._clock.now(),
            total_items=len(live),
            reorder_alerts=reorder_alerts,
            expiring_soon=self._classifier.items_expiring_within(
                days=self._lookahead_days, items=live,
            ),
            total_inventory_value=self._aggregator.total_inventory_value(items=live),
            price_analytics=tuple(price_rows),
        )

        logger.info("dashboard_summary_built", extra={
            "total_items": summary.total_items,
            "reorder_count": summary.reorder_count,
            "expiring_count": len(summary.expiring_soon),
            "total_inventory_value": str(summary.total_inventory_value),
        })
        return summary
