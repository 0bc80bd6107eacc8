"""
inventory_engines.expiration -- Per-lot expiration status and expiring-soon view.

Responsibility:
    Classify each purchase (lot) into one of five expiration tiers and list
    the lots that will expire inside a forward-looking window.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    "Now" comes from an injected ``Clock``; nothing here reads the system time.

Invariants enforced:
    - Tiers are mutually exclusive and evaluated in order:
      not-applicable -> expired -> critical -> warning -> good.
    - A lot whose expiration instant is strictly before now is EXPIRED even
      when its truncated day count is still 0.
    - The expiring-soon view never contains exhausted or already-expired lots.

Failure modes:
    - InvalidLookaheadError from ``items_expiring_within`` for days < 0.

Usage:
    classifier = ExpirationClassifier(clock)
    classifier.expiration_status(purchase)      # ExpirationStatus.CRITICAL
    classifier.items_expiring_within(30, items) # soonest first
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from inventory_engines.tracer import traced_engine
from inventory_kernel.domain.calendar import whole_days_between
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.entities import Item, Purchase
from inventory_kernel.exceptions import InvalidLookaheadError
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.expiration")


class ExpirationStatus(str, Enum):
    """Expiration tier of a single lot; the value is the display label."""

    NOT_APPLICABLE = "N/A"
    EXPIRED = "Expired"
    CRITICAL = "Expiring Soon"
    WARNING = "Expiring Within 30 Days"
    GOOD = "Good"

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


_STATUS_COLORS: dict[ExpirationStatus, str] = {
    ExpirationStatus.NOT_APPLICABLE: "gray",
    ExpirationStatus.EXPIRED: "red",
    ExpirationStatus.CRITICAL: "orange",
    ExpirationStatus.WARNING: "yellow",
    ExpirationStatus.GOOD: "green",
}


@dataclass(frozen=True)
class ExpiringLot:
    """One row of the expiring-soon view."""

    item: Item
    purchase: Purchase
    days_left: int


class ExpirationClassifier:
    """
    Expiration math for lots, relative to ``clock.now()``.

    Contract:
        Pure functions over the supplied entities; never mutates them.
    Guarantees:
        - ``days_until_expiration`` is ``None`` iff the lot has no
          expiration date.
        - ``items_expiring_within`` is sorted ascending by ``days_left``;
          ties keep input order.
    Non-goals:
        - Does not attribute usage to lots (no FIFO/FEFO consumption);
          ``remaining_quantity`` is taken as recorded.
    """

    def __init__(
        self,
        clock: Clock,
        critical_days: int = 7,
        warning_days: int = 30,
    ):
        self._clock = clock
        self.critical_days = critical_days
        self.warning_days = warning_days

    def is_expired(self, purchase: Purchase, now: datetime | None = None) -> bool:
        if purchase.expiration_date is None:
            return False
        now = now or self._clock.now()
        return purchase.expiration_date < now

    def days_until_expiration(
        self,
        purchase: Purchase,
        now: datetime | None = None,
    ) -> int | None:
        """Whole days from now to expiration; negative once expired."""
        if purchase.expiration_date is None:
            return None
        now = now or self._clock.now()
        return whole_days_between(now, purchase.expiration_date)

    def expiration_status(
        self,
        purchase: Purchase,
        now: datetime | None = None,
    ) -> ExpirationStatus:
        now = now or self._clock.now()
        days = self.days_until_expiration(purchase, now)
        if days is None:
            return ExpirationStatus.NOT_APPLICABLE
        if days < 0 or self.is_expired(purchase, now):
            return ExpirationStatus.EXPIRED
        if days <= self.critical_days:
            return ExpirationStatus.CRITICAL
        if days <= self.warning_days:
            return ExpirationStatus.WARNING
        return ExpirationStatus.GOOD

    def lots_expiring_within(self, item: Item, days: int) -> tuple[Purchase, ...]:
        """The item's unexhausted lots expiring in ``[now, now + days]``."""
        if days < 0:
            raise InvalidLookaheadError(days)
        now = self._clock.now()
        horizon = now + timedelta(days=days)
        return tuple(
            p for p in item.purchases
            if p.expiration_date is not None
            and p.remaining_quantity > 0
            and now <= p.expiration_date <= horizon
        )

    def expiring_within_30_days(self, item: Item) -> tuple[Purchase, ...]:
        return self.lots_expiring_within(item, 30)

    def next_expiring_purchase(self, item: Item) -> Purchase | None:
        """Unexhausted lot with the earliest expiration date, expired or not."""
        candidates = [
            p for p in item.purchases
            if p.expiration_date is not None and p.remaining_quantity > 0
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda p: p.expiration_date)

    @traced_engine("expiration", "1.0", fingerprint=lambda args: {
        "days": args["days"],
        "items": [item.id for item in args["items"]],
    })
    def items_expiring_within(
        self,
        days: int,
        items: Sequence[Item],
    ) -> tuple[ExpiringLot, ...]:
        """
        Every unexhausted lot expiring within ``days`` of now, soonest first.

        Preconditions:
            - ``days >= 0``.
        Postconditions:
            - Lots with ``remaining_quantity <= 0`` and lots already expired
              are absent.
        Raises:
            InvalidLookaheadError: If ``days`` is negative.
        """
        if days < 0:
            raise InvalidLookaheadError(days)

        now = self._clock.now()
        horizon = now + timedelta(days=days)
        results: list[ExpiringLot] = []

        for item in items:
            for purchase in item.purchases:
                exp = purchase.expiration_date
                if exp is None or purchase.remaining_quantity <= 0:
                    continue
                if exp < now or exp > horizon:
                    continue
                results.append(ExpiringLot(
                    item=item,
                    purchase=purchase,
                    days_left=whole_days_between(now, exp),
                ))

        results.sort(key=lambda lot: lot.days_left)

        logger.info("expiring_lots_listed", extra={
            "lookahead_days": days,
            "item_count": len(items),
            "lot_count": len(results),
        })
        return tuple(results)
