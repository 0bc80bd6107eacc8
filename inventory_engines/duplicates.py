"""
inventory_engines.duplicates -- Near-duplicate clustering across the four ledgers.

Responsibility:
    Flag groups of items, vendors, purchases and usage records that look
    like the same real-world record entered twice, for a human to review.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    One greedy clustering routine (``cluster_greedy``) parameterized by a
    similarity predicate per entity kind.

Invariants enforced:
    - Greedy, order-dependent clustering: the first entity (in collection
      order) that matches anything seeds a group of itself plus every
      not-yet-processed match, and all members are then final.  Similarity
      is NOT closed transitively; a group is the seed's direct matches.
    - Entities with no match are absent from the report (no singletons).
    - Purchases/usage whose item reference is missing or soft-deleted are
      excluded before matching, never matched with each other.
    - Deterministic: the same collections in the same order give the same
      groups.

Failure modes:
    None.  Empty collections give empty results.

Performance:
    O(n^2) comparisons per collection, each item/vendor comparison adding an
    O(L^2) edit distance.  Run it off the rendering thread
    (see ``inventory_services.duplicate_scan``).

Usage:
    detector = DuplicateDetector()
    report = detector.scan(snapshot)
    for group in report.items:
        print([item.name for item in group.members])
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar
from uuid import UUID

from inventory_engines.levenshtein import levenshtein_distance
from inventory_engines.tracer import traced_engine
from inventory_kernel.domain.calendar import same_calendar_day
from inventory_kernel.domain.entities import (
    InventorySnapshot,
    Item,
    Purchase,
    Usage,
    Vendor,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.utils.phone import phone_digits

logger = get_logger("engines.duplicates")

T = TypeVar("T")


class DuplicateKind(str, Enum):
    """Entity collection a duplicate group came from."""

    ITEMS = "items"
    VENDORS = "vendors"
    PURCHASES = "purchases"
    USAGES = "usages"


@dataclass(frozen=True)
class DuplicateGroup:
    """
    Two or more entities of one kind judged similar enough to review.

    ``members[0]`` is the seed the group was built from.
    """

    kind: DuplicateKind
    members: tuple[Any, ...]

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def member_ids(self) -> tuple[UUID, ...]:
        return tuple(m.id for m in self.members)


@dataclass(frozen=True)
class DuplicateReport:
    """The four duplicate-group lists published after a scan."""

    items: tuple[DuplicateGroup, ...] = ()
    vendors: tuple[DuplicateGroup, ...] = ()
    purchases: tuple[DuplicateGroup, ...] = ()
    usages: tuple[DuplicateGroup, ...] = ()

    @property
    def has_duplicates(self) -> bool:
        return bool(self.items or self.vendors or self.purchases or self.usages)

    @property
    def group_count(self) -> int:
        return len(self.items) + len(self.vendors) + len(self.purchases) + len(self.usages)

    def groups_for(self, kind: DuplicateKind) -> tuple[DuplicateGroup, ...]:
        return getattr(self, kind.value)


def normalize_name(name: str) -> str:
    return name.strip().lower()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def cluster_greedy(
    entities: Sequence[T],
    predicate: Callable[[T, T], bool],
    key: Callable[[T], Hashable] = lambda e: e.id,
) -> list[tuple[T, ...]]:
    """
    Greedy single-pass clustering.

    For each entity not yet processed, collect every other unprocessed
    entity satisfying ``predicate(seed, other)``.  A non-empty match list
    becomes a group ``(seed, *matches)`` and all members are marked
    processed.  Seeds with no match are skipped and stay eligible as
    matches for later seeds.
    """
    groups: list[tuple[T, ...]] = []
    processed: set[Hashable] = set()

    for seed in entities:
        seed_key = key(seed)
        if seed_key in processed:
            continue

        matches = [
            other for other in entities
            if key(other) != seed_key
            and key(other) not in processed
            and predicate(seed, other)
        ]
        if not matches:
            continue

        group = (seed, *matches)
        groups.append(group)
        processed.update(key(member) for member in group)

    return groups


class DuplicateDetector:
    """
    Near-duplicate classification for all four entity kinds.

    Contract:
        Read-only over its inputs; never deletes or merges anything.
    Guarantees:
        - Every returned group has at least two members of one kind.
        - No entity appears in more than one group of the same kind.
    Non-goals:
        - Does not compute a true equivalence partition; greedy grouping
          may over-merge (A~B, B~C, A!~C) or split depending on order.
    """

    def __init__(
        self,
        name_distance_threshold: int = 2,
        price_tolerance: Decimal = Decimal("0.01"),
        exclude_soft_deleted: bool = True,
    ):
        self.name_distance_threshold = name_distance_threshold
        self.price_tolerance = price_tolerance
        self.exclude_soft_deleted = exclude_soft_deleted

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def names_similar(self, a: str, b: str) -> bool:
        """Names (already normalized) are equal or within the edit threshold."""
        if a == b:
            return True
        # Length gap alone already exceeds the threshold
        if abs(len(a) - len(b)) > self.name_distance_threshold:
            return False
        return levenshtein_distance(a, b) <= self.name_distance_threshold

    def prices_match(self, a: Decimal, b: Decimal) -> bool:
        return abs(a - b) < self.price_tolerance

    def _live(self, entities: Sequence[T]) -> list[T]:
        if not self.exclude_soft_deleted:
            return list(entities)
        return [e for e in entities if not getattr(e, "is_deleted", False)]

    @staticmethod
    def _with_live_item(records: Sequence[T], items: Sequence[Item]) -> list[T]:
        """Keep records whose item exists in ``items`` and is not soft-deleted."""
        live_ids = {i.id for i in items if not i.is_deleted}
        return [r for r in records if r.item_id is not None and r.item_id in live_ids]

    # -------------------------------------------------------------------------
    # Per-kind scans
    # -------------------------------------------------------------------------

    def find_duplicate_items(self, items: Sequence[Item]) -> tuple[DuplicateGroup, ...]:
        candidates = self._live(items)
        names = {i.id: normalize_name(i.name) for i in candidates}

        groups = cluster_greedy(
            candidates,
            lambda a, b: self.names_similar(names[a.id], names[b.id]),
        )
        return tuple(DuplicateGroup(DuplicateKind.ITEMS, g) for g in groups)

    def find_duplicate_vendors(self, vendors: Sequence[Vendor]) -> tuple[DuplicateGroup, ...]:
        candidates = self._live(vendors)
        keys = {
            v.id: (normalize_name(v.name), phone_digits(v.phone), normalize_email(v.email))
            for v in candidates
        }

        def similar(a: Vendor, b: Vendor) -> bool:
            name_a, phone_a, email_a = keys[a.id]
            name_b, phone_b, email_b = keys[b.id]
            if self.names_similar(name_a, name_b):
                return True
            if phone_a and phone_b and phone_a == phone_b:
                return True
            return bool(email_a and email_b and email_a == email_b)

        groups = cluster_greedy(candidates, similar)
        return tuple(DuplicateGroup(DuplicateKind.VENDORS, g) for g in groups)

    def find_duplicate_purchases(
        self,
        purchases: Sequence[Purchase],
        items: Sequence[Item],
    ) -> tuple[DuplicateGroup, ...]:
        candidates = self._with_live_item(purchases, items)

        def similar(a: Purchase, b: Purchase) -> bool:
            return (
                a.item_id == b.item_id
                and a.vendor_id == b.vendor_id  # both None counts as same
                and same_calendar_day(a.date, b.date)
                and a.quantity == b.quantity
                and self.prices_match(a.price_per_unit, b.price_per_unit)
            )

        groups = cluster_greedy(candidates, similar)
        return tuple(DuplicateGroup(DuplicateKind.PURCHASES, g) for g in groups)

    def find_duplicate_usages(
        self,
        usages: Sequence[Usage],
        items: Sequence[Item],
    ) -> tuple[DuplicateGroup, ...]:
        candidates = self._with_live_item(usages, items)

        def similar(a: Usage, b: Usage) -> bool:
            return (
                a.item_id == b.item_id
                and same_calendar_day(a.date, b.date)
                and a.quantity == b.quantity
            )

        groups = cluster_greedy(candidates, similar)
        return tuple(DuplicateGroup(DuplicateKind.USAGES, g) for g in groups)

    # -------------------------------------------------------------------------
    # Full scan
    # -------------------------------------------------------------------------

    @traced_engine("duplicates", "1.0",
                   fingerprint=lambda args: args["snapshot"].collection_sizes())
    def scan(self, snapshot: InventorySnapshot) -> DuplicateReport:
        """Run all four scans over one snapshot."""
        t0 = time.monotonic()
        logger.info("duplicate_scan_started", extra={
            "item_count": len(snapshot.items),
            "vendor_count": len(snapshot.vendors),
            "purchase_count": len(snapshot.purchases),
            "usage_count": len(snapshot.usages),
        })

        report = DuplicateReport(
            items=self.find_duplicate_items(snapshot.items),
            vendors=self.find_duplicate_vendors(snapshot.vendors),
            purchases=self.find_duplicate_purchases(snapshot.purchases, snapshot.items),
            usages=self.find_duplicate_usages(snapshot.usages, snapshot.items),
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("duplicate_scan_completed", extra={
            "item_groups": len(report.items),
            "vendor_groups": len(report.vendors),
            "purchase_groups": len(report.purchases),
            "usage_groups": len(report.usages),
            "duration_ms": duration_ms,
        })
        return report
