"""
Tests for the Duplicate Detector.

Covers:
- Name similarity for items (case/whitespace-insensitive, edit threshold)
- Vendor matching by name, phone digits or email
- Purchase and usage matching (same item, day, quantity, price tolerance)
- Records referencing missing or soft-deleted items are excluded
- Greedy grouping: disjoint groups, order dependence, over-merge
- Full scan over a snapshot
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from inventory_engines.duplicates import (
    DuplicateDetector,
    DuplicateKind,
    DuplicateReport,
    cluster_greedy,
)
from inventory_kernel.domain.entities import InventorySnapshot
from tests.factories import (
    NOW,
    make_item,
    make_purchase,
    make_usage,
    make_vendor,
)


@pytest.fixture
def detector():
    return DuplicateDetector()


def _names(groups):
    return [[m.name for m in g.members] for g in groups]


class TestItemDuplicates:
    """Item names within the edit-distance threshold group together."""

    def test_empty_collection(self, detector):
        assert detector.find_duplicate_items([]) == ()

    def test_widget_seed_collects_both(self, detector):
        """widget~widgett (1) and widget~gadget (2) are both within 2."""
        items = [make_item("Widget"), make_item("Widgett"), make_item("Gadget")]

        groups = detector.find_duplicate_items(items)

        assert _names(groups) == [["Widget", "Widgett", "Gadget"]]
        assert groups[0].kind == DuplicateKind.ITEMS
        assert groups[0].size == 3

    def test_order_dependent_grouping(self, detector):
        """Seeded from Gadget, Widgett (distance 3) is left out."""
        items = [make_item("Gadget"), make_item("Widget"), make_item("Widgett")]

        groups = detector.find_duplicate_items(items)

        assert _names(groups) == [["Gadget", "Widget"]]

    def test_case_and_whitespace_ignored(self, detector):
        items = [make_item("  Nitrile GLOVES "), make_item("nitrile gloves")]

        assert len(detector.find_duplicate_items(items)) == 1

    def test_distinct_names_no_groups(self, detector):
        items = [make_item("Gloves"), make_item("Syringes"), make_item("Gauze")]

        assert detector.find_duplicate_items(items) == ()

    def test_soft_deleted_items_excluded(self, detector):
        items = [make_item("Gloves"), make_item("Gloves", is_deleted=True, deleted_at=NOW)]

        assert detector.find_duplicate_items(items) == ()

    def test_soft_deleted_included_when_configured(self):
        detector = DuplicateDetector(exclude_soft_deleted=False)
        items = [make_item("Gloves"), make_item("Gloves", is_deleted=True)]

        assert len(detector.find_duplicate_items(items)) == 1

    def test_custom_threshold(self):
        detector = DuplicateDetector(name_distance_threshold=0)
        items = [make_item("Widget"), make_item("Widgett"), make_item("widget")]

        assert _names(detector.find_duplicate_items(items)) == [["Widget", "widget"]]

    def test_idempotent(self, detector):
        items = [make_item("Widget"), make_item("Widgett"), make_item("Bolt"), make_item("Bolts")]

        first = detector.find_duplicate_items(items)
        second = detector.find_duplicate_items(items)

        assert first == second


class TestVendorDuplicates:
    """Vendors match on name, phone digits or email."""

    def test_similar_names(self, detector):
        vendors = [make_vendor("Acme Supply"), make_vendor("ACME Suply")]

        assert len(detector.find_duplicate_vendors(vendors)) == 1

    def test_same_phone_different_formatting(self, detector):
        vendors = [
            make_vendor("North Medical", phone="(555) 123-4567"),
            make_vendor("Southside Dental", phone="555.123.4567"),
        ]

        groups = detector.find_duplicate_vendors(vendors)

        assert len(groups) == 1
        assert groups[0].kind == DuplicateKind.VENDORS

    def test_same_email_case_insensitive(self, detector):
        vendors = [
            make_vendor("North Medical", email="Orders@Example.com"),
            make_vendor("Southside Dental", email="orders@example.com "),
        ]

        assert len(detector.find_duplicate_vendors(vendors)) == 1

    def test_blank_contact_fields_never_match(self, detector):
        vendors = [make_vendor("North Medical"), make_vendor("Southside Dental")]

        assert detector.find_duplicate_vendors(vendors) == ()

    def test_soft_deleted_vendor_excluded(self, detector):
        vendors = [make_vendor("Acme"), make_vendor("Acme", is_deleted=True)]

        assert detector.find_duplicate_vendors(vendors) == ()


class TestPurchaseDuplicates:
    """Same item, vendor, day and quantity, price within tolerance."""

    def test_same_day_same_everything(self, detector):
        item = make_item()
        vendor = make_vendor()
        purchases = [
            make_purchase(item, 10, "1.00", vendor=vendor, date=NOW),
            make_purchase(item, 10, "1.00", vendor=vendor, date=NOW + timedelta(hours=6)),
        ]

        groups = detector.find_duplicate_purchases(purchases, [item])

        assert len(groups) == 1
        assert groups[0].member_ids == (purchases[0].id, purchases[1].id)

    def test_both_vendors_none_match(self, detector):
        item = make_item()
        purchases = [make_purchase(item), make_purchase(item)]

        assert len(detector.find_duplicate_purchases(purchases, [item])) == 1

    def test_one_vendor_none_does_not_match(self, detector):
        item = make_item()
        purchases = [make_purchase(item, vendor=make_vendor()), make_purchase(item)]

        assert detector.find_duplicate_purchases(purchases, [item]) == ()

    def test_different_day(self, detector):
        item = make_item()
        purchases = [
            make_purchase(item, date=NOW),
            make_purchase(item, date=NOW + timedelta(hours=13)),
        ]

        assert detector.find_duplicate_purchases(purchases, [item]) == ()

    def test_different_quantity(self, detector):
        item = make_item()
        purchases = [make_purchase(item, 10), make_purchase(item, 11)]

        assert detector.find_duplicate_purchases(purchases, [item]) == ()

    @pytest.mark.parametrize("other_price,expected_groups", [
        ("1.00", 1),
        ("1.005", 1),
        ("0.995", 1),
        ("1.01", 0),
        ("1.50", 0),
    ])
    def test_price_tolerance(self, detector, other_price, expected_groups):
        """Prices match when strictly closer than one cent."""
        item = make_item()
        purchases = [make_purchase(item, price="1.00"), make_purchase(item, price=other_price)]

        assert len(detector.find_duplicate_purchases(purchases, [item])) == expected_groups

    def test_missing_item_reference_excluded(self, detector):
        purchases = [make_purchase(None), make_purchase(None)]

        assert detector.find_duplicate_purchases(purchases, []) == ()

    def test_deleted_item_excluded(self, detector):
        item = make_item(is_deleted=True)
        purchases = [make_purchase(item), make_purchase(item)]

        assert detector.find_duplicate_purchases(purchases, [item]) == ()

    def test_item_not_in_collection_excluded(self, detector):
        item = make_item()
        purchases = [make_purchase(item), make_purchase(item)]

        assert detector.find_duplicate_purchases(purchases, [make_item("Other")]) == ()


class TestUsageDuplicates:
    """Same item, day and quantity."""

    def test_same_day_same_quantity(self, detector):
        item = make_item()
        usages = [make_usage(item, 2), make_usage(item, 2, date=NOW - timedelta(hours=3))]

        groups = detector.find_duplicate_usages(usages, [item])

        assert len(groups) == 1
        assert groups[0].kind == DuplicateKind.USAGES

    def test_different_items(self, detector):
        a, b = make_item("A"), make_item("B")
        usages = [make_usage(a, 2), make_usage(b, 2)]

        assert detector.find_duplicate_usages(usages, [a, b]) == ()

    def test_missing_item_excluded(self, detector):
        usages = [make_usage(None, 2), make_usage(None, 2)]

        assert detector.find_duplicate_usages(usages, []) == ()


class TestClusterGreedy:
    """Generic greedy grouping."""

    @staticmethod
    def _close(a, b):
        return abs(a - b) <= 1

    def test_over_merge(self):
        """1~2 and 2~3 but 1!~3: seed 2 pulls in both neighbours."""
        groups = cluster_greedy([2, 1, 3], self._close, key=lambda n: n)

        assert groups == [(2, 1, 3)]

    def test_chain_split_by_order(self):
        """Seed 1 takes 2; 3 is left without a partner."""
        groups = cluster_greedy([1, 2, 3], self._close, key=lambda n: n)

        assert groups == [(1, 2)]

    def test_groups_are_disjoint(self):
        groups = cluster_greedy([1, 2, 10, 11, 20], self._close, key=lambda n: n)

        assert groups == [(1, 2), (10, 11)]
        members = [m for g in groups for m in g]
        assert len(members) == len(set(members))

    def test_unmatched_seed_can_join_later_group(self):
        """A seed with no match stays eligible for later seeds."""
        groups = cluster_greedy([5, 1, 2], lambda a, b: a != 5 and abs(a - b) <= 4,
                                key=lambda n: n)

        assert groups == [(1, 5, 2)]


class TestFullScan:
    """Scan runs all four kinds over one snapshot."""

    def test_empty_snapshot(self, detector):
        report = detector.scan(InventorySnapshot())

        assert report == DuplicateReport()
        assert report.has_duplicates is False
        assert report.group_count == 0

    def test_scan_snapshot(self, detector):
        vendor = make_vendor("Acme")
        gloves = make_item("Gloves")
        purchases = (
            make_purchase(gloves, 5, vendor=vendor),
            make_purchase(gloves, 5, vendor=vendor),
        )
        snapshot = InventorySnapshot(
            items=(gloves, make_item("Glove")),
            vendors=(vendor, make_vendor("Acme Co", phone="555-0100")),
            purchases=purchases,
            usages=(make_usage(gloves, 1),),
        )

        report = detector.scan(snapshot)

        assert len(report.items) == 1
        assert len(report.vendors) == 0
        assert len(report.purchases) == 1
        assert report.usages == ()
        assert report.group_count == 2
        assert report.groups_for(DuplicateKind.PURCHASES) == report.purchases

    def test_scan_logs(self, detector, captured_logs):
        detector.scan(snapshot=InventorySnapshot())

        messages = [r["message"] for r in captured_logs()]
        assert "duplicate_scan_started" in messages
        assert "duplicate_scan_completed" in messages
        assert "INVENTORY_ENGINE_TRACE" in messages
