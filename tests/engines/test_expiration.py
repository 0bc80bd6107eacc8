"""
Tests for the Expiration Classifier.

Covers:
- is_expired / days_until_expiration
- Tier boundaries (7/8/30/31 days, 0 and negative)
- Expiring-within view filtering and ordering
- Next expiring lot per item
"""

from datetime import timedelta

import pytest

from inventory_engines.expiration import ExpirationClassifier, ExpirationStatus
from inventory_kernel.exceptions import InvalidLookaheadError
from tests.factories import NOW, days_from_now, make_item, make_purchase, with_ledger


class TestDaysUntilExpiration:
    """Whole-day arithmetic relative to the injected clock."""

    @pytest.fixture(autouse=True)
    def _classifier(self, clock):
        self.classifier = ExpirationClassifier(clock)
        self.item = make_item()

    def test_no_expiration_date(self):
        """No expiration date gives None and not-expired."""
        purchase = make_purchase(self.item)

        assert self.classifier.days_until_expiration(purchase) is None
        assert self.classifier.is_expired(purchase) is False

    def test_future_expiration(self):
        purchase = make_purchase(self.item, expiration_date=days_from_now(10))

        assert self.classifier.days_until_expiration(purchase) == 10
        assert self.classifier.is_expired(purchase) is False

    def test_partial_days_truncate(self):
        """36 hours out is one whole day."""
        purchase = make_purchase(self.item, expiration_date=NOW + timedelta(hours=36))

        assert self.classifier.days_until_expiration(purchase) == 1

    def test_past_expiration_negative(self):
        purchase = make_purchase(self.item, expiration_date=days_from_now(-3))

        assert self.classifier.days_until_expiration(purchase) == -3
        assert self.classifier.is_expired(purchase) is True

    def test_expired_hours_ago_counts_zero_days(self):
        """Truncation toward zero: 5 hours past is 0 days, but expired."""
        purchase = make_purchase(self.item, expiration_date=NOW - timedelta(hours=5))

        assert self.classifier.days_until_expiration(purchase) == 0
        assert self.classifier.is_expired(purchase) is True


class TestExpirationStatus:
    """Tier classification boundaries."""

    @pytest.fixture(autouse=True)
    def _classifier(self, clock):
        self.classifier = ExpirationClassifier(clock)
        self.item = make_item()

    def _status(self, days):
        purchase = make_purchase(self.item, expiration_date=days_from_now(days))
        return self.classifier.expiration_status(purchase)

    def test_not_applicable(self):
        assert self.classifier.expiration_status(make_purchase(self.item)) \
            == ExpirationStatus.NOT_APPLICABLE

    @pytest.mark.parametrize(
        "days, expected",
        [
            (-10, ExpirationStatus.EXPIRED),
            (-1, ExpirationStatus.EXPIRED),
            (1, ExpirationStatus.CRITICAL),
            (7, ExpirationStatus.CRITICAL),
            (8, ExpirationStatus.WARNING),
            (30, ExpirationStatus.WARNING),
            (31, ExpirationStatus.GOOD),
            (365, ExpirationStatus.GOOD),
        ],
    )
    def test_boundaries(self, days, expected):
        assert self._status(days) == expected

    def test_zero_days_already_passed_is_expired(self):
        """Expired earlier today: 0 whole days, still EXPIRED."""
        purchase = make_purchase(self.item, expiration_date=NOW - timedelta(minutes=1))

        assert self.classifier.expiration_status(purchase) == ExpirationStatus.EXPIRED

    def test_expiring_exactly_now_is_critical(self):
        """Not strictly before now, so not expired."""
        purchase = make_purchase(self.item, expiration_date=NOW)

        assert self.classifier.expiration_status(purchase) == ExpirationStatus.CRITICAL

    def test_custom_thresholds(self, clock):
        classifier = ExpirationClassifier(clock, critical_days=3, warning_days=14)
        purchase = make_purchase(self.item, expiration_date=days_from_now(5))

        assert classifier.expiration_status(purchase) == ExpirationStatus.WARNING

    def test_labels_and_colors(self):
        assert ExpirationStatus.CRITICAL.value == "Expiring Soon"
        assert ExpirationStatus.EXPIRED.color == "red"
        assert ExpirationStatus.NOT_APPLICABLE.color == "gray"


class TestItemsExpiringWithin:
    """Forward-looking expiring-soon view."""

    @pytest.fixture(autouse=True)
    def _classifier(self, clock):
        self.classifier = ExpirationClassifier(clock)

    def test_sorted_soonest_first(self):
        item = make_item("Milk")
        late = make_purchase(item, expiration_date=days_from_now(20))
        soon = make_purchase(item, expiration_date=days_from_now(2))
        other = make_item("Yogurt")
        middle = make_purchase(other, expiration_date=days_from_now(9))
        items = [
            with_ledger(item, purchases=[late, soon]),
            with_ledger(other, purchases=[middle]),
        ]

        lots = self.classifier.items_expiring_within(30, items)

        assert [lot.purchase.id for lot in lots] == [soon.id, middle.id, late.id]
        assert [lot.days_left for lot in lots] == [2, 9, 20]
        assert lots[1].item.name == "Yogurt"

    def test_excludes_exhausted_lot(self):
        """remaining_quantity == 0 is excluded even inside the window."""
        item = make_item()
        used_up = make_purchase(item, quantity=5, used_quantity=5,
                                expiration_date=days_from_now(3))
        item = with_ledger(item, purchases=[used_up])

        assert self.classifier.items_expiring_within(30, [item]) == ()

    def test_excludes_already_expired(self):
        item = make_item()
        expired = make_purchase(item, expiration_date=days_from_now(-1))
        item = with_ledger(item, purchases=[expired])

        assert self.classifier.items_expiring_within(30, [item]) == ()

    def test_window_is_inclusive(self):
        item = make_item()
        edge = make_purchase(item, expiration_date=days_from_now(30))
        beyond = make_purchase(item, expiration_date=days_from_now(31))
        item = with_ledger(item, purchases=[edge, beyond])

        lots = self.classifier.items_expiring_within(30, [item])

        assert [lot.purchase.id for lot in lots] == [edge.id]

    def test_excludes_lots_without_expiration(self):
        item = make_item()
        item = with_ledger(item, purchases=[make_purchase(item)])

        assert self.classifier.items_expiring_within(30, [item]) == ()

    def test_negative_lookahead_rejected(self):
        with pytest.raises(InvalidLookaheadError) as exc_info:
            self.classifier.items_expiring_within(-1, [])

        assert exc_info.value.code == "INVALID_LOOKAHEAD"
        assert exc_info.value.days == -1

    def test_emits_trace(self, captured_logs):
        self.classifier.items_expiring_within(days=30, items=[])

        traces = [r for r in captured_logs() if r["message"] == "INVENTORY_ENGINE_TRACE"]
        assert traces and traces[0]["engine_name"] == "expiration"


class TestPerItemExpiration:
    """Per-item helpers."""

    @pytest.fixture(autouse=True)
    def _classifier(self, clock):
        self.classifier = ExpirationClassifier(clock)

    def test_next_expiring_purchase(self):
        item = make_item()
        a = make_purchase(item, expiration_date=days_from_now(40))
        b = make_purchase(item, expiration_date=days_from_now(5))
        exhausted = make_purchase(item, quantity=2, used_quantity=2,
                                  expiration_date=days_from_now(1))
        item = with_ledger(item, purchases=[a, b, exhausted])

        assert self.classifier.next_expiring_purchase(item) == b

    def test_next_expiring_purchase_none(self):
        item = make_item()
        item = with_ledger(item, purchases=[make_purchase(item)])

        assert self.classifier.next_expiring_purchase(item) is None

    def test_expiring_within_30_days(self):
        item = make_item()
        inside = make_purchase(item, expiration_date=days_from_now(12))
        outside = make_purchase(item, expiration_date=days_from_now(45))
        item = with_ledger(item, purchases=[inside, outside])

        assert self.classifier.expiring_within_30_days(item) == (inside,)
