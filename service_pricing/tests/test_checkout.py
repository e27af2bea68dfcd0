"""
Unit tests for Checkout.
"""

import threading
import pytest
from decimal import Decimal

from service_pricing.app.cart.models import CartItem
from service_pricing.app.checkout.checkout import Checkout
from service_pricing.app.rules.engine import RuleEngine
from service_pricing.app.rules.models import (
    Condition, ConditionKind, Action, ActionKind, PricingRule
)
from service_pricing.app.rules.values import ConditionOperator
from shared.errors import ConfigurationError, EvaluationError, ValidationError
from shared.metrics import PricingMetrics


@pytest.fixture
def voucher():
    return CartItem("VOUCHER", "Gift Card", 5.00)


@pytest.fixture
def tshirt():
    return CartItem("TSHIRT", "Summer T-Shirt", 20.00)


@pytest.fixture
def pants():
    return CartItem("PANTS", "Summer Pants", 7.50)


@pytest.fixture
def pricing_rules():
    return [
        PricingRule.create(
            conditions=[
                Condition.create(ConditionKind.ITEM_CODE, ConditionOperator.EQ, "VOUCHER"),
                Condition.create(ConditionKind.X_QUANTITY, value=2),
            ],
            actions=[Action.create(ActionKind.DISCOUNT_PERCENT, 100)]
        ),
        PricingRule.create(
            conditions=[
                Condition.create(ConditionKind.ITEM_CODE, ConditionOperator.EQ, "TSHIRT"),
                Condition.create(ConditionKind.QUANTITY_TOTAL, ConditionOperator.GTE, 3),
            ],
            actions=[Action.create(ActionKind.FIXED_PRICE, 19)]
        ),
    ]


class TestCheckout:
    """Test cases for Checkout."""

    def test_example_1(self, pricing_rules, voucher, tshirt, pants):
        checkout = Checkout(pricing_rules)
        for item in (voucher, tshirt, pants):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("32.50")

    def test_example_2(self, pricing_rules, voucher, tshirt):
        checkout = Checkout(pricing_rules)
        for item in (voucher, tshirt, voucher):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("25.00")

    def test_example_3(self, pricing_rules, voucher, tshirt):
        checkout = Checkout(pricing_rules)
        for item in (tshirt, tshirt, tshirt, voucher, tshirt):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("81.00")

    def test_example_4(self, pricing_rules, voucher, tshirt, pants):
        checkout = Checkout(pricing_rules)
        for item in (voucher, tshirt, voucher, voucher, pants, tshirt, tshirt):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("74.50")
        assert checkout.get_subtotal() == Decimal("82.50")
        assert checkout.get_discount_total() == Decimal("8.00")

    def test_example_4_grouped_scan_order(self, pricing_rules, voucher, tshirt, pants):
        checkout = Checkout(pricing_rules)
        for item in (voucher, voucher, voucher, tshirt, tshirt, tshirt, pants):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("74.50")
        assert [item.discount for item in checkout.get_cart_items()] == [
            Decimal("5.00"), Decimal("0"), Decimal("0"),
            Decimal("1.00"), Decimal("1.00"), Decimal("1.00"), Decimal("0"),
        ]

    def test_total_tracks_every_scan(self, pricing_rules, voucher, tshirt):
        checkout = Checkout(pricing_rules)
        totals = []
        for item in (tshirt, voucher, tshirt, voucher, tshirt):
            checkout.scan(item)
            totals.append(checkout.get_total())

        assert totals == [
            Decimal("20.00"), Decimal("25.00"), Decimal("45.00"), Decimal("45.00"), Decimal("62.00")
        ]

    def test_total_matches_cart_items(self, pricing_rules, voucher, tshirt, pants):
        checkout = Checkout(pricing_rules)
        for item in (voucher, voucher, voucher, tshirt, tshirt, tshirt, pants):
            checkout.scan(item)

        items = checkout.get_cart_items()
        assert checkout.get_total() == sum(item.price - item.discount for item in items)
        assert all(0 <= item.discount <= item.price for item in items)

    def test_cart_items_keep_scan_order(self, pricing_rules, voucher, tshirt, pants):
        checkout = Checkout(pricing_rules)
        for item in (pants, voucher, tshirt, voucher):
            checkout.scan(item)

        assert [item.code for item in checkout.get_cart_items()] == ["PANTS", "VOUCHER", "TSHIRT", "VOUCHER"]
        assert len(checkout) == 4

    def test_same_item_scanned_twice_gives_distinct_entries(self, pricing_rules, voucher):
        checkout = Checkout(pricing_rules)
        checkout.scan(voucher)
        checkout.scan(voucher)

        first, second = checkout.get_cart_items()
        assert first is not second
        assert first.discount == Decimal("5.00")
        assert second.discount == 0
        assert voucher.discount == 0

    def test_get_cart_items_returns_copy_of_list(self, pricing_rules, voucher):
        checkout = Checkout(pricing_rules)
        checkout.scan(voucher)

        checkout.get_cart_items().clear()

        assert len(checkout.get_cart_items()) == 1

    def test_empty_checkout(self, pricing_rules):
        checkout = Checkout(pricing_rules)

        assert checkout.get_total() == 0
        assert checkout.get_cart_items() == []

    def test_without_rules(self, voucher, tshirt):
        checkout = Checkout()
        checkout.scan(voucher)
        checkout.scan(voucher)
        checkout.scan(tshirt)

        assert checkout.get_total() == Decimal("30.00")

    def test_scan_none_is_rejected(self, pricing_rules):
        checkout = Checkout(pricing_rules)

        with pytest.raises(ValidationError):
            checkout.scan(None)

        assert checkout.get_cart_items() == []

    def test_scan_non_item_is_rejected(self, pricing_rules):
        checkout = Checkout(pricing_rules)

        with pytest.raises(ValidationError):
            checkout.scan({"code": "VOUCHER"})

    def test_currency_mismatch_is_rejected(self, pricing_rules, voucher):
        checkout = Checkout(pricing_rules)
        checkout.scan(voucher)

        with pytest.raises(ValidationError) as exc_info:
            checkout.scan(CartItem("MUG", "Mug", Decimal("8"), "USD"))

        assert exc_info.value.details["expected"] == "EUR"
        assert len(checkout) == 1

    def test_configured_currency(self, voucher):
        checkout = Checkout(currency="GBP")

        with pytest.raises(ValidationError):
            checkout.scan(voucher)

    def test_rejects_invalid_rules(self):
        with pytest.raises(ConfigurationError):
            Checkout(["not a rule"])

    def test_evaluation_error_surfaces_from_scan(self, pricing_rules, tshirt):
        broken = PricingRule.create(
            conditions=[Condition.create(ConditionKind.ITEM_CODE, ConditionOperator.GTE, "T")],
            actions=[Action.create(ActionKind.DISCOUNT_PERCENT, 100)]
        )
        checkout = Checkout(pricing_rules + [broken])

        for _ in range(3):
            with pytest.raises(EvaluationError):
                checkout.scan(tshirt)

        # The item is still in the cart and the valid rules were applied
        assert len(checkout) == 3
        assert checkout.get_total() == Decimal("57.00")

    def test_records_scans(self, pricing_rules, voucher):
        metrics = PricingMetrics()
        checkout = Checkout(pricing_rules, engine=RuleEngine(metrics=metrics))

        checkout.scan(voucher)
        checkout.scan(voucher)

        assert metrics.get_sample_value("pricing_items_scanned_total") == 2

    def test_concurrent_scans(self, pricing_rules, voucher, tshirt):
        checkout = Checkout(pricing_rules)

        def scan_many(item, count):
            for _ in range(count):
                checkout.scan(item)

        threads = [
            threading.Thread(target=scan_many, args=(voucher, 10)),
            threading.Thread(target=scan_many, args=(tshirt, 10)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # 10 vouchers: 5 free; 10 t-shirts at 19.00
        assert len(checkout) == 20
        assert checkout.get_total() == Decimal("215.00")
