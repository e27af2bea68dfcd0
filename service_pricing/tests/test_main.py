"""
Unit tests for the pricing service wiring.
"""

import json
import pytest
from decimal import Decimal

from service_pricing.app.cart.models import CartItem
from service_pricing.app.main import PricingService, create_service
from shared.config import PricingSettings
from shared.errors import ConfigurationError, ValidationError


@pytest.fixture
def rules_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({
        "rules": [
            {
                "name": "voucher-2-for-1",
                "conditions": [
                    {"kind": "item_code", "value": "VOUCHER"},
                    {"kind": "x_quantity", "value": 2},
                ],
                "actions": [{"kind": "discount_percent", "value": 100}],
            },
            {
                "name": "tshirt-bulk",
                "conditions": [
                    {"kind": "item_code", "value": "TSHIRT"},
                    {"kind": "quantity_total", "operator": "gte", "value": 3},
                ],
                "actions": [{"kind": "fixed_price", "value": 19}],
            },
        ]
    }))
    return path


class TestPricingService:
    """Test cases for PricingService."""

    def test_without_rules_file(self):
        service = PricingService(PricingSettings())

        assert service.rules == []
        assert service.metrics is not None
        assert service.engine.metrics is service.metrics

    def test_metrics_can_be_disabled(self):
        service = PricingService(PricingSettings(enable_metrics=False))

        assert service.metrics is None
        assert service.engine.metrics is None

    def test_loads_rules_file(self, rules_file):
        service = PricingService(PricingSettings(rules_file=str(rules_file)))

        assert [rule.name for rule in service.rules] == ["voucher-2-for-1", "tshirt-bulk"]

    def test_missing_rules_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            PricingService(PricingSettings(rules_file=str(tmp_path / "missing.json")))

    def test_new_checkout_prices_cart(self, rules_file):
        service = PricingService(PricingSettings(rules_file=str(rules_file)))
        checkout = service.new_checkout()

        voucher = CartItem("VOUCHER", "Gift Card", Decimal("5.00"))
        tshirt = CartItem("TSHIRT", "Summer T-Shirt", Decimal("20.00"))
        pants = CartItem("PANTS", "Summer Pants", Decimal("7.50"))
        for item in (voucher, tshirt, voucher, voucher, pants, tshirt, tshirt):
            checkout.scan(item)

        assert checkout.get_total() == Decimal("74.50")
        assert service.metrics.get_sample_value("pricing_items_scanned_total") == 7

    def test_checkouts_are_independent(self, rules_file):
        service = PricingService(PricingSettings(rules_file=str(rules_file)))
        first = service.new_checkout()
        second = service.new_checkout()

        first.scan(CartItem("VOUCHER", "Gift Card", Decimal("5.00")))

        assert len(first) == 1
        assert len(second) == 0
        assert first.checkout_id != second.checkout_id

    def test_checkout_uses_configured_currency(self):
        service = PricingService(PricingSettings(default_currency="USD"))
        checkout = service.new_checkout()

        with pytest.raises(ValidationError):
            checkout.scan(CartItem("VOUCHER", "Gift Card", Decimal("5.00"), "EUR"))

        checkout.scan(CartItem("MUG", "Mug", Decimal("8.00"), "USD"))
        assert checkout.get_total() == Decimal("8.00")


class TestCreateService:
    """Test cases for create_service."""

    def test_overrides(self, rules_file):
        service = create_service(rules_file=str(rules_file), enable_metrics=False)

        assert len(service.rules) == 2
        assert service.metrics is None

    def test_reads_environment(self, monkeypatch, rules_file):
        monkeypatch.setenv("PRICING_RULES_FILE", str(rules_file))
        monkeypatch.setenv("PRICING_ENV", "test")

        service = create_service()

        assert service.settings.env == "test"
        assert len(service.rules) == 2
