"""
Pricing service wiring: settings, logging, metrics and checkouts.
"""

from typing import Optional

from shared.config import PricingSettings, get_settings
from shared.logging import configure_logging, get_logger
from shared.metrics import PricingMetrics, get_metrics_collector

from .checkout.checkout import Checkout
from .rules.engine import RuleEngine
from .rules.loader import load_rules_file


class PricingService:
    """Pricing service implementation."""

    def __init__(self, settings: Optional[PricingSettings] = None):
        self.settings = settings or get_settings()
        configure_logging("pricing", self.settings.log_level)
        self.logger = get_logger("pricing.service")

        self.metrics: Optional[PricingMetrics] = (
            get_metrics_collector("pricing") if self.settings.enable_metrics else None
        )
        self.engine = RuleEngine(metrics=self.metrics)
        self.rules = load_rules_file(self.settings.rules_file) if self.settings.rules_file else []

        self.logger.info(
            "Pricing service initialised",
            env=self.settings.env,
            currency=self.settings.default_currency,
            metrics_enabled=self.metrics is not None,
            **self.engine.get_engine_stats(self.rules)
        )

    def new_checkout(self) -> Checkout:
        """Start a checkout priced with the configured rules."""
        return Checkout(
            rules=self.rules,
            engine=self.engine,
            currency=self.settings.default_currency
        )


def create_service(**overrides) -> PricingService:
    """Create a pricing service from the environment plus explicit overrides."""
    return PricingService(get_settings(**overrides))
