"""
Shared metrics configuration for the pricing engine.
"""

from prometheus_client import Counter, Histogram, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class PricingMetrics:
    """Prometheus metrics for rule evaluation and checkout."""

    def __init__(self, service_name: str = "pricing", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Private registry per collector so several engines can coexist
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up pricing metrics."""
        self._metrics["pricing_rule_evaluations_total"] = Counter(
            "pricing_rule_evaluations_total",
            "Total pricing rule evaluations",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["pricing_rule_actions_total"] = Counter(
            "pricing_rule_actions_total",
            "Total pricing actions applied to cart items",
            ["action"],
            registry=self.registry
        )

        self._metrics["pricing_apply_duration_seconds"] = Histogram(
            "pricing_apply_duration_seconds",
            "Duration of a full rule pass over the cart in seconds",
            registry=self.registry
        )

        self._metrics["pricing_items_scanned_total"] = Counter(
            "pricing_items_scanned_total",
            "Total cart items scanned",
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})

    def record_rule_evaluation(self, outcome: str):
        """Record the outcome of one rule evaluation (fired, skipped, failed)."""
        self._metrics["pricing_rule_evaluations_total"].labels(outcome=outcome).inc()

    def record_action(self, action: str, count: int = 1):
        """Record actions applied to cart items."""
        self._metrics["pricing_rule_actions_total"].labels(action=action).inc(count)

    def record_scan(self):
        """Record a scanned cart item."""
        self._metrics["pricing_items_scanned_total"].inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    @contextmanager
    def time_apply(self):
        """Context manager to time a rule pass."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            self._metrics["pricing_apply_duration_seconds"].observe(duration)


def get_metrics_collector(service_name: str = "pricing", registry: Optional[CollectorRegistry] = None) -> PricingMetrics:
    """Get a metrics collector for a service."""
    return PricingMetrics(service_name, registry)
