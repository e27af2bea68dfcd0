"""
Checkout: the running cart that re-prices itself on every scan.
"""

import threading
import uuid
from decimal import Decimal
from typing import Iterable, List, Optional

from shared.errors import ConfigurationError, ValidationError
from shared.logging import get_logger, checkout_context
from ..cart.models import CartItem, ZERO
from ..rules.engine import RuleEngine
from ..rules.models import PricingRule


class Checkout:
    """Cart of scanned items priced by a fixed rule set.

    ``scan`` appends the item and re-evaluates the rules under a lock, so
    concurrent scans on the same checkout never interleave rule evaluation
    with discount updates.
    """

    def __init__(
        self,
        rules: Optional[Iterable[PricingRule]] = None,
        engine: Optional[RuleEngine] = None,
        currency: Optional[str] = None,
    ):
        self.rules = tuple(rules or ())
        for rule in self.rules:
            if not isinstance(rule, PricingRule):
                raise ConfigurationError(
                    "Rules must be PricingRule instances",
                    details={"rule": repr(rule)}
                )
        self.engine = engine or RuleEngine()
        self.currency = currency
        self.checkout_id = str(uuid.uuid4())
        self.logger = get_logger("pricing.checkout")
        self._items: List[CartItem] = []
        self._lock = threading.RLock()

    def scan(self, item: CartItem) -> None:
        """Add an item to the cart and re-price the cart."""
        if item is None:
            raise ValidationError("Cannot scan an empty item")
        if not isinstance(item, CartItem):
            raise ValidationError(
                "Scanned item must be a CartItem",
                details={"item": repr(item)}
            )
        with self._lock, checkout_context(self.checkout_id):
            if self.currency is None:
                self.currency = item.currency
            elif item.currency != self.currency:
                raise ValidationError(
                    "Scanned item currency does not match checkout currency",
                    details={"code": item.code, "currency": item.currency, "expected": self.currency}
                )

            # Every scan gets its own cart entry, even when the same item object is scanned twice
            self._items.append(item.copy())
            self.logger.info("Scanned cart item", code=item.code, cart_size=len(self._items))
            if self.engine.metrics:
                self.engine.metrics.record_scan()
            self.engine.apply(self._items, self.rules)

    def get_cart_items(self) -> List[CartItem]:
        """Current cart entries, in scan order."""
        with self._lock:
            return list(self._items)

    def get_subtotal(self) -> Decimal:
        with self._lock:
            return sum((item.price for item in self._items), ZERO)

    def get_discount_total(self) -> Decimal:
        with self._lock:
            return sum((item.discount for item in self._items), ZERO)

    def get_total(self) -> Decimal:
        """Sum of ``price - discount`` over the cart, recomputed on every call."""
        with self._lock:
            return sum((item.net_price for item in self._items), ZERO)

    def __len__(self) -> int:
        return len(self._items)
