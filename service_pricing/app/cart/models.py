"""
Cart data models for the pricing engine.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from shared.errors import ConfigurationError, ValidationError
from ..rules.values import to_decimal

DEFAULT_CURRENCY = "EUR"
ZERO = Decimal("0")


def _to_amount(raw: Any, field_name: str) -> Decimal:
    try:
        return to_decimal(raw)
    except ConfigurationError as e:
        raise ValidationError(
            f"Cart item {field_name} must be a number",
            details={field_name: repr(raw)}
        ) from e


@dataclass
class CartItem:
    """Item scanned into a cart.

    ``discount`` always stays within ``[0, price]``; it is only changed
    through ``set_discount``.
    """
    code: str
    name: str
    price: Decimal
    currency: str = DEFAULT_CURRENCY
    discount: Decimal = field(default=ZERO)

    def __post_init__(self):
        if not isinstance(self.code, str) or not self.code:
            raise ValidationError("Cart item code is required", details={"code": repr(self.code)})
        if not isinstance(self.currency, str) or not self.currency:
            raise ValidationError(
                "Cart item currency is required",
                details={"code": self.code, "currency": repr(self.currency)}
            )

        self.price = _to_amount(self.price, "price")
        if self.price < 0:
            raise ValidationError(
                "Cart item price must not be negative",
                details={"code": self.code, "price": str(self.price)}
            )
        self.set_discount(_to_amount(self.discount, "discount"))

    def set_discount(self, discount: Decimal) -> None:
        """Set the discount, clamped to ``[0, price]``."""
        if discount > self.price:
            discount = self.price
        elif discount < 0:
            discount = ZERO
        self.discount = discount

    def reset_discount(self) -> None:
        self.discount = ZERO

    @property
    def net_price(self) -> Decimal:
        return self.price - self.discount

    def copy(self) -> "CartItem":
        """Fresh cart entry for the same product, without discount."""
        return replace(self, discount=ZERO)
