"""
Rule data models for the pricing engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple, Type, TypeVar

from shared.errors import ConfigurationError
from ..cart.models import CartItem
from .values import (
    ConditionOperator, Value, TextValue, IntegerValue, DecimalValue, to_decimal
)

E = TypeVar("E", bound=Enum)


class ConditionKind(str, Enum):
    """Condition kinds, listed in evaluation order."""
    ITEM_CODE = "item_code"
    QUANTITY_TOTAL = "quantity_total"
    X_QUANTITY = "x_quantity"


class ActionKind(str, Enum):
    """Action kinds."""
    FIXED_PRICE = "fixed_price"
    DISCOUNT_PERCENT = "discount_percent"


def _coerce_enum(enum_cls: Type[E], raw: Any, what: str) -> E:
    """Accept an enum member, its value, or its name."""
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        try:
            return enum_cls(raw.lower())
        except ValueError:
            if raw.upper() in enum_cls.__members__:
                return enum_cls[raw.upper()]
    raise ConfigurationError(
        f"Unknown {what}",
        details={what: repr(raw), "allowed": [member.value for member in enum_cls]}
    )


@dataclass(frozen=True)
class Condition:
    """Pricing rule condition.

    ``operator`` defaults to ``EQ`` when omitted. Raw operands are wrapped
    into their ``Value`` variant.
    """
    kind: ConditionKind
    operator: Optional[ConditionOperator]
    value: Value

    def __post_init__(self):
        if self.kind is None:
            raise ConfigurationError("Missing condition kind")
        if self.value is None:
            raise ConfigurationError(
                "Missing condition value",
                details={"kind": str(self.kind)}
            )

        kind = _coerce_enum(ConditionKind, self.kind, "condition_kind")
        operator = (
            ConditionOperator.EQ if self.operator is None
            else _coerce_enum(ConditionOperator, self.operator, "condition_operator")
        )
        value = Value.of(self.value)

        if kind == ConditionKind.X_QUANTITY:
            if not isinstance(value, IntegerValue) or value.integer <= 0:
                raise ConfigurationError(
                    "X quantity condition requires a positive integer group size",
                    details={"value": str(value), "value_type": value.type.value}
                )
            if operator != ConditionOperator.EQ:
                raise ConfigurationError(
                    "X quantity condition only supports the eq operator",
                    details={"operator": operator.value}
                )

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "value", value)

    @classmethod
    def create(cls, kind: Any = None, operator: Any = None, value: Any = None) -> "Condition":
        """Build a condition, failing immediately on incomplete input."""
        return cls(kind=kind, operator=operator, value=value)

    def evaluate(self, fact: Value) -> bool:
        """Compare a fact derived from the cart against this condition."""
        return self.value.compare(self.operator, fact)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.operator.value} {self.value}"


@dataclass(frozen=True)
class Action:
    """Pricing rule action."""
    kind: ActionKind
    value: Decimal

    def __post_init__(self):
        if self.kind is None:
            raise ConfigurationError("Missing action kind")
        if self.value is None:
            raise ConfigurationError(
                "Missing action value",
                details={"kind": str(self.kind)}
            )

        kind = _coerce_enum(ActionKind, self.kind, "action_kind")
        value = self.value
        if isinstance(value, (IntegerValue, DecimalValue)):
            value = value.raw
        if isinstance(value, (str, TextValue)) or not isinstance(value, (int, float, Decimal)):
            raise ConfigurationError(
                "Action value must be numeric",
                details={"kind": kind.value, "value": repr(self.value)}
            )
        amount = to_decimal(value)
        if amount < 0:
            raise ConfigurationError(
                "Action value must not be negative",
                details={"kind": kind.value, "value": str(amount)}
            )

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", amount)

    @classmethod
    def create(cls, kind: Any = None, value: Any = None) -> "Action":
        """Build an action, failing immediately on incomplete input."""
        return cls(kind=kind, value=value)

    def apply(self, item: CartItem) -> Decimal:
        """Apply this action to a cart item and return the item's new discount."""
        if self.kind == ActionKind.FIXED_PRICE:
            # Overwrites whatever discount the item carried so far
            item.set_discount(item.price - self.value)
        elif self.kind == ActionKind.DISCOUNT_PERCENT:
            item.set_discount(item.discount + item.price * self.value / 100)
        return item.discount

    def __str__(self) -> str:
        return f"{self.kind.value} {self.value}"


@dataclass(frozen=True)
class PricingRule:
    """Ordered conditions and actions of one pricing rule.

    A rule without conditions or without actions never fires.
    """
    conditions: Tuple[Condition, ...] = field(default_factory=tuple)
    actions: Tuple[Action, ...] = field(default_factory=tuple)
    name: Optional[str] = None

    def __post_init__(self):
        conditions = tuple(self.conditions or ())
        actions = tuple(self.actions or ())

        for condition in conditions:
            if not isinstance(condition, Condition):
                raise ConfigurationError(
                    "Pricing rule conditions must be Condition instances",
                    details={"rule": self.name, "condition": repr(condition)}
                )
        for action in actions:
            if not isinstance(action, Action):
                raise ConfigurationError(
                    "Pricing rule actions must be Action instances",
                    details={"rule": self.name, "action": repr(action)}
                )

        object.__setattr__(self, "conditions", conditions)
        object.__setattr__(self, "actions", actions)

    @classmethod
    def create(cls, conditions=None, actions=None, name: Optional[str] = None) -> "PricingRule":
        return cls(conditions=conditions, actions=actions, name=name)

    @property
    def is_noop(self) -> bool:
        return not self.conditions or not self.actions

    def conditions_of(self, kind: ConditionKind) -> Tuple[Condition, ...]:
        """Conditions of one kind, in declaration order."""
        return tuple(c for c in self.conditions if c.kind == kind)

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        return " and ".join(str(c) for c in self.conditions) or "<no conditions>"
