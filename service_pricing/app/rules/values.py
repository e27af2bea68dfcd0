"""
Typed comparison values for pricing rule conditions.

A ``Value`` is one of three closed variants (text, integer, decimal).
Conditions hold a ``Value`` as their operand and compare it against a fact
derived from the cart, which is wrapped in the same variant family. Both
sides of a comparison must be the same variant.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar

from shared.errors import ConfigurationError, EvaluationError


class ValueType(str, Enum):
    """Value variants."""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"


class ConditionOperator(str, Enum):
    """Condition comparison operators."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"

    @property
    def is_ordering(self) -> bool:
        return self in (ConditionOperator.GT, ConditionOperator.LT,
                        ConditionOperator.GTE, ConditionOperator.LTE)


@dataclass(frozen=True)
class Value:
    """Base class of the comparison value variants.

    Each variant exposes its Python payload as ``raw``.
    """

    type: ClassVar[ValueType]
    is_ordered: ClassVar[bool] = False

    @staticmethod
    def of(raw: Any) -> "Value":
        """Wrap a raw Python value into its variant."""
        if isinstance(raw, Value):
            return raw
        # bool is an int subclass; it is not a valid operand
        if isinstance(raw, bool) or raw is None:
            raise ConfigurationError(
                "Unsupported comparison value",
                details={"value": repr(raw)}
            )
        if isinstance(raw, str):
            return TextValue(raw)
        if isinstance(raw, int):
            return IntegerValue(raw)
        if isinstance(raw, Decimal):
            return DecimalValue(raw)
        if isinstance(raw, float):
            return DecimalValue(to_decimal(raw))
        raise ConfigurationError(
            "Unsupported comparison value type",
            details={"value": repr(raw), "type": type(raw).__name__}
        )

    def compare(self, operator: ConditionOperator, fact: "Value") -> bool:
        """Evaluate ``fact <operator> self``.

        Raises EvaluationError when the fact is a different variant, or when
        an ordering operator is used on a variant that has no ordering.
        """
        if fact.type is not self.type:
            raise EvaluationError(
                "Cannot compare values of different types",
                details={
                    "operator": operator.value,
                    "fact_type": fact.type.value,
                    "value_type": self.type.value,
                }
            )

        if operator.is_ordering and not self.is_ordered:
            raise EvaluationError(
                "Ordering operator is not supported for this value type",
                details={"operator": operator.value, "value_type": self.type.value}
            )

        left, right = fact.raw, self.raw

        if operator == ConditionOperator.EQ:
            return left == right
        elif operator == ConditionOperator.NEQ:
            return left != right
        elif operator == ConditionOperator.GT:
            return left > right
        elif operator == ConditionOperator.LT:
            return left < right
        elif operator == ConditionOperator.GTE:
            return left >= right
        elif operator == ConditionOperator.LTE:
            return left <= right

        raise EvaluationError(
            "Unknown condition operator",
            details={"operator": str(operator)}
        )


@dataclass(frozen=True)
class TextValue(Value):
    text: str

    type: ClassVar[ValueType] = ValueType.TEXT

    @property
    def raw(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class IntegerValue(Value):
    integer: int

    type: ClassVar[ValueType] = ValueType.INTEGER
    is_ordered: ClassVar[bool] = True

    @property
    def raw(self) -> int:
        return self.integer

    def __str__(self) -> str:
        return str(self.integer)


@dataclass(frozen=True)
class DecimalValue(Value):
    decimal: Decimal

    type: ClassVar[ValueType] = ValueType.DECIMAL
    is_ordered: ClassVar[bool] = True

    @property
    def raw(self) -> Decimal:
        return self.decimal

    def __str__(self) -> str:
        return str(self.decimal)


def to_decimal(raw: Any) -> Decimal:
    """Convert a number (or numeric string) to Decimal without float artifacts."""
    if isinstance(raw, bool):
        raise ConfigurationError("Boolean is not a number", details={"value": repr(raw)})
    if isinstance(raw, Decimal):
        result = raw
    elif isinstance(raw, int):
        return Decimal(raw)
    else:
        try:
            result = Decimal(str(raw))
        except (InvalidOperation, ValueError) as e:
            raise ConfigurationError(
                "Value is not a number",
                details={"value": repr(raw)}
            ) from e
    if not result.is_finite():
        raise ConfigurationError("Value is not a finite number", details={"value": repr(raw)})
    return result
