"""
Rule evaluation engine for the pricing engine.
"""

from contextlib import nullcontext
from typing import Dict, Any, Optional, List, Sequence

from shared.logging import get_logger
from shared.errors import EvaluationError, ValidationError, ConfigurationError
from shared.metrics import PricingMetrics
from ..cart.models import CartItem
from .models import PricingRule, Condition, ConditionKind
from .values import TextValue, IntegerValue


class RuleEngine:
    """Pricing rule evaluation engine.

    The engine keeps no rule state: the rules are passed to every ``apply``
    call. Each pass starts by resetting all discounts, so applying the same
    rules to an unchanged cart twice yields the same discounts.
    """

    def __init__(self, metrics: Optional[PricingMetrics] = None):
        self.logger = get_logger("pricing.rule_engine")
        self.metrics = metrics

    def apply(self, cart: List[CartItem], rules: Sequence[PricingRule]) -> List[CartItem]:
        """Evaluate rules against the cart and update item discounts in place.

        A rule that fails with an EvaluationError is skipped and the
        remaining rules still run; the failures are raised together once the
        pass is complete.
        """
        if cart is None:
            raise ValidationError("Cart is required")
        rules = list(rules) if rules is not None else []
        for rule in rules:
            if not isinstance(rule, PricingRule):
                raise ConfigurationError(
                    "Rules must be PricingRule instances",
                    details={"rule": repr(rule)}
                )

        failures: List[Dict[str, Any]] = []
        first_error: Optional[EvaluationError] = None

        with self._timed():
            for item in cart:
                item.reset_discount()

            for index, rule in enumerate(rules):
                try:
                    fired = self._apply_rule(cart, rule)
                except EvaluationError as e:
                    failure = {"rule_index": index, "rule": rule.label, **e.to_response().model_dump()}
                    self.logger.error("Pricing rule evaluation error", **failure)
                    self._record("failed")
                    if self.metrics:
                        self.metrics.record_error("evaluation_error")
                    failures.append(failure)
                    if first_error is None:
                        first_error = e
                    continue

                self._record("fired" if fired else "skipped")

        if first_error is not None:
            raise EvaluationError(
                f"{len(failures)} pricing rule(s) failed to evaluate",
                details={"failed_rules": failures}
            ) from first_error

        return cart

    def select_items(self, cart: Sequence[CartItem], rule: PricingRule) -> List[CartItem]:
        """Narrow the cart down to the items a rule applies to."""
        if rule.is_noop:
            return []

        working = list(cart)

        # 1. Item code conditions filter item by item
        for condition in rule.conditions_of(ConditionKind.ITEM_CODE):
            working = [item for item in working if condition.evaluate(TextValue(item.code))]
            self.logger.debug(
                "Evaluated item code condition",
                rule=rule.label,
                condition=str(condition),
                matched=len(working)
            )

        # 2. Quantity total conditions gate the whole working set
        for condition in rule.conditions_of(ConditionKind.QUANTITY_TOTAL):
            if not working:
                break
            if not condition.evaluate(IntegerValue(len(working))):
                self.logger.debug(
                    "Quantity total condition not met",
                    rule=rule.label,
                    condition=str(condition),
                    quantity=len(working)
                )
                working = []

        # 3. X quantity conditions keep the discounted members of complete groups
        for condition in rule.conditions_of(ConditionKind.X_QUANTITY):
            if not working:
                break
            working = self._take_groups(working, condition, rule)

        return working

    def _apply_rule(self, cart: Sequence[CartItem], rule: PricingRule) -> bool:
        """Apply a single rule. Returns whether any action ran."""
        selected = self.select_items(cart, rule)
        if not selected:
            return False

        for action in rule.actions:
            for item in selected:
                action.apply(item)
            if self.metrics:
                self.metrics.record_action(action.kind.value, len(selected))

        self.logger.info(
            "Pricing rule applied",
            rule=rule.label,
            items=len(selected),
            actions=[str(action) for action in rule.actions]
        )
        return True

    def _take_groups(self, working: List[CartItem], condition: Condition, rule: PricingRule) -> List[CartItem]:
        group_size = condition.value.raw
        group_count = len(working) // group_size
        if group_count == 0:
            self.logger.debug(
                "No complete group for x quantity condition",
                rule=rule.label,
                group_size=group_size,
                quantity=len(working)
            )
            return []

        # Every complete group of N items yields N - 1 discounted members
        eligible = group_count * (group_size - 1)
        self.logger.debug(
            "Evaluated x quantity condition",
            rule=rule.label,
            group_size=group_size,
            group_count=group_count,
            eligible=eligible
        )
        return working[:eligible]

    def _record(self, outcome: str):
        if self.metrics:
            self.metrics.record_rule_evaluation(outcome)

    def _timed(self):
        if self.metrics:
            return self.metrics.time_apply()
        return nullcontext()

    def get_engine_stats(self, rules: Sequence[PricingRule]) -> Dict[str, Any]:
        """Get statistics about a rule set."""
        return {
            "total_rules": len(rules),
            "noop_rules": len([r for r in rules if r.is_noop]),
            "condition_kinds": sorted({c.kind.value for r in rules for c in r.conditions}),
            "action_kinds": sorted({a.kind.value for r in rules for a in r.actions}),
        }
