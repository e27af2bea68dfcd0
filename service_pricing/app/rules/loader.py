"""
Build pricing rules from plain definitions (mappings or a JSON file).
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import (
    BaseModel, Field, Strict, StrictFloat, StrictInt, StrictStr, ValidationInfo, field_validator
)
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ConfigurationError
from shared.logging import get_logger
from .models import Action, ActionKind, Condition, ConditionKind, PricingRule
from .values import ConditionOperator

logger = get_logger("pricing.rule_loader")

StrictDecimal = Annotated[Decimal, Strict()]


def _normalise_enum_input(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class ConditionDefinition(BaseModel):
    """Definition of a rule condition."""
    kind: ConditionKind = Field(..., description="Condition kind")
    operator: ConditionOperator = Field(ConditionOperator.EQ, description="Comparison operator")
    value: Union[StrictInt, StrictFloat, StrictDecimal, StrictStr] = Field(..., description="Comparison operand")

    @field_validator("kind", "operator", mode="before")
    @classmethod
    def normalise_enums(cls, value: Any) -> Any:
        return _normalise_enum_input(value)

    def to_condition(self) -> Condition:
        return Condition.create(kind=self.kind, operator=self.operator, value=self.value)


class ActionDefinition(BaseModel):
    """Definition of a rule action."""
    kind: ActionKind = Field(..., description="Action kind")
    value: Union[StrictInt, StrictFloat, StrictDecimal] = Field(..., description="Action operand")

    @field_validator("kind", mode="before")
    @classmethod
    def normalise_kind(cls, value: Any) -> Any:
        return _normalise_enum_input(value)

    def to_action(self) -> Action:
        return Action.create(kind=self.kind, value=self.value)


class PricingRuleDefinition(BaseModel):
    """Definition of a pricing rule.

    Conditions whose kind is not a known ``ConditionKind`` are dropped with a
    warning; the rest of the rule is built as usual.
    """
    name: Optional[str] = Field(None, description="Rule name")
    conditions: List[ConditionDefinition] = Field(default_factory=list, description="Rule conditions")
    actions: List[ActionDefinition] = Field(default_factory=list, description="Rule actions")

    @field_validator("conditions", mode="before")
    @classmethod
    def drop_unknown_kinds(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, list):
            return value

        known = {kind.value for kind in ConditionKind}
        kept = []
        for entry in value:
            kind = entry.get("kind") if isinstance(entry, Mapping) else None
            if isinstance(kind, str) and _normalise_enum_input(kind) not in known:
                logger.warning(
                    "Skipping unrecognised condition kind",
                    rule_index=(info.context or {}).get("index"),
                    rule=info.data.get("name"),
                    kind=kind
                )
                continue
            kept.append(entry)
        return kept

    def to_rule(self) -> PricingRule:
        return PricingRule.create(
            conditions=[c.to_condition() for c in self.conditions],
            actions=[a.to_action() for a in self.actions],
            name=self.name
        )


def load_rules(definitions: Iterable[Mapping[str, Any]]) -> List[PricingRule]:
    """Build pricing rules from a sequence of mappings."""
    if definitions is None:
        raise ConfigurationError("Missing pricing rule definitions")

    rules: List[PricingRule] = []
    for index, definition in enumerate(definitions):
        try:
            parsed = PricingRuleDefinition.model_validate(definition, context={"index": index})
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid pricing rule definition",
                details={"index": index, "errors": e.errors(include_url=False, include_context=False)}
            ) from e

        try:
            rules.append(parsed.to_rule())
        except ConfigurationError as e:
            e.details.setdefault("index", index)
            raise

    logger.info("Pricing rules loaded", count=len(rules))
    return rules


def load_rules_file(path: Union[str, Path]) -> List[PricingRule]:
    """Build pricing rules from a JSON file.

    The file holds either a list of rule definitions or an object with a
    ``rules`` list.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data: Union[List[Any], Dict[str, Any]] = json.load(handle, parse_float=Decimal)
    except OSError as e:
        raise ConfigurationError(
            "Cannot read pricing rules file",
            details={"path": str(path), "error": str(e)}
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Pricing rules file is not valid JSON",
            details={"path": str(path), "error": str(e)}
        ) from e

    if isinstance(data, dict):
        data = data.get("rules")
    if not isinstance(data, list):
        raise ConfigurationError(
            "Pricing rules file must contain a list of rules",
            details={"path": str(path)}
        )

    return load_rules(data)
