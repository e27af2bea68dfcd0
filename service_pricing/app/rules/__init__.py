"""
Rules engine package.

Defines the pricing rule model and the evaluation engine. A rule is a set
of conditions, combined with AND, and the actions applied to the cart items
those conditions select.

Modules of interest:
- values: Typed comparison values and operators.
- models: Condition, Action and PricingRule.
- engine: Staged filtering of the cart and action dispatch.
- loader: Rule definitions from mappings or JSON files.
"""
