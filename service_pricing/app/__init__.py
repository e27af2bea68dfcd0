"""
Pricing engine application package.

Scans items into a cart and re-prices the cart on every scan by running a
set of declarative pricing rules. It provides:

- app.rules: Typed values, rule models, the evaluation engine and loaders.
- app.cart: Cart item model with clamped discounts.
- app.checkout: Checkout that owns the cart and totals it.
- app.main: Wiring of settings, logging and metrics.

Guidelines:
- The engine is stateless; rules are passed to every evaluation.
- Invalid rules fail when they are built, never while pricing a cart.
"""
