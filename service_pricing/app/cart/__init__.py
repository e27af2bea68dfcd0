"""
Cart package.

Holds the cart item model. Discounts on an item are clamped so the net
price never goes below zero.
"""
