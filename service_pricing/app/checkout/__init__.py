"""
Checkout package.
"""
