"""
Pricing engine package.
"""
