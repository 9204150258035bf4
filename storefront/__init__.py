"""
Storefront Engine

Pricing, tax, discount and order-lifecycle core for an e-commerce back office.
"""

__version__ = "0.1.0"
