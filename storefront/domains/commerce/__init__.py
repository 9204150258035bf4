"""
Commerce Domain

Bounded context for catalog pricing, carts, coupons, tax, shipping,
checkout and orders.
"""
