"""
Commerce Infrastructure Layer

Adapters that satisfy the application ports.
"""
