"""
Commerce Application Layer

Async use cases that load aggregates through ports, run the pure domain
services and persist the results.
"""
