"""
Commerce Infrastructure Services
"""

from .clock import FixedClock, SystemClock
from .inventory_reserver import InMemoryInventoryReserver

__all__ = [
    "SystemClock",
    "FixedClock",
    "InMemoryInventoryReserver",
]
