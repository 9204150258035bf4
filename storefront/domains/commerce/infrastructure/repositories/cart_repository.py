"""
Cart Repository Implementation

In-memory implementation of ICartRepository.
"""

import copy
import logging
from uuid import UUID

from storefront.core.domain import ConcurrencyException
from storefront.domains.commerce.domain.entities.cart import Cart

logger = logging.getLogger(__name__)


class InMemoryCartRepository:
    """
    Dictionary-backed cart store.

    Carts are copied on the way in and out, so callers never share state
    with the store. Saving a cart older than the stored one fails.
    """

    def __init__(self, carts: list[Cart] | None = None):
        self._carts: dict[UUID, Cart] = {}
        for cart in carts or []:
            self._carts[cart.id] = copy.deepcopy(cart)

    async def get(self, cart_id: UUID) -> Cart | None:
        """Get cart by ID."""
        cart = self._carts.get(cart_id)
        return copy.deepcopy(cart) if cart is not None else None

    async def get_by_session(self, session_key: str) -> Cart | None:
        """Get a guest cart by its session key."""
        for cart in self._carts.values():
            if cart.session_key == session_key:
                return copy.deepcopy(cart)
        return None

    async def save(self, cart: Cart) -> Cart:
        """Save a cart."""
        stored = self._carts.get(cart.id)
        if stored is not None and stored.version > cart.version:
            raise ConcurrencyException("Cart", cart.id, cart.version, stored.version)
        self._carts[cart.id] = copy.deepcopy(cart)
        logger.debug(f"Cart {cart.id} saved ({len(cart.items)} lines)")
        return cart

    async def delete(self, cart_id: UUID) -> bool:
        """Delete a cart."""
        return self._carts.pop(cart_id, None) is not None
