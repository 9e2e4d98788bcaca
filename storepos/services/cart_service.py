"""
Cart Registry

Keeps one in-memory Cart per checkout session. Carts are private to their
session and never persisted.
"""
import logging
import uuid
from typing import Dict

from storepos.core.errors import NotFoundError
from storepos.domain.cart import Cart

logger = logging.getLogger(__name__)


class CartRegistry:
    """In-memory carts keyed by session id"""

    def __init__(self):
        self._carts: Dict[str, Cart] = {}

    def create(self) -> str:
        session_id = uuid.uuid4().hex
        self._carts[session_id] = Cart()
        logger.debug(f"Opened cart session {session_id}")
        return session_id

    def get(self, session_id: str) -> Cart:
        cart = self._carts.get(session_id)
        if cart is None:
            raise NotFoundError("Cart", session_id)
        return cart

    def discard(self, session_id: str) -> None:
        if self._carts.pop(session_id, None) is None:
            raise NotFoundError("Cart", session_id)
        logger.debug(f"Closed cart session {session_id}")

    def __len__(self) -> int:
        return len(self._carts)
