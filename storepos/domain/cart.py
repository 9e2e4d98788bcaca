"""
Cart Domain Model

In-memory working selection for a single checkout session. Items hold
snapshots of the product taken when they were added, so every stock check
here is a best-effort guard; the checkout revalidates against the catalog
before committing.

Author: TM3
Date: 2026-10-06
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from storepos.core.errors import CheckoutInProgressError, NotFoundError, StockExceededError
from storepos.domain.product import Product


@dataclass
class CartItem:
    """A product snapshot and the quantity selected for sale"""
    product: Product
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_dict(self) -> dict:
        return {
            'product_id': self.product.id,
            'product_name': self.product.name,
            'price': float(self.product.price),
            'stock': self.product.stock,
            'quantity': self.quantity,
            'line_total': float(self.line_total),
        }


class Cart:
    """
    Cart manager for one checkout session

    Mutations that would exceed the snapshotted stock raise
    StockExceededError and leave the cart unchanged. While a checkout holds
    the cart, mutations and a second checkout raise CheckoutInProgressError.
    """

    def __init__(self):
        self._items: List[CartItem] = []
        self._checking_out = False

    @property
    def checking_out(self) -> bool:
        return self._checking_out

    def begin_checkout(self) -> None:
        """Claim the cart for one checkout"""
        self._ensure_open()
        self._checking_out = True

    def end_checkout(self) -> None:
        self._checking_out = False

    def _ensure_open(self) -> None:
        if self._checking_out:
            raise CheckoutInProgressError()

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.product.id == product_id:
                return item
        return None

    @property
    def items(self) -> List[CartItem]:
        """Items in the order they were added"""
        return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        """Total units across all items"""
        return sum(item.quantity for item in self._items)

    def add_item(self, product: Product) -> CartItem:
        """
        Add one unit of a product

        An existing item is incremented by one; a new product is appended
        with quantity 1. Either way the result may not exceed product.stock,
        and the item keeps the snapshot it was checked against.
        """
        self._ensure_open()
        existing = self._find(product.id)
        if existing is not None:
            if existing.quantity >= product.stock:
                raise StockExceededError(product.id, existing.quantity + 1, product.stock, product.name)
            existing.product = product
            existing.quantity += 1
            return existing

        if product.stock < 1:
            raise StockExceededError(product.id, 1, product.stock, product.name)

        item = CartItem(product=product, quantity=1)
        self._items.append(item)
        return item

    def set_quantity(self, product_id: str, new_quantity: int) -> Optional[CartItem]:
        """
        Replace the quantity of an item already in the cart

        A quantity of zero or less removes the item (returns None).
        """
        self._ensure_open()
        item = self._find(product_id)
        if item is None:
            raise NotFoundError("Cart item", product_id)

        if new_quantity > item.product.stock:
            raise StockExceededError(product_id, new_quantity, item.product.stock, item.product.name)

        if new_quantity <= 0:
            self.remove_item(product_id)
            return None

        item.quantity = new_quantity
        return item

    def remove_item(self, product_id: str) -> None:
        """Remove an item; unknown ids are ignored"""
        self._ensure_open()
        self._items = [item for item in self._items if item.product.id != product_id]

    def total(self) -> Decimal:
        """Sum of price * quantity, recomputed from the current contents"""
        return sum((item.line_total for item in self._items), Decimal('0'))

    def clear(self) -> None:
        self._items = []

    def refresh(self, products: Iterable[Product]) -> List[CartItem]:
        """
        Replace item snapshots with fresh catalog data

        Items whose product is missing from `products` keep their old
        snapshot. Returns the items whose quantity now exceeds the fresh
        stock; their quantities are left untouched for the caller to decide.
        """
        fresh = {product.id: product for product in products}
        conflicts = []
        for item in self._items:
            product = fresh.get(item.product.id)
            if product is None:
                continue
            item.product = product
            if item.quantity > product.stock:
                conflicts.append(item)
        return conflicts

    def to_dict(self) -> dict:
        return {
            'items': [item.to_dict() for item in self._items],
            'item_count': self.item_count,
            'total': float(self.total()),
        }
