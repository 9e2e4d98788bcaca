"""
Pytest fixtures and configuration for Store POS tests

Provides product/sale factories and in-memory stand-ins for the PostgreSQL
repositories so services and routers can be tested without a database.

Author: TM3
Date: 2026-10-15
"""
import itertools
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import pytest

from storepos.domain.product import Product, ProductCreate, ProductUpdate
from storepos.domain.sale import Sale, SaleCreate, SaleItem


class FakeProductRepository:
    """
    In-memory catalog store

    Attributes:
        refuse_decrement_for: product ids whose conditional decrement reports
            "not applied"
        fail_decrement_for: product ids whose decrement raises
    """

    def __init__(self, products=()):
        self.products = {p.id: p for p in products}
        self.refuse_decrement_for = set()
        self.fail_decrement_for = set()
        self.decrement_calls = []
        self._ids = itertools.count(1)

    def find_all(self, category: Optional[str] = None) -> List[Product]:
        products = sorted(self.products.values(), key=lambda p: p.name)
        if category and category != "all":
            products = [p for p in products if p.category == category]
        return products

    def find_by_id(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def find_by_category(self, category: str) -> List[Product]:
        return self.find_all(category)

    def find_low_stock(self, threshold: int, category: Optional[str] = None) -> List[Product]:
        products = [p for p in self.find_all(category) if p.stock < threshold]
        return sorted(products, key=lambda p: p.stock)

    def create(self, data: ProductCreate) -> Product:
        product = Product(id=f"new-{next(self._ids)}", created_at=datetime(2026, 10, 1), **data.model_dump())
        self.products[product.id] = product
        return product

    def update(self, product_id: str, data: ProductUpdate) -> Optional[Product]:
        product = self.products.get(product_id)
        if product is None:
            return None
        product = product.model_copy(update=data.model_dump(exclude_unset=True))
        self.products[product_id] = product
        return product

    def delete(self, product_id: str) -> bool:
        return self.products.pop(product_id, None) is not None

    def update_stock(self, product_id: str, new_stock: int) -> bool:
        product = self.products.get(product_id)
        if product is None:
            return False
        self.products[product_id] = product.model_copy(update={'stock': new_stock})
        return True

    def decrement_stock_if_available(self, product_id: str, quantity: int) -> bool:
        self.decrement_calls.append((product_id, quantity))
        if product_id in self.fail_decrement_for:
            raise ConnectionError(f"lost connection updating {product_id}")
        if product_id in self.refuse_decrement_for:
            return False

        product = self.products.get(product_id)
        if product is None or product.stock < quantity:
            return False
        self.products[product_id] = product.model_copy(update={'stock': product.stock - quantity})
        return True


class FakeSaleRepository:
    """In-memory sales store; set fail_create to simulate a failed write"""

    def __init__(self, sales=()):
        self.sales = list(sales)
        self.fail_create = False
        self._ids = itertools.count(1)

    def create(self, data: SaleCreate) -> Sale:
        if self.fail_create:
            raise ConnectionError("sales store unavailable")
        sale = Sale(id=f"sale-{next(self._ids)}", created_at=data.date, **data.model_dump())
        self.sales.append(sale)
        return sale

    def find_all(self) -> List[Sale]:
        return list(self.sales)

    def find_in_range(self, start=None, end=None) -> List[Sale]:
        return [
            s for s in self.sales
            if (start is None or s.date >= start) and (end is None or s.date <= end)
        ]

    def find_by_id(self, sale_id: str) -> Optional[Sale]:
        return next((s for s in self.sales if s.id == sale_id), None)


@pytest.fixture
def make_product():
    """
    Factory for Product models

    Usage: make_product("A", price="10.00", stock=3)
    """
    def _make(product_id="A", name=None, price="10.00", stock=10, category="Snacks"):
        return Product(
            id=product_id,
            name=name or f"Product {product_id}",
            category=category,
            price=Decimal(price),
            stock=stock,
            created_at=datetime(2026, 1, 1),
        )
    return _make


@pytest.fixture
def make_sale():
    """
    Factory for Sale models

    Usage: make_sale("s1", datetime(...), [("A", 2, "10.00")])
    Each item is (product_id, quantity, unit price); the total is derived.
    """
    def _make(sale_id, date, items, customer_name=None, invoice_number=None):
        sale_items = [
            SaleItem.from_snapshot(pid, f"Product {pid}", qty, Decimal(price))
            for pid, qty, price in items
        ]
        return Sale(
            id=sale_id,
            items=sale_items,
            total_amount=sum((i.total for i in sale_items), Decimal('0')),
            date=date,
            customer_name=customer_name,
            invoice_number=invoice_number,
        )
    return _make


@pytest.fixture
def product_repo(make_product):
    """Catalog with A (10.00, stock 3) and B (25.00, stock 5)"""
    return FakeProductRepository([
        make_product("A", price="10.00", stock=3, category="Snacks"),
        make_product("B", price="25.00", stock=5, category="Drinks"),
    ])


@pytest.fixture
def sale_repo():
    return FakeSaleRepository()
