"""
Unit tests for Product and Sale domain models

Author: TM3
Date: 2026-10-15
"""
import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from storepos.domain.product import DEFAULT_CATEGORY, Product
from storepos.domain.sale import SaleCreate, SaleItem


class TestProduct:

    def test_category_defaults_to_uncategorized(self):
        product = Product(id="A", name="Tea", price=Decimal("2.50"), created_at=datetime(2026, 1, 1))
        assert product.category == DEFAULT_CATEGORY
        assert product.stock == 0
        assert product.is_out_of_stock

    def test_negative_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            Product(id="A", name="Tea", price=Decimal("1"), stock=-1, created_at=datetime(2026, 1, 1))

    def test_low_stock_is_strictly_below_threshold(self, make_product):
        assert make_product(stock=4).is_low_stock(5)
        assert not make_product(stock=5).is_low_stock(5)

    def test_to_dict_converts_decimal(self, make_product):
        data = make_product(price="10.50").to_dict()
        assert data['price'] == 10.5
        assert data['created_at'] == "2026-01-01T00:00:00"


class TestSale:

    def test_item_total_is_price_times_quantity(self):
        item = SaleItem.from_snapshot("A", "Tea", 3, Decimal("3.30"))
        assert item.total == Decimal("9.90")

    def test_sale_create_rejects_mismatched_total(self):
        item = SaleItem.from_snapshot("A", "Tea", 2, Decimal("10.00"))

        with pytest.raises(ValidationError):
            SaleCreate(items=[item], total_amount=Decimal("19.99"), date=datetime(2026, 10, 1))

    def test_sale_create_requires_items(self):
        with pytest.raises(ValidationError):
            SaleCreate(items=[], total_amount=Decimal("0"), date=datetime(2026, 10, 1))

    def test_sale_to_dict(self, make_sale):
        sale = make_sale("s1", datetime(2026, 10, 1, 9, 30), [("A", 2, "10.00"), ("B", 1, "25.00")])

        data = sale.to_dict()

        assert data['total_amount'] == 45.0
        assert data['total_quantity'] == 3
        assert data['date'] == "2026-10-01T09:30:00"
        assert data['payment_method'] == "cash"
        assert [i['total'] for i in data['items']] == [20.0, 25.0]
