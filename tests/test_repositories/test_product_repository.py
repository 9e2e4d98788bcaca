"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.

Author: TM3
Date: 2026-10-16
"""
import pytest
from unittest.mock import patch, MagicMock
from datetime import datetime
from decimal import Decimal

from storepos.repositories.product_repository import ProductRepository
from storepos.domain.product import Product, ProductCreate, ProductUpdate


def product_row(**overrides):
    row = {
        'id': 'p-1',
        'name': 'Chanachur',
        'category': 'Snacks',
        'price': Decimal('45.00'),
        'stock': 12,
        'description': 'Spicy mix',
        'image_url': None,
        'created_at': datetime(2026, 10, 1),
        'updated_at': None
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    """Patch the connection helper; yields (connection, cursor)"""
    with patch('storepos.repositories.product_repository.get_db_connection_dict_with_retry') as mock_get_conn:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_get_conn.return_value = mock_conn
        mock_conn.cursor.return_value = mock_cursor
        yield mock_conn, mock_cursor


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product(self, mock_db):
        """Test find_by_id returns a Product domain model"""
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row()

        product = ProductRepository().find_by_id('p-1')

        assert isinstance(product, Product)
        assert product.id == 'p-1'
        assert product.price == Decimal('45.00')
        assert product.stock == 12

        mock_cursor.execute.assert_called_once()
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_called_once()

    def test_find_by_id_returns_none_when_not_found(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = None

        assert ProductRepository().find_by_id('missing') is None

    def test_null_category_maps_to_default(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row(category=None)

        assert ProductRepository().find_by_id('p-1').category == 'Uncategorized'

    def test_find_all_skips_malformed_rows(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = [
            product_row(id='p-1'),
            product_row(id='p-2', stock=-3),
            product_row(id='p-3'),
        ]

        products = ProductRepository().find_all()

        assert [p.id for p in products] == ['p-1', 'p-3']

    def test_find_all_filters_by_category(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = []

        ProductRepository().find_by_category('Snacks')

        sql, params = mock_cursor.execute.call_args[0]
        assert 'WHERE category = %s' in sql
        assert params == ('Snacks',)

    def test_find_all_with_wildcard_has_no_filter(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = []

        ProductRepository().find_all(category='all')

        sql = mock_cursor.execute.call_args[0][0]
        assert 'WHERE' not in sql

    def test_find_low_stock_builds_conditions(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchall.return_value = [product_row(stock=1)]

        products = ProductRepository().find_low_stock(5, 'Snacks')

        sql, params = mock_cursor.execute.call_args[0]
        assert 'stock < %s AND category = %s' in sql
        assert params == [5, 'Snacks']
        assert products[0].stock == 1

    def test_create_commits(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row(id='p-9', name='Tea')

        product = ProductRepository().create(ProductCreate(name='Tea', price=Decimal('3.00')))

        assert product.id == 'p-9'
        mock_conn.commit.assert_called_once()

    def test_update_only_sets_provided_fields(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.fetchone.return_value = product_row(price=Decimal('50.00'))

        product = ProductRepository().update('p-1', ProductUpdate(price=Decimal('50.00')))

        sql, params = mock_cursor.execute.call_args[0]
        assert 'SET price = %s, updated_at = NOW()' in sql
        assert params == [Decimal('50.00'), 'p-1']
        assert product.price == Decimal('50.00')

    def test_delete_reports_missing(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.rowcount = 0

        assert ProductRepository().delete('missing') is False

    def test_update_stock_rejects_negative(self):
        with pytest.raises(ValueError):
            ProductRepository().update_stock('p-1', -1)

    def test_decrement_is_conditional(self, mock_db):
        """The decrement must check available stock in the same statement"""
        mock_conn, mock_cursor = mock_db
        mock_cursor.rowcount = 1

        assert ProductRepository().decrement_stock_if_available('p-1', 2) is True

        sql, params = mock_cursor.execute.call_args[0]
        assert 'stock = stock - %s' in sql
        assert 'stock >= %s' in sql
        assert params == (2, 'p-1', 2)
        mock_conn.commit.assert_called_once()

    def test_decrement_refused_when_no_row_updated(self, mock_db):
        _, mock_cursor = mock_db
        mock_cursor.rowcount = 0

        assert ProductRepository().decrement_stock_if_available('p-1', 50) is False

    def test_write_failure_rolls_back(self, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_cursor.execute.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            ProductRepository().decrement_stock_if_available('p-1', 1)

        mock_conn.rollback.assert_called_once()
        mock_conn.close.assert_called_once()
