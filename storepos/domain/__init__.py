"""
Domain Layer - Business Entities

Pydantic models for catalog and sales records, plus the in-memory cart and
the reporting value objects.

Author: TM3
Date: 2026-10-05
"""
from storepos.domain.product import Product, ProductCreate, ProductUpdate
from storepos.domain.sale import Sale, SaleItem, SaleCreate
from storepos.domain.cart import Cart, CartItem
from storepos.domain.report import (
    Granularity,
    DetailLevel,
    ReportBucket,
    ProductPerformance,
    SalesSummary,
    DailyPoint,
)

__all__ = [
    'Product', 'ProductCreate', 'ProductUpdate',
    'Sale', 'SaleItem', 'SaleCreate',
    'Cart', 'CartItem',
    'Granularity', 'DetailLevel', 'ReportBucket', 'ProductPerformance',
    'SalesSummary', 'DailyPoint',
]
