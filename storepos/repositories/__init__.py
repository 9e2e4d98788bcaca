"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: TM3
Date: 2026-10-06
"""
from storepos.repositories.product_repository import ProductRepository
from storepos.repositories.sale_repository import SaleRepository

__all__ = [
    'ProductRepository',
    'SaleRepository'
]
