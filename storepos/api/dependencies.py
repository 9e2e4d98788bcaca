"""
Shared service providers and error translation for the API routers

Routers receive services through FastAPI `Depends`, so tests can swap in
fakes with `app.dependency_overrides`.
"""
from functools import lru_cache

from fastapi import Depends, HTTPException

from storepos.core.errors import (
    CheckoutInProgressError,
    EmptyCartError,
    NotFoundError,
    PersistenceError,
    StockExceededError,
    StorePOSError,
)
from storepos.repositories.product_repository import ProductRepository
from storepos.repositories.sale_repository import SaleRepository
from storepos.services.analytics_service import SalesAnalyticsService
from storepos.services.cart_service import CartRegistry
from storepos.services.catalog_service import ProductCatalogService
from storepos.services.checkout_service import CheckoutProcessor

ERROR_STATUS_CODES = {
    NotFoundError: 404,
    StockExceededError: 409,
    CheckoutInProgressError: 409,
    EmptyCartError: 400,
    PersistenceError: 503,
}


def to_http_exception(error: StorePOSError) -> HTTPException:
    """Map a domain error to its HTTP status"""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@lru_cache()
def get_cart_registry() -> CartRegistry:
    return CartRegistry()


@lru_cache()
def get_sale_repository() -> SaleRepository:
    return SaleRepository()


def get_catalog() -> ProductCatalogService:
    return ProductCatalogService(ProductRepository())


def get_checkout_processor(
    catalog: ProductCatalogService = Depends(get_catalog),
    sale_repository: SaleRepository = Depends(get_sale_repository)
) -> CheckoutProcessor:
    return CheckoutProcessor(catalog, sale_repository)


def get_analytics_service(
    catalog: ProductCatalogService = Depends(get_catalog),
    sale_repository: SaleRepository = Depends(get_sale_repository)
) -> SalesAnalyticsService:
    return SalesAnalyticsService(catalog, sale_repository)
