"""
Product Catalog Service

Async accessor over the catalog store. The repository is blocking psycopg2
code, so every call is handed to the threadpool and the event loop only
suspends here.

Both stock mutation paths (checkout and manual product edits) go through
this class.

Author: TM3
Date: 2026-10-08
"""
import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from storepos.core.config import settings
from storepos.core.errors import NotFoundError
from storepos.domain.product import Product, ProductCreate, ProductUpdate
from storepos.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class ProductCatalogService:
    """
    Catalog accessor used by carts, checkout and reporting

    Args:
        repository: Catalog store (defaults to the PostgreSQL repository)
    """

    def __init__(self, repository: Optional[ProductRepository] = None):
        self.repository = repository or ProductRepository()

    async def get_all_products(self) -> List[Product]:
        return await run_in_threadpool(self.repository.find_all)

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await run_in_threadpool(self.repository.find_by_id, product_id)

    async def require_product(self, product_id: str) -> Product:
        """Like get_product, but a missing id raises NotFoundError"""
        product = await self.get_product(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def get_products_by_category(self, category: str) -> List[Product]:
        return await run_in_threadpool(self.repository.find_by_category, category)

    async def get_low_stock_products(
        self,
        threshold: Optional[int] = None,
        category: str = "all"
    ) -> List[Product]:
        """
        Products whose stock is below threshold, lowest stock first

        Args:
            threshold: Alert level (defaults to LOW_STOCK_THRESHOLD)
            category: Category filter, "all" for every category
        """
        if threshold is None:
            threshold = settings.LOW_STOCK_THRESHOLD
        products = await run_in_threadpool(self.repository.find_low_stock, threshold, category)
        return sorted(products, key=lambda p: p.stock)

    async def set_product_stock(self, product_id: str, new_stock: int) -> bool:
        """Overwrite a product's stock; False if the product does not exist"""
        updated = await run_in_threadpool(self.repository.update_stock, product_id, new_stock)
        if updated:
            logger.info(f"Stock for product {product_id} set to {new_stock}")
        else:
            logger.warning(f"Stock update skipped, product {product_id} not found")
        return updated

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """
        Decrease stock by quantity only if at least quantity units remain

        Returns:
            False when the store refused the decrement (missing product or
            not enough stock); nothing is written in that case
        """
        return await run_in_threadpool(
            self.repository.decrement_stock_if_available, product_id, quantity
        )

    async def create_product(self, data: ProductCreate) -> Product:
        product = await run_in_threadpool(self.repository.create, data)
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        product = await run_in_threadpool(self.repository.update, product_id, data)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def delete_product(self, product_id: str) -> None:
        deleted = await run_in_threadpool(self.repository.delete, product_id)
        if not deleted:
            raise NotFoundError("Product", product_id)
        logger.info(f"Deleted product {product_id}")
