"""
Checkout Processor

Turns a cart into a persisted sale and decrements stock for each item.

The sale write and the stock writes are separate store operations, so a
checkout is run as a small saga:

1. Revalidate every cart item against the catalog (no writes yet)
2. Persist the sale (one write; failure leaves everything untouched)
3. Decrement stock per item with a conditional update, recording every
   item whose decrement did not apply
4. Report COMPLETED or PARTIAL_STOCK_FAILURE

A partial failure is never retried by running checkout again, because the
sale already exists. `reconcile()` re-attempts only the failed decrements.

Author: TM3
Date: 2026-10-09
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional

from fastapi.concurrency import run_in_threadpool

from storepos.core.errors import (
    EmptyCartError,
    NotFoundError,
    PartialStockFailureError,
    PersistenceError,
    StockExceededError,
)
from storepos.domain.cart import Cart
from storepos.domain.sale import Sale, SaleCreate, SaleItem
from storepos.repositories.sale_repository import SaleRepository
from storepos.services.catalog_service import ProductCatalogService

logger = logging.getLogger(__name__)

INSUFFICIENT_STOCK_REASON = "Stock changed before the update could be applied"


# ============================================================================
# Result Models
# ============================================================================

class CheckoutStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL_STOCK_FAILURE = "partial_stock_failure"


@dataclass
class StockUpdateFailure:
    product_id: str
    product_name: str
    quantity: int
    reason: str

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'reason': self.reason,
        }


@dataclass
class CheckoutResult:
    status: CheckoutStatus
    sale: Sale
    stock_failures: List[StockUpdateFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == CheckoutStatus.COMPLETED

    def raise_for_stock(self) -> None:
        """Raise PartialStockFailureError unless every decrement applied"""
        if self.stock_failures:
            raise PartialStockFailureError(self.sale.id, self.stock_failures)

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'sale': self.sale.to_dict(),
            'stock_failures': [f.to_dict() for f in self.stock_failures],
        }


# ============================================================================
# Checkout Processor
# ============================================================================

class CheckoutProcessor:
    """
    Commits carts to the sales store

    Args:
        catalog: Catalog accessor used for revalidation and stock updates
        sale_repository: Sales store (defaults to the PostgreSQL repository)
        clock: Returns the commit timestamp (datetime.now by default)
    """

    def __init__(
        self,
        catalog: ProductCatalogService,
        sale_repository: Optional[SaleRepository] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.catalog = catalog
        self.sale_repository = sale_repository or SaleRepository()
        self.clock = clock or datetime.now

    async def _revalidate(self, cart: Cart) -> None:
        """
        Check every item against fresh catalog data, then re-snapshot

        Raises before touching the cart, so a rejected checkout leaves the
        cart exactly as it was.
        """
        fresh_products = []
        for item in cart.items:
            product = await self.catalog.get_product(item.product.id)
            if product is None:
                raise NotFoundError("Product", item.product.id)
            if item.quantity > product.stock:
                raise StockExceededError(product.id, item.quantity, product.stock, product.name)
            fresh_products.append(product)

        cart.refresh(fresh_products)

    @staticmethod
    def _build_sale(cart: Cart, sale_date: datetime, **details) -> SaleCreate:
        items = [
            SaleItem.from_snapshot(
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=item.quantity,
                price=item.product.price,
            )
            for item in cart.items
        ]
        total_amount = sum((item.total for item in items), Decimal('0'))
        return SaleCreate(items=items, total_amount=total_amount, date=sale_date, **details)

    async def _apply_stock_updates(self, items: List[SaleItem]) -> List[StockUpdateFailure]:
        failures = []
        for item in items:
            try:
                applied = await self.catalog.decrement_stock(item.product_id, item.quantity)
                reason = None if applied else INSUFFICIENT_STOCK_REASON
            except Exception as e:
                reason = str(e) or e.__class__.__name__

            if reason is not None:
                logger.warning(
                    f"Stock decrement failed for {item.product_id} (qty {item.quantity}): {reason}"
                )
                failures.append(StockUpdateFailure(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    reason=reason,
                ))
        return failures

    async def commit(
        self,
        cart: Cart,
        customer_name: Optional[str] = None,
        customer_id: Optional[str] = None,
        payment_method: str = "cash",
        invoice_number: Optional[str] = None,
        notes: Optional[str] = None
    ) -> CheckoutResult:
        """
        Persist the cart as a sale and decrement stock

        Returns:
            CheckoutResult; check `status` (or call `raise_for_stock()`) to
            tell a completed checkout from one with stock failures

        Raises:
            EmptyCartError: cart has no items (nothing happens)
            CheckoutInProgressError: another checkout holds this cart
            NotFoundError / StockExceededError: revalidation failed (nothing
                is written, cart unchanged)
            PersistenceError: the sale write failed (no stock touched, cart
                unchanged, safe to retry)
        """
        if cart.is_empty:
            raise EmptyCartError()

        # No await between the emptiness check and the claim.
        cart.begin_checkout()
        try:
            return await self._commit_claimed(
                cart,
                customer_name=customer_name,
                customer_id=customer_id,
                payment_method=payment_method,
                invoice_number=invoice_number,
                notes=notes,
            )
        finally:
            cart.end_checkout()

    async def _commit_claimed(self, cart: Cart, **details) -> CheckoutResult:
        await self._revalidate(cart)

        payload = self._build_sale(cart, self.clock(), **details)

        try:
            sale = await run_in_threadpool(self.sale_repository.create, payload)
        except Exception as e:
            logger.error(f"Sale write failed, checkout aborted: {e}")
            raise PersistenceError(f"Could not record sale: {e}", cause=e) from e

        logger.info(f"Recorded sale {sale.id} for {sale.total_amount} ({len(sale.items)} items)")

        failures = await self._apply_stock_updates(list(payload.items))

        # Sale is recorded; this cart must not be committed again.
        cart.clear()

        if failures:
            logger.error(
                f"Sale {sale.id} recorded with {len(failures)} stock update failure(s): "
                f"{', '.join(f.product_id for f in failures)}"
            )
            return CheckoutResult(CheckoutStatus.PARTIAL_STOCK_FAILURE, sale, failures)

        return CheckoutResult(CheckoutStatus.COMPLETED, sale)

    async def reconcile(self, result: CheckoutResult) -> List[StockUpdateFailure]:
        """
        Re-attempt the stock decrements that failed for a recorded sale

        Returns:
            The failures that still did not apply (empty when repaired)
        """
        if not result.stock_failures:
            return []

        retry_items = [
            SaleItem.from_snapshot(f.product_id, f.product_name, f.quantity, Decimal('0'))
            for f in result.stock_failures
        ]
        remaining = await self._apply_stock_updates(retry_items)

        repaired = len(result.stock_failures) - len(remaining)
        logger.info(f"Reconciled sale {result.sale.id}: {repaired} repaired, {len(remaining)} remaining")

        result.stock_failures = remaining
        if not remaining:
            result.status = CheckoutStatus.COMPLETED
        return remaining
