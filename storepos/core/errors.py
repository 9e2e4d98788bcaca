"""
Domain errors raised by the cart, checkout and catalog layers.

API routers translate these into HTTP responses; services never catch
them silently.
"""
from typing import List, Optional


class StorePOSError(Exception):
    """Base class for all store POS domain errors"""


class NotFoundError(StorePOSError):
    """A referenced product or sale id does not exist in the store"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class EmptyCartError(StorePOSError):
    """Checkout was attempted on a cart without items"""

    def __init__(self):
        super().__init__("Cart is empty. Add products before checking out.")


class StockExceededError(StorePOSError):
    """A cart change would take a quantity above the available stock"""

    def __init__(self, product_id: str, requested: int, available: int, product_name: Optional[str] = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.product_name = product_name
        label = product_name or product_id
        super().__init__(f"Only {available} units of {label} available (requested {requested})")


class PersistenceError(StorePOSError):
    """
    The sale write itself failed.

    Nothing was written and no stock was touched, so the checkout can be
    retried with the same cart.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class PartialStockFailureError(StorePOSError):
    """
    The sale was persisted but one or more stock decrements did not apply.

    Retrying the checkout would record the sale twice; the listed products
    need their stock reconciled instead.
    """

    def __init__(self, sale_id: str, failures: List):
        self.sale_id = sale_id
        self.failures = failures
        product_ids = ", ".join(f.product_id for f in failures)
        super().__init__(
            f"Sale {sale_id} recorded but stock was not updated for: {product_ids}"
        )


class CheckoutInProgressError(StorePOSError):
    """The cart is being checked out; it cannot be changed or committed again"""

    def __init__(self):
        super().__init__("Checkout already in progress for this cart")
