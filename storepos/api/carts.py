"""
Carts API Endpoints
Point-of-sale cart sessions and checkout

Author: TM3
Date: 2026-10-13
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storepos.api.dependencies import (
    get_cart_registry,
    get_catalog,
    get_checkout_processor,
    to_http_exception,
)
from storepos.core.errors import StorePOSError
from storepos.services.cart_service import CartRegistry
from storepos.services.catalog_service import ProductCatalogService
from storepos.services.checkout_service import CheckoutProcessor, CheckoutStatus

router = APIRouter()


# Request models
class AddItemRequest(BaseModel):
    product_id: str


class QuantityUpdate(BaseModel):
    quantity: int


class CheckoutRequest(BaseModel):
    customer_name: Optional[str] = None
    customer_id: Optional[str] = None
    payment_method: str = Field("cash", min_length=1)
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


@router.post("/", status_code=201)
async def create_cart(registry: CartRegistry = Depends(get_cart_registry)):
    """Open a new cart session"""
    cart_id = registry.create()
    return {
        "status": "success",
        "data": {"cart_id": cart_id, **registry.get(cart_id).to_dict()}
    }


@router.get("/{cart_id}")
async def get_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)):
    """Current cart contents and total"""
    try:
        cart = registry.get(cart_id)
        return {"status": "success", "data": {"cart_id": cart_id, **cart.to_dict()}}

    except StorePOSError as e:
        raise to_http_exception(e)


@router.delete("/{cart_id}")
async def discard_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)):
    """Close a cart session without checking out"""
    try:
        registry.discard(cart_id)
        return {"status": "success", "message": f"Cart {cart_id} discarded"}

    except StorePOSError as e:
        raise to_http_exception(e)


@router.post("/{cart_id}/items")
async def add_item(
    cart_id: str,
    data: AddItemRequest,
    registry: CartRegistry = Depends(get_cart_registry),
    catalog: ProductCatalogService = Depends(get_catalog)
):
    """
    Add one unit of a product to the cart

    Rejected with 409 when the cart already holds every unit in stock.
    """
    try:
        cart = registry.get(cart_id)
        product = await catalog.require_product(data.product_id)
        cart.add_item(product)
        return {"status": "success", "data": {"cart_id": cart_id, **cart.to_dict()}}

    except StorePOSError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error adding item: {str(e)}")


@router.put("/{cart_id}/items/{product_id}")
async def set_item_quantity(
    cart_id: str,
    product_id: str,
    data: QuantityUpdate,
    registry: CartRegistry = Depends(get_cart_registry)
):
    """Replace an item's quantity (zero or less removes it)"""
    try:
        cart = registry.get(cart_id)
        cart.set_quantity(product_id, data.quantity)
        return {"status": "success", "data": {"cart_id": cart_id, **cart.to_dict()}}

    except StorePOSError as e:
        raise to_http_exception(e)


@router.delete("/{cart_id}/items/{product_id}")
async def remove_item(
    cart_id: str,
    product_id: str,
    registry: CartRegistry = Depends(get_cart_registry)
):
    """Remove an item from the cart"""
    try:
        cart = registry.get(cart_id)
        cart.remove_item(product_id)
        return {"status": "success", "data": {"cart_id": cart_id, **cart.to_dict()}}

    except StorePOSError as e:
        raise to_http_exception(e)


@router.post("/{cart_id}/checkout")
async def checkout(
    cart_id: str,
    data: Optional[CheckoutRequest] = None,
    registry: CartRegistry = Depends(get_cart_registry),
    processor: CheckoutProcessor = Depends(get_checkout_processor)
):
    """
    Record the cart as a sale and decrement stock

    Returns:
    - status "success" when every stock update applied
    - status "partial" with the products whose stock was not updated; the
      sale is recorded and must not be checked out again

    Either way the cart session is closed. A second checkout on the same
    cart while one is running gets 409.
    """
    data = data or CheckoutRequest()
    try:
        cart = registry.get(cart_id)
        result = await processor.commit(
            cart,
            customer_name=data.customer_name,
            customer_id=data.customer_id,
            payment_method=data.payment_method,
            invoice_number=data.invoice_number,
            notes=data.notes
        )
        registry.discard(cart_id)

        if result.status == CheckoutStatus.PARTIAL_STOCK_FAILURE:
            return {
                "status": "partial",
                "message": "Sale recorded but stock was not updated for some products",
                "data": result.to_dict()
            }

        return {"status": "success", "data": result.to_dict()}

    except StorePOSError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error during checkout: {str(e)}")
