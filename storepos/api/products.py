"""
Products API Endpoints
Handles product catalog management, stock edits and low stock alerts

Author: TM3
Date: 2026-10-13
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from storepos.api.dependencies import get_catalog, to_http_exception
from storepos.core.errors import StorePOSError
from storepos.domain.product import ProductCreate, ProductUpdate
from storepos.services.catalog_service import ProductCatalogService

router = APIRouter()


# Request models
class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


@router.get("/")
async def get_products(
    category: Optional[str] = Query(None, description="Filter by category ('all' for every category)"),
    catalog: ProductCatalogService = Depends(get_catalog)
):
    """Get all products, optionally filtered by category"""
    try:
        if category:
            products = await catalog.get_products_by_category(category)
        else:
            products = await catalog.get_all_products()

        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/low-stock")
async def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0, description="Alert level (defaults to configured threshold)"),
    category: str = Query("all", description="Filter by category"),
    catalog: ProductCatalogService = Depends(get_catalog)
):
    """
    Get products with stock below the alert threshold

    Sorted by stock ascending (most urgent first)
    """
    try:
        products = await catalog.get_low_stock_products(threshold, category)
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching low stock products: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: str, catalog: ProductCatalogService = Depends(get_catalog)):
    """Get a single product"""
    try:
        product = await catalog.require_product(product_id)
        return {"status": "success", "data": product.to_dict()}

    except StorePOSError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=201)
async def create_product(data: ProductCreate, catalog: ProductCatalogService = Depends(get_catalog)):
    """Create a product"""
    try:
        product = await catalog.create_product(data)
        return {"status": "success", "data": product.to_dict()}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    data: ProductUpdate,
    catalog: ProductCatalogService = Depends(get_catalog)
):
    """Update the provided fields of a product"""
    try:
        product = await catalog.update_product(product_id, data)
        return {"status": "success", "data": product.to_dict()}

    except StorePOSError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.put("/{product_id}/stock")
async def set_product_stock(
    product_id: str,
    data: StockUpdate,
    catalog: ProductCatalogService = Depends(get_catalog)
):
    """Overwrite the stock level of a product"""
    try:
        updated = await catalog.set_product_stock(product_id, data.stock)
        if not updated:
            raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")

        return {
            "status": "success",
            "message": f"Stock updated to {data.stock}",
            "data": {"product_id": product_id, "stock": data.stock}
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating stock: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(product_id: str, catalog: ProductCatalogService = Depends(get_catalog)):
    """Delete a product"""
    try:
        await catalog.delete_product(product_id)
        return {"status": "success", "message": f"Product {product_id} deleted"}

    except StorePOSError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
