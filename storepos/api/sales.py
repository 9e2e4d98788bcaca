"""
Sales API Endpoints
Read access to recorded sales (sales are created only through checkout)

Author: TM3
Date: 2026-10-13
"""
from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from storepos.api.dependencies import get_sale_repository
from storepos.repositories.sale_repository import SaleRepository

router = APIRouter()


@router.get("/")
async def get_sales(
    from_date: Optional[date] = Query(None, description="First day (inclusive)"),
    to_date: Optional[date] = Query(None, description="Last day (inclusive)"),
    repo: SaleRepository = Depends(get_sale_repository)
):
    """Get sales, optionally within a date range, newest first"""
    try:
        if from_date or to_date:
            sales = await run_in_threadpool(
                repo.find_in_range,
                datetime.combine(from_date, time.min) if from_date else None,
                datetime.combine(to_date, time.max) if to_date else None
            )
        else:
            sales = await run_in_threadpool(repo.find_all)

        sales = sorted(sales, key=lambda s: s.date, reverse=True)

        return {
            "status": "success",
            "count": len(sales),
            "data": [sale.to_dict() for sale in sales]
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sales: {str(e)}")


@router.get("/{sale_id}")
async def get_sale(sale_id: str, repo: SaleRepository = Depends(get_sale_repository)):
    """Get a single sale with its items"""
    try:
        sale = await run_in_threadpool(repo.find_by_id, sale_id)
        if not sale:
            raise HTTPException(status_code=404, detail=f"Sale not found: {sale_id}")

        return {"status": "success", "data": sale.to_dict()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sale: {str(e)}")
