"""
Sales Analytics API Endpoints
Dashboard figures and time-bucketed sales reports

Author: TM3
Date: 2026-10-14
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storepos.api.dependencies import get_analytics_service
from storepos.domain.report import Granularity
from storepos.services.analytics_service import SalesAnalyticsService

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    category: str = Query("all", description="Product category filter"),
    service: SalesAnalyticsService = Depends(get_analytics_service)
):
    """
    Dashboard overview

    Returns:
    - Summary (revenue, transactions, items sold, average order value)
    - Month over month revenue growth
    - Zero-filled daily sales for the recent period
    - Top products by revenue
    - Low stock alerts
    - Recent sales
    """
    try:
        data = await service.dashboard(category=category)
        return {"status": "success", "data": data}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard: {str(e)}")


@router.get("/report")
async def get_sales_report(
    granularity: Granularity = Query(Granularity.DAILY, description="daily, weekly or monthly"),
    from_date: Optional[date] = Query(None, description="First day (inclusive)"),
    to_date: Optional[date] = Query(None, description="Last day (inclusive)"),
    category: str = Query("all", description="Product category filter"),
    service: SalesAnalyticsService = Depends(get_analytics_service)
):
    """Sales grouped into time buckets, oldest period first"""
    try:
        data = await service.sales_report(granularity, from_date, to_date, category)
        return {"status": "success", "data": data}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching sales report: {str(e)}")
