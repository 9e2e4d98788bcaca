"""
Reports API Endpoints
Downloadable sales reports (CSV, PDF, Excel)

Author: TM3
Date: 2026-10-14
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from storepos.api.dependencies import get_analytics_service
from storepos.domain.report import DetailLevel
from storepos.services.analytics_service import EXPORT_FORMATS, SalesAnalyticsService

router = APIRouter()


@router.get("/export")
async def export_report(
    detail_level: DetailLevel = Query(DetailLevel.BASIC, description="basic, detailed or comprehensive"),
    format: str = Query("csv", description="csv, pdf or xlsx"),
    from_date: Optional[date] = Query(None, description="First day (inclusive)"),
    to_date: Optional[date] = Query(None, description="Last day (inclusive)"),
    category: str = Query("all", description="Product category filter"),
    service: SalesAnalyticsService = Depends(get_analytics_service)
):
    """
    Download a sales report file

    An empty selection still produces a file saying "No data to export".
    """
    if format not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported format '{format}'. Use one of: {', '.join(EXPORT_FORMATS)}"
        )

    try:
        export = await service.export(detail_level, format, from_date, to_date, category)

        return StreamingResponse(
            export.as_stream(),
            media_type=export.media_type,
            headers={"Content-Disposition": f"attachment; filename={export.filename}"}
        )

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error exporting report: {str(e)}")
