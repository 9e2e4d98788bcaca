"""
Sales Analytics Service

Orchestrates reporting requests: one bulk read of sales and products from
the stores, then pure aggregation/export over that snapshot.

Author: TM3
Date: 2026-10-12
"""
import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, List, Optional, Tuple, Union

from fastapi.concurrency import run_in_threadpool

from storepos.core.config import settings
from storepos.domain.product import Product
from storepos.domain.report import DetailLevel, Granularity
from storepos.domain.sale import Sale
from storepos.repositories.sale_repository import SaleRepository
from storepos.services import sales_aggregator
from storepos.services.catalog_service import ProductCatalogService
from storepos.services.report_exporter import ReportExporter

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    'csv': ('text/csv; charset=utf-8', 'csv'),
    'pdf': ('application/pdf', 'pdf'),
    'xlsx': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
}


@dataclass
class ExportFile:
    content: Union[str, bytes]
    media_type: str
    filename: str

    def as_stream(self) -> io.BytesIO:
        data = self.content.encode('utf-8') if isinstance(self.content, str) else self.content
        return io.BytesIO(data)


class SalesAnalyticsService:
    """
    Reporting entry point used by the analytics and export endpoints

    Args:
        catalog: Catalog accessor
        sale_repository: Sales store
        exporter: Report renderer
    """

    def __init__(
        self,
        catalog: ProductCatalogService,
        sale_repository: Optional[SaleRepository] = None,
        exporter: Optional[ReportExporter] = None
    ):
        self.catalog = catalog
        self.sale_repository = sale_repository or SaleRepository()
        self.exporter = exporter or ReportExporter()

    async def load(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category: str = "all"
    ) -> Tuple[List[Sale], List[Product]]:
        """Bulk read of sales in [start, end] plus the catalog, category-filtered"""
        start_dt = datetime.combine(start, time.min) if start else None
        end_dt = datetime.combine(end, time.max) if end else None

        sales = await run_in_threadpool(self.sale_repository.find_in_range, start_dt, end_dt)
        products = await self.catalog.get_all_products()

        filtered = sales_aggregator.filter_by_category(sales, products, category)
        logger.debug(
            f"Loaded {len(sales)} sales ({len(filtered)} after category '{category}') "
            f"and {len(products)} products"
        )
        return filtered, products

    async def dashboard(self, category: str = "all", now: Optional[datetime] = None) -> Dict:
        """
        Dashboard figures: totals, growth, daily chart, top products and
        low stock alerts
        """
        now = now or datetime.now()
        sales, products = await self.load(category=category)

        summary = sales_aggregator.summarize(sales)
        growth = sales_aggregator.month_over_month_growth(sales, now)
        points, average_daily = sales_aggregator.daily_series(sales, settings.DAILY_SERIES_DAYS, now)
        top = sales_aggregator.top_products(sales, settings.TOP_PRODUCTS_LIMIT)

        low_stock = sorted(
            (p for p in products
             if p.is_low_stock(settings.LOW_STOCK_THRESHOLD)
             and (category == "all" or p.category == category)),
            key=lambda p: p.stock
        )
        recent = sorted(sales, key=lambda s: s.date, reverse=True)[:5]

        return {
            'summary': summary.to_dict(),
            'growth': {key: float(value) for key, value in growth.items()},
            'daily_sales': [p.to_dict() for p in points],
            'average_daily_sales': float(average_daily),
            'top_products': [p.to_dict() for p in top],
            'low_stock': [p.to_dict() for p in low_stock],
            'recent_sales': [s.to_dict() for s in recent],
            'product_count': len(products),
        }

    async def sales_report(
        self,
        granularity: Granularity,
        start: Optional[date] = None,
        end: Optional[date] = None,
        category: str = "all",
        now: Optional[datetime] = None
    ) -> Dict:
        """Time-bucketed sales for the chart and report pages"""
        sales, _ = await self.load(start, end, category)
        buckets = sales_aggregator.bucket_by(sales, granularity, now)

        return {
            'granularity': Granularity(granularity).value,
            'buckets': [b.to_dict() for b in buckets],
            'summary': sales_aggregator.summarize(sales).to_dict(),
        }

    async def export(
        self,
        detail_level: DetailLevel,
        fmt: str = 'csv',
        start: Optional[date] = None,
        end: Optional[date] = None,
        category: str = "all"
    ) -> ExportFile:
        """
        Render a report file

        Args:
            detail_level: basic, detailed or comprehensive
            fmt: csv, pdf or xlsx

        Raises:
            ValueError: unknown format
        """
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")

        detail_level = DetailLevel(detail_level)
        sales, products = await self.load(start, end, category)
        date_range = (start, end)

        if fmt == 'pdf':
            content = self.exporter.render_print(sales, products, detail_level, date_range)
        elif fmt == 'xlsx':
            content = self.exporter.render_workbook(sales, products, detail_level, date_range).getvalue()
        else:
            content = self.exporter.render(sales, products, detail_level, date_range)

        media_type, extension = EXPORT_FORMATS[fmt]
        filename = f"sales-report-{detail_level.value}-{date.today().isoformat()}.{extension}"
        logger.info(f"Exported {detail_level.value} {fmt} report with {len(sales)} sales")

        return ExportFile(content=content, media_type=media_type, filename=filename)
