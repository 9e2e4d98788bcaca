"""
Unit tests for SalesAnalyticsService

Author: TM3
Date: 2026-10-17
"""
import pytest
from datetime import date, datetime

from storepos.domain.report import DetailLevel, Granularity
from storepos.services.analytics_service import SalesAnalyticsService
from storepos.services.catalog_service import ProductCatalogService
from storepos.services.report_exporter import NO_DATA_MESSAGE

pytestmark = pytest.mark.asyncio

NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def service(product_repo, sale_repo, make_sale):
    sale_repo.sales.extend([
        make_sale("s1", datetime(2026, 9, 15, 10, 0), [("A", 1, "10.00")]),
        make_sale("s2", datetime(2026, 10, 2, 9, 0), [("A", 2, "10.00"), ("B", 1, "25.00")]),
        make_sale("s3", datetime(2026, 10, 19, 8, 0), [("B", 2, "25.00")]),
    ])
    return SalesAnalyticsService(ProductCatalogService(product_repo), sale_repo)


async def test_dashboard(service):
    data = await service.dashboard(now=NOW)

    assert data['summary']['total_revenue'] == 105.0
    assert data['summary']['transaction_count'] == 3
    assert data['growth']['current_month'] == 95.0
    assert data['growth']['previous_month'] == 10.0
    assert len(data['daily_sales']) == 30
    assert data['daily_sales'][-1]['total'] == 50.0
    assert [p['product_id'] for p in data['top_products']] == ["B", "A"]
    assert [p['id'] for p in data['low_stock']] == ["A"]
    assert data['recent_sales'][0]['id'] == "s3"


async def test_dashboard_category_filter(service):
    data = await service.dashboard(category="Drinks", now=NOW)

    assert data['summary']['transaction_count'] == 2
    assert data['low_stock'] == []


async def test_sales_report_date_range(service):
    data = await service.sales_report(
        Granularity.MONTHLY, start=date(2026, 10, 1), end=date(2026, 10, 31), now=NOW
    )

    assert data['granularity'] == "monthly"
    assert len(data['buckets']) == 1
    assert data['buckets'][0]['key'] == "2026-10"
    assert data['buckets'][0]['total'] == 95.0
    assert data['buckets'][0]['is_current_period'] is True


async def test_export_csv(service):
    export = await service.export(DetailLevel.BASIC, 'csv')

    assert export.media_type.startswith("text/csv")
    assert export.filename.endswith(".csv")
    assert export.content.startswith("Date,Invoice,Customer,Items,Amount\n")


async def test_export_empty_range(service):
    export = await service.export(DetailLevel.DETAILED, 'csv', start=date(2020, 1, 1), end=date(2020, 1, 31))

    assert export.content == NO_DATA_MESSAGE


async def test_export_xlsx_and_pdf(service):
    xlsx = await service.export(DetailLevel.COMPREHENSIVE, 'xlsx')
    pdf = await service.export(DetailLevel.COMPREHENSIVE, 'pdf')

    assert xlsx.content[:2] == b"PK"
    assert pdf.content.startswith(b"%PDF")
    assert pdf.as_stream().read(4) == b"%PDF"


async def test_export_rejects_unknown_format(service):
    with pytest.raises(ValueError):
        await service.export(DetailLevel.BASIC, 'docx')
