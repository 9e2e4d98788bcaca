"""
Sales Aggregator

Pure functions that turn a list of sales into time buckets and derived
metrics. Nothing here touches the store; callers do one bulk read and pass
the snapshot in.

Every function degrades to zeroed metrics on empty input instead of
raising.

Author: TM3
Date: 2026-10-10
"""
import math
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from storepos.domain.product import Product
from storepos.domain.report import (
    DailyPoint,
    Granularity,
    ProductPerformance,
    ReportBucket,
    SalesSummary,
)
from storepos.domain.sale import Sale

ZERO = Decimal('0')
CENT = Decimal('0.01')


# ============================================================================
# Filters
# ============================================================================

def filter_by_category(sales: List[Sale], products: List[Product], category: str) -> List[Sale]:
    """
    Sales with at least one item whose product is in `category`

    "all" returns every sale. Items whose product is no longer in
    `products` never match a concrete category.
    """
    if not category or category == "all":
        return list(sales)

    categories = {product.id: product.category for product in products}
    return [
        sale for sale in sales
        if any(categories.get(item.product_id) == category for item in sale.items)
    ]


def filter_by_date_range(
    sales: List[Sale],
    start: Optional[date] = None,
    end: Optional[date] = None
) -> List[Sale]:
    """Sales whose calendar date is within [start, end] (both inclusive)"""
    selected = []
    for sale in sales:
        day = sale.date.date()
        if start and day < start:
            continue
        if end and day > end:
            continue
        selected.append(sale)
    return selected


# ============================================================================
# Buckets
# ============================================================================

def week_of_month(day: date) -> int:
    """1-based partial week of the month: days 1-7 are week 1, 8-14 week 2..."""
    return math.ceil(day.day / 7)


def _period(day: date, granularity: Granularity) -> Tuple[str, str, date]:
    """Key, display label and first day of the period containing `day`"""
    if granularity == Granularity.DAILY:
        return day.isoformat(), day.strftime("%b %d"), day

    if granularity == Granularity.WEEKLY:
        week = week_of_month(day)
        start = day.replace(day=(week - 1) * 7 + 1)
        return f"{day:%Y-%m}-W{week}", f"Week {week}, {day:%b %Y}", start

    return f"{day:%Y-%m}", day.strftime("%b %Y"), day.replace(day=1)


def bucket_by(
    sales: List[Sale],
    granularity: Granularity,
    now: Optional[datetime] = None
) -> List[ReportBucket]:
    """
    Group sales into daily, weekly or monthly buckets

    Weekly buckets are day-of-month partial weeks (see week_of_month), not
    ISO weeks, so a week never spans two months.

    Args:
        sales: Sales to group
        granularity: Bucket size
        now: Reference time for is_current_period (defaults to now)

    Returns:
        Buckets sorted by period start
    """
    granularity = Granularity(granularity)
    now = now or datetime.now()
    current_key = _period(now.date(), granularity)[0]

    buckets: Dict[str, ReportBucket] = {}
    for sale in sales:
        key, label, start = _period(sale.date.date(), granularity)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = ReportBucket(
                key=key,
                period_label=label,
                period_start=start,
                is_current_period=(key == current_key),
            )
            buckets[key] = bucket

        bucket.total += sale.total_amount
        bucket.transaction_count += 1
        bucket.item_count += sale.total_quantity

    return sorted(buckets.values(), key=lambda b: b.period_start)


# ============================================================================
# Products
# ============================================================================

def product_performance(sales: Iterable[Sale]) -> List[ProductPerformance]:
    """
    Units and revenue per product across all sale items

    Sorted by revenue descending, ties by product id. The name is the one
    recorded on the first sale item seen for the product.
    """
    totals: Dict[str, ProductPerformance] = OrderedDict()
    for sale in sales:
        for item in sale.items:
            entry = totals.get(item.product_id)
            if entry is None:
                entry = ProductPerformance(product_id=item.product_id, name=item.product_name)
                totals[item.product_id] = entry
            entry.quantity += item.quantity
            entry.revenue += item.total

    return sorted(totals.values(), key=lambda p: (-p.revenue, p.product_id))


def top_products(sales: Iterable[Sale], n: int) -> List[ProductPerformance]:
    """The n products with the highest revenue"""
    if n <= 0:
        return []
    return product_performance(sales)[:n]


# ============================================================================
# Metrics
# ============================================================================

def _per_unit_average(total: Decimal, units: int) -> Decimal:
    """total / units rounded to cents; units below 1 count as 1"""
    return (Decimal(total) / max(1, units)).quantize(CENT, rounding=ROUND_HALF_UP)


def average_order_value(total: Decimal, count: int) -> Decimal:
    """Revenue per transaction; 0 when there are no transactions"""
    return _per_unit_average(total, count)


def growth_percent(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percentage change from previous to current

    100 when previous is 0 and current is positive, 0 when both are 0.
    """
    current = Decimal(current)
    previous = Decimal(previous)
    if previous == 0:
        return Decimal('100') if current > 0 else ZERO
    return (current - previous) / previous * 100


def summarize(sales: List[Sale]) -> SalesSummary:
    total_revenue = sum((sale.total_amount for sale in sales), ZERO)
    dates = [sale.date for sale in sales]
    return SalesSummary(
        total_revenue=total_revenue,
        transaction_count=len(sales),
        items_sold=sum(sale.total_quantity for sale in sales),
        average_order_value=average_order_value(total_revenue, len(sales)),
        first_sale=min(dates) if dates else None,
        last_sale=max(dates) if dates else None,
    )


def month_over_month_growth(sales: List[Sale], now: Optional[datetime] = None) -> Dict[str, Decimal]:
    """Revenue of the current calendar month against the previous one"""
    now = now or datetime.now()
    this_month = now.date().replace(day=1)
    last_month = this_month - relativedelta(months=1)

    current = sum(
        (s.total_amount for s in sales if s.date.date().replace(day=1) == this_month), ZERO
    )
    previous = sum(
        (s.total_amount for s in sales if s.date.date().replace(day=1) == last_month), ZERO
    )
    return {
        'current_month': current,
        'previous_month': previous,
        'growth_percent': growth_percent(current, previous),
    }


def daily_series(
    sales: List[Sale],
    days: int = 30,
    now: Optional[datetime] = None
) -> Tuple[List[DailyPoint], Decimal]:
    """
    Zero-filled daily totals for the last `days` days, ending today

    Returns:
        (points oldest first, average daily sales)
    """
    today = (now or datetime.now()).date()
    first = today - timedelta(days=days - 1)

    points: Dict[date, DailyPoint] = OrderedDict()
    for offset in range(days):
        day = first + timedelta(days=offset)
        points[day] = DailyPoint(day=day, label=day.strftime("%b %d"), is_today=(day == today))

    for sale in sales:
        point = points.get(sale.date.date())
        if point is None:
            continue
        point.total += sale.total_amount
        point.transaction_count += 1

    total = sum((p.total for p in points.values()), ZERO)
    average = _per_unit_average(total, days)
    return list(points.values()), average
