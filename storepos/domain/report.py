"""
Reporting Domain Models

Value objects produced by the sales aggregator. None of them is persisted;
each aggregation call builds them fresh.

Author: TM3
Date: 2026-10-08
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Granularity(str, Enum):
    """Time bucket sizes"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class DetailLevel(str, Enum):
    """Export detail levels"""
    BASIC = "basic"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


@dataclass
class ReportBucket:
    """Summed sales metrics for one time period"""
    key: str
    period_label: str
    period_start: date
    total: Decimal = Decimal('0')
    transaction_count: int = 0
    item_count: int = 0
    is_current_period: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data['period_start'] = self.period_start.isoformat()
        data['total'] = float(self.total)
        return data


@dataclass
class ProductPerformance:
    """Units and revenue accumulated for one product across sales"""
    product_id: str
    name: str
    quantity: int = 0
    revenue: Decimal = Decimal('0')

    def to_dict(self) -> dict:
        data = asdict(self)
        data['revenue'] = float(self.revenue)
        return data


@dataclass
class SalesSummary:
    """Headline figures for a set of sales"""
    total_revenue: Decimal
    transaction_count: int
    items_sold: int
    average_order_value: Decimal
    first_sale: Optional[datetime] = None
    last_sale: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'total_revenue': float(self.total_revenue),
            'transaction_count': self.transaction_count,
            'items_sold': self.items_sold,
            'average_order_value': float(self.average_order_value),
            'first_sale': self.first_sale.isoformat() if self.first_sale else None,
            'last_sale': self.last_sale.isoformat() if self.last_sale else None,
        }


@dataclass
class DailyPoint:
    """One day of a zero-filled daily sales series"""
    day: date
    label: str
    total: Decimal = Decimal('0')
    transaction_count: int = 0
    is_today: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data['day'] = self.day.isoformat()
        data['total'] = float(self.total)
        return data
