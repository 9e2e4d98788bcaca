"""
Unit tests for the sales aggregation functions

Author: TM3
Date: 2026-10-16
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from storepos.domain.report import Granularity
from storepos.services import sales_aggregator as agg

NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def october_sales(make_sale):
    return [
        make_sale("s1", datetime(2026, 9, 28, 10, 0), [("A", 1, "10.00")]),
        make_sale("s2", datetime(2026, 10, 2, 9, 0), [("A", 2, "10.00"), ("B", 1, "25.00")]),
        make_sale("s3", datetime(2026, 10, 9, 18, 0), [("C", 3, "5.00")]),
        make_sale("s4", datetime(2026, 10, 19, 8, 0), [("B", 2, "25.00")]),
        make_sale("s5", datetime(2026, 10, 19, 20, 0), [("A", 1, "10.00")]),
    ]


class TestBucketBy:
    """Test bucket_by time grouping"""

    def test_same_day_sales_form_one_daily_bucket(self, make_sale):
        day = datetime(2026, 10, 5)
        sales = [
            make_sale("s1", day.replace(hour=9), [("A", 1, "10.00")]),
            make_sale("s2", day.replace(hour=12), [("A", 2, "10.00")]),
            make_sale("s3", day.replace(hour=17), [("A", 3, "10.00")]),
        ]

        buckets = agg.bucket_by(sales, Granularity.DAILY, now=NOW)

        assert len(buckets) == 1
        assert buckets[0].key == "2026-10-05"
        assert buckets[0].total == Decimal("60.00")
        assert buckets[0].transaction_count == 3
        assert buckets[0].item_count == 6

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_bucket_totals_equal_sale_totals(self, october_sales, granularity):
        buckets = agg.bucket_by(october_sales, granularity, now=NOW)

        assert sum(b.total for b in buckets) == sum(s.total_amount for s in october_sales)
        assert sum(b.transaction_count for b in buckets) == len(october_sales)

    def test_weekly_keys_use_week_of_month(self, october_sales):
        buckets = agg.bucket_by(october_sales, Granularity.WEEKLY, now=NOW)

        assert [b.key for b in buckets] == ["2026-09-W4", "2026-10-W1", "2026-10-W2", "2026-10-W3"]
        assert buckets[1].period_start == date(2026, 10, 1)
        assert buckets[3].period_start == date(2026, 10, 15)

    def test_monthly_buckets_sorted_regardless_of_input_order(self, october_sales):
        buckets = agg.bucket_by(list(reversed(october_sales)), Granularity.MONTHLY, now=NOW)

        assert [b.key for b in buckets] == ["2026-09", "2026-10"]
        assert buckets[1].total == Decimal("120.00")

    def test_daily_buckets_sorted_by_date(self, october_sales):
        buckets = agg.bucket_by(list(reversed(october_sales)), Granularity.DAILY, now=NOW)

        keys = [b.key for b in buckets]
        assert keys == sorted(keys)

    def test_current_period_flag(self, october_sales):
        daily = agg.bucket_by(october_sales, Granularity.DAILY, now=NOW)
        monthly = agg.bucket_by(october_sales, Granularity.MONTHLY, now=NOW)

        assert [b.key for b in daily if b.is_current_period] == ["2026-10-19"]
        assert [b.key for b in monthly if b.is_current_period] == ["2026-10"]

    def test_accepts_granularity_string(self, october_sales):
        assert len(agg.bucket_by(october_sales, "monthly", now=NOW)) == 2

    def test_empty_input(self):
        assert agg.bucket_by([], Granularity.DAILY) == []


class TestFilters:
    """Test category and date filters"""

    def test_filter_by_category(self, october_sales, make_product):
        products = [
            make_product("A", category="Snacks"),
            make_product("B", category="Drinks"),
        ]

        snacks = agg.filter_by_category(october_sales, products, "Snacks")
        drinks = agg.filter_by_category(october_sales, products, "Drinks")

        assert [s.id for s in snacks] == ["s1", "s2", "s5"]
        assert [s.id for s in drinks] == ["s2", "s4"]

    def test_unknown_product_never_matches_concrete_category(self, october_sales, make_product):
        products = [make_product("A", category="Snacks")]

        # s3 only has product C, which is not in the catalog
        result = agg.filter_by_category(october_sales, products, "Snacks")

        assert "s3" not in [s.id for s in result]

    def test_all_is_wildcard(self, october_sales):
        assert agg.filter_by_category(october_sales, [], "all") == october_sales

    def test_filter_by_date_range_is_inclusive(self, october_sales):
        result = agg.filter_by_date_range(october_sales, date(2026, 10, 2), date(2026, 10, 9))

        assert [s.id for s in result] == ["s2", "s3"]


class TestProducts:
    """Test top_products and product_performance"""

    def test_top_products_by_revenue(self, october_sales):
        top = agg.top_products(october_sales, 2)

        assert [(p.product_id, p.revenue) for p in top] == [
            ("B", Decimal("75.00")),
            ("A", Decimal("40.00")),
        ]
        assert top[1].quantity == 4

    def test_ties_broken_by_product_id(self, make_sale):
        sales = [
            make_sale("s1", NOW, [("Z", 1, "10.00")]),
            make_sale("s2", NOW, [("M", 2, "5.00")]),
        ]

        assert [p.product_id for p in agg.top_products(sales, 5)] == ["M", "Z"]

    def test_zero_limit(self, october_sales):
        assert agg.top_products(october_sales, 0) == []


class TestMetrics:
    """Test derived metrics"""

    @pytest.mark.parametrize("current,previous,expected", [
        (0, 0, Decimal("0")),
        (50, 0, Decimal("100")),
        (100, 50, Decimal("100")),
        (50, 100, Decimal("-50")),
    ])
    def test_growth_percent(self, current, previous, expected):
        assert agg.growth_percent(Decimal(current), Decimal(previous)) == expected

    def test_average_order_value_of_nothing_is_zero(self):
        assert agg.average_order_value(Decimal("0"), 0) == Decimal("0")
        assert agg.summarize([]).average_order_value == Decimal("0")

    def test_average_order_value_rounds_to_cents(self):
        assert agg.average_order_value(Decimal("10.00"), 3) == Decimal("3.33")

    def test_summarize(self, october_sales):
        summary = agg.summarize(october_sales)

        assert summary.total_revenue == Decimal("130.00")
        assert summary.transaction_count == 5
        assert summary.items_sold == 10
        assert summary.average_order_value == Decimal("26.00")
        assert summary.first_sale == datetime(2026, 9, 28, 10, 0)
        assert summary.last_sale == datetime(2026, 10, 19, 20, 0)

    def test_month_over_month_growth(self, october_sales):
        growth = agg.month_over_month_growth(october_sales, now=NOW)

        assert growth['current_month'] == Decimal("120.00")
        assert growth['previous_month'] == Decimal("10.00")
        assert growth['growth_percent'] == Decimal("1100")

    def test_daily_series_is_zero_filled(self, october_sales):
        points, average = agg.daily_series(october_sales, days=30, now=NOW)

        assert len(points) == 30
        assert points[0].day == date(2026, 9, 20)
        assert points[-1].day == date(2026, 10, 19)
        assert points[-1].is_today
        assert points[-1].total == Decimal("60.00")
        assert points[-1].transaction_count == 2
        assert points[1].total == Decimal("0")
        assert average == Decimal("4.33")

    def test_daily_average_divides_by_days_not_transactions(self, make_sale):
        sales = [make_sale("s1", NOW, [("A", 1, "10.00")])]

        _, average = agg.daily_series(sales, days=4, now=NOW)

        assert average == Decimal("2.50")
