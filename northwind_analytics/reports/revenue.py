"""
Category Revenue Reports
"""

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.operators import Aggregation, group_aggregate, join, rank_within_partition
from .catalog import register_report
from .common import (
    LINE_REVENUE,
    PERCENT_DECIMALS,
    lines_with_categories,
    order_month,
    order_year,
    rounded_average,
    rounded_total,
)

_CATEGORY_LINES = {
    "order_details": ["order_id", "product_id", "unit_price", "quantity", "discount"],
    "products": ["product_id", "product_name", "category_id"],
    "categories": ["category_id", "category_name"],
}


@register_report(
    "top_category_by_country",
    position=5,
    title="Top category per customer country",
    requires={
        **_CATEGORY_LINES,
        "orders": ["order_id", "customer_id"],
        "customers": ["customer_id", "country"],
    },
    key_columns=["country", "category_name"],
)
def top_category_by_country(snapshot: Snapshot) -> pl.DataFrame:
    """Highest-revenue category in each customer country; ties are all kept."""
    orders = snapshot.table("orders").select("order_id", "customer_id")
    customers = snapshot.table("customers").select("customer_id", "country")
    lines = join(join(lines_with_categories(snapshot), orders, on="order_id"), customers, on="customer_id")

    grouped = group_aggregate(lines, ["country", "category_name"], {"revenue": Aggregation.sum(LINE_REVENUE)})
    ranked = rank_within_partition(grouped, "country", "revenue", descending=True)
    return (
        ranked.filter(pl.col("rank") == 1)
        .select("country", "category_name", rounded_total("revenue"))
        .sort(["country", "category_name"])
    )


@register_report(
    "monthly_category_revenue",
    position=8,
    title="Monthly revenue by category",
    requires={**_CATEGORY_LINES, "orders": ["order_id", "order_date"]},
    key_columns=["category_name", "order_year", "order_month"],
)
def monthly_category_revenue(snapshot: Snapshot) -> pl.DataFrame:
    """Revenue per category and calendar month, in chronological order."""
    orders = snapshot.table("orders").select("order_id", order_year(), order_month())
    grouped = group_aggregate(
        join(lines_with_categories(snapshot), orders, on="order_id"),
        ["category_name", "order_year", "order_month"],
        {"revenue": Aggregation.sum(LINE_REVENUE)},
    )
    return grouped.with_columns(rounded_total("revenue")).sort(["order_year", "order_month", "category_name"])


@register_report(
    "average_discount_depth",
    position=12,
    title="Average discount depth by category",
    requires=_CATEGORY_LINES,
    key_columns=["category_name"],
)
def average_discount_depth(snapshot: Snapshot) -> pl.DataFrame:
    """Mean discount, in percent, across discounted order lines of each category."""
    discounted = lines_with_categories(snapshot).filter(pl.col("discount") > 0)
    grouped = group_aggregate(
        discounted.with_columns((pl.col("discount") * 100).alias("discount_pct")),
        "category_name",
        {
            "discounted_lines": Aggregation.count(),
            "avg_discount_pct": Aggregation.avg("discount_pct"),
        },
    )
    return grouped.with_columns(rounded_average("avg_discount_pct", PERCENT_DECIMALS)).sort(
        ["avg_discount_pct", "category_name"], descending=[True, False], nulls_last=True
    )


@register_report(
    "category_revenue",
    position=20,
    title="Revenue by category",
    requires=_CATEGORY_LINES,
    key_columns=["category_name"],
)
def category_revenue(snapshot: Snapshot) -> pl.DataFrame:
    """Total revenue per product category."""
    grouped = group_aggregate(
        lines_with_categories(snapshot),
        "category_name",
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "revenue": Aggregation.sum(LINE_REVENUE),
        },
    )
    return grouped.with_columns(rounded_total("revenue")).sort(
        ["revenue", "category_name"], descending=[True, False]
    )
