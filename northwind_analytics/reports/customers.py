"""
Customer Reports

Order frequency, geographic spread, retention and spend per customer.
"""

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.operators import (
    Aggregation,
    group_aggregate,
    having,
    join,
    lag_within_partition,
    safe_divide,
    top_n,
)
from .catalog import register_report
from .common import (
    AVERAGE_DECIMALS,
    LINE_REVENUE,
    customer_orders,
    lines_with_orders,
    order_year,
    rounded_average,
    rounded_total,
)

TOP_CUSTOMERS_LIMIT = 5
DELTA_YEAR = 1998


@register_report(
    "top_customers_by_orders",
    position=1,
    title="Top customers by order count",
    requires={
        "customers": ["customer_id", "company_name"],
        "orders": ["order_id", "customer_id"],
    },
    key_columns=["customer_id"],
)
def top_customers_by_orders(snapshot: Snapshot) -> pl.DataFrame:
    """The five customers with the most distinct orders."""
    grouped = group_aggregate(
        customer_orders(snapshot, "order_id"),
        ["customer_id", "company_name"],
        {"order_count": Aggregation.count_distinct("order_id")},
    )
    return top_n(grouped, TOP_CUSTOMERS_LIMIT, by=["order_count", "customer_id"], descending=[True, False])


@register_report(
    "multi_country_customers",
    position=2,
    title="Customers shipping to several countries",
    requires={
        "customers": ["customer_id", "company_name"],
        "orders": ["customer_id", "ship_country"],
    },
    key_columns=["customer_id"],
)
def multi_country_customers(snapshot: Snapshot) -> pl.DataFrame:
    """Customers whose orders shipped to more than one country, with the country list."""
    grouped = group_aggregate(
        customer_orders(snapshot, "ship_country"),
        ["customer_id", "company_name"],
        {
            "country_count": Aggregation.count_distinct("ship_country"),
            "countries": Aggregation.concat_distinct("ship_country"),
        },
    )
    return having(grouped, pl.col("country_count") > 1).sort(
        ["country_count", "customer_id"], descending=[True, False]
    )


@register_report(
    "churned_customers",
    position=3,
    title="Churn candidates",
    requires={
        "customers": ["customer_id", "company_name"],
        "orders": ["customer_id", "order_date"],
    },
    key_columns=["customer_id"],
)
def churned_customers(snapshot: Snapshot) -> pl.DataFrame:
    """Customers whose first and last order fall in different years."""
    orders = customer_orders(snapshot, "order_date").with_columns(order_year())
    grouped = group_aggregate(
        orders,
        ["customer_id", "company_name"],
        {
            "first_order_year": Aggregation.min("order_year"),
            "last_order_year": Aggregation.max("order_year"),
        },
    )
    return having(grouped, pl.col("first_order_year") != pl.col("last_order_year")).sort("customer_id")


@register_report(
    "customer_revenue_delta",
    position=4,
    title="Customer revenue change, 1998 vs previous year",
    requires={
        "customers": ["customer_id", "company_name"],
        "orders": ["order_id", "customer_id", "order_date"],
        "order_details": ["order_id", "product_id", "unit_price", "quantity", "discount"],
    },
    key_columns=["customer_id"],
    metric_columns=["revenue", "previous_year_revenue", "revenue_delta"],
)
def customer_revenue_delta(snapshot: Snapshot) -> pl.DataFrame:
    """
    Revenue per customer and year, compared with the customer's previous
    year of activity. Customers without an earlier year compare against 0.
    """
    customers = snapshot.table("customers").select("customer_id", "company_name")
    lines = join(lines_with_orders(snapshot, "customer_id", "order_date"), customers, on="customer_id")
    yearly = group_aggregate(
        lines.with_columns(order_year()),
        ["customer_id", "company_name", "order_year"],
        {"revenue": Aggregation.sum(LINE_REVENUE)},
    ).with_columns(rounded_total("revenue"))

    lagged = lag_within_partition(
        yearly,
        partition_by="customer_id",
        order_by="order_year",
        column="revenue",
        offset=1,
        default=0,
        alias="previous_year_revenue",
    )
    return (
        lagged.filter(pl.col("order_year") == DELTA_YEAR)
        .with_columns((pl.col("revenue") - pl.col("previous_year_revenue")).alias("revenue_delta"))
        .sort(["revenue_delta", "customer_id"], descending=[True, False])
    )


@register_report(
    "average_order_size",
    position=9,
    title="Average order size per customer",
    requires={
        "customers": ["customer_id", "company_name"],
        "orders": ["order_id", "customer_id"],
        "order_details": ["order_id", "product_id", "unit_price", "quantity", "discount"],
    },
    key_columns=["customer_id"],
)
def average_order_size(snapshot: Snapshot) -> pl.DataFrame:
    """Average number of units per order for each customer."""
    customers = snapshot.table("customers").select("customer_id", "company_name")
    grouped = group_aggregate(
        join(lines_with_orders(snapshot, "customer_id"), customers, on="customer_id"),
        ["customer_id", "company_name"],
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "units": Aggregation.sum("quantity"),
        },
    )
    return (
        grouped.with_columns(safe_divide(pl.col("units"), pl.col("order_count")).alias("avg_units_per_order"))
        .select("customer_id", "company_name", "order_count", rounded_average("avg_units_per_order"))
        .sort(["avg_units_per_order", "customer_id"], descending=[True, False], nulls_last=True)
    )


@register_report(
    "average_order_value_by_country",
    position=16,
    title="Average order value by customer country",
    requires={
        "customers": ["customer_id", "country"],
        "orders": ["order_id", "customer_id"],
        "order_details": ["order_id", "product_id", "unit_price", "quantity", "discount"],
    },
    key_columns=["country"],
)
def average_order_value_by_country(snapshot: Snapshot) -> pl.DataFrame:
    """Mean revenue per order, grouped by the ordering customer's country."""
    customers = snapshot.table("customers").select("customer_id", "country")
    grouped = group_aggregate(
        join(lines_with_orders(snapshot, "customer_id"), customers, on="customer_id"),
        "country",
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "revenue": Aggregation.sum(LINE_REVENUE),
        },
    )
    return (
        grouped.with_columns(safe_divide(pl.col("revenue"), pl.col("order_count")).alias("avg_order_value"))
        .select("country", "order_count", rounded_average("avg_order_value", AVERAGE_DECIMALS))
        .sort(["avg_order_value", "country"], descending=[True, False], nulls_last=True)
    )
