"""
Shared report building blocks.

The revenue of an order line is defined here once and reused by every
revenue report.
"""

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.operators import join, round_half_away

LINE_REVENUE = "line_revenue"

# Rounding precision of published metrics
TOTAL_DECIMALS = 0
AVERAGE_DECIMALS = 2
PERCENT_DECIMALS = 2


def line_revenue() -> pl.Expr:
    """unit_price * quantity * (1 - discount)"""
    return (pl.col("unit_price") * pl.col("quantity") * (1 - pl.col("discount"))).alias(LINE_REVENUE)


def rounded_total(column: str) -> pl.Expr:
    """Revenue/freight totals are published as whole numbers"""
    return round_half_away(pl.col(column), TOTAL_DECIMALS).cast(pl.Int64).alias(column)


def rounded_average(column: str, decimals: int = AVERAGE_DECIMALS) -> pl.Expr:
    return round_half_away(pl.col(column), decimals).alias(column)


def order_year() -> pl.Expr:
    return pl.col("order_date").dt.year().cast(pl.Int32).alias("order_year")


def order_month() -> pl.Expr:
    return pl.col("order_date").dt.month().cast(pl.Int32).alias("order_month")


def employee_name() -> pl.Expr:
    return pl.concat_str([pl.col("first_name"), pl.col("last_name")], separator=" ").alias("employee_name")


def order_lines(snapshot: Snapshot) -> pl.DataFrame:
    """Order details with their line revenue"""
    return snapshot.table("order_details").select(
        "order_id", "product_id", "quantity", "discount", line_revenue()
    )


def lines_with_orders(snapshot: Snapshot, *order_columns: str) -> pl.DataFrame:
    """Order lines joined to the requested order columns"""
    orders = snapshot.table("orders").select("order_id", *order_columns)
    return join(order_lines(snapshot), orders, on="order_id")


def lines_with_categories(snapshot: Snapshot) -> pl.DataFrame:
    """Order lines joined to product and category names"""
    products = snapshot.table("products").select("product_id", "product_name", "category_id")
    categories = snapshot.table("categories").select("category_id", "category_name")
    return join(join(order_lines(snapshot), products, on="product_id"), categories, on="category_id")


def customer_orders(snapshot: Snapshot, *order_columns: str) -> pl.DataFrame:
    """Customers joined to their orders"""
    customers = snapshot.table("customers").select("customer_id", "company_name")
    orders = snapshot.table("orders").select("customer_id", *order_columns)
    return join(customers, orders, on="customer_id")
