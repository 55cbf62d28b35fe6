"""
Product Reports

Best sellers, reach, slow movers and stock levels.
"""

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.operators import (
    Aggregation,
    group_aggregate,
    having,
    join,
    rank_within_partition,
)
from .catalog import register_report
from .common import LINE_REVENUE, lines_with_categories, lines_with_orders, rounded_total

RARELY_SOLD_MAX_ORDERS = 10

_LINE_COLUMNS = ["order_id", "product_id", "unit_price", "quantity", "discount"]


@register_report(
    "top_product_by_category",
    position=6,
    title="Top product per category",
    requires={
        "order_details": _LINE_COLUMNS,
        "products": ["product_id", "product_name", "category_id"],
        "categories": ["category_id", "category_name"],
    },
    key_columns=["category_name", "product_name"],
)
def top_product_by_category(snapshot: Snapshot) -> pl.DataFrame:
    """Highest-revenue product in each category; tied products are all kept."""
    grouped = group_aggregate(
        lines_with_categories(snapshot),
        ["category_name", "product_id", "product_name"],
        {"revenue": Aggregation.sum(LINE_REVENUE)},
    )
    ranked = rank_within_partition(grouped, "category_name", "revenue", descending=True)
    return (
        ranked.filter(pl.col("rank") == 1)
        .select("category_name", "product_name", rounded_total("revenue"))
        .sort(["category_name", "product_name"])
    )


@register_report(
    "restock_products",
    position=7,
    title="Products to restock",
    requires={
        "products": ["product_id", "product_name", "units_in_stock", "units_on_order", "reorder_level"],
    },
    key_columns=["product_id"],
)
def restock_products(snapshot: Snapshot) -> pl.DataFrame:
    """Products whose stock plus units on order is below the reorder level."""
    available = pl.col("units_in_stock") + pl.col("units_on_order")
    return (
        snapshot.table("products")
        .filter(available < pl.col("reorder_level"))
        .select(
            "product_id",
            "product_name",
            "units_in_stock",
            "units_on_order",
            "reorder_level",
            (pl.col("reorder_level") - available).alias("units_short"),
        )
        .sort("product_id")
    )


@register_report(
    "product_customer_reach",
    position=10,
    title="Unique customers per product",
    requires={
        "orders": ["order_id", "customer_id"],
        "order_details": _LINE_COLUMNS,
        "products": ["product_id", "product_name"],
    },
    key_columns=["product_id"],
)
def product_customer_reach(snapshot: Snapshot) -> pl.DataFrame:
    """Number of distinct customers who ordered each product."""
    products = snapshot.table("products").select("product_id", "product_name")
    grouped = group_aggregate(
        join(lines_with_orders(snapshot, "customer_id"), products, on="product_id"),
        ["product_id", "product_name"],
        {"unique_customers": Aggregation.count_distinct("customer_id")},
    )
    return grouped.sort(["unique_customers", "product_id"], descending=[True, False])


@register_report(
    "rarely_sold_products",
    position=11,
    title="Rarely sold products",
    requires={
        "order_details": _LINE_COLUMNS,
        "products": ["product_id", "product_name"],
    },
    key_columns=["product_id"],
)
def rarely_sold_products(snapshot: Snapshot) -> pl.DataFrame:
    """Products appearing in fewer than ten distinct orders."""
    products = snapshot.table("products").select("product_id", "product_name")
    lines = snapshot.table("order_details").select("order_id", "product_id", "quantity")
    grouped = group_aggregate(
        join(lines, products, on="product_id"),
        ["product_id", "product_name"],
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "units_sold": Aggregation.sum("quantity"),
        },
    )
    return having(grouped, pl.col("order_count") < RARELY_SOLD_MAX_ORDERS).sort(["order_count", "product_id"])
