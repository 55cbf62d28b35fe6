"""
Operations Reports

Shipping, staff, supplier and shipper contribution.
"""

import polars as pl

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.operators import Aggregation, group_aggregate, join, top_n
from .catalog import register_report
from .common import LINE_REVENUE, employee_name, lines_with_orders, order_lines, rounded_total

_LINE_COLUMNS = ["order_id", "product_id", "unit_price", "quantity", "discount"]


@register_report(
    "international_shipments",
    position=13,
    title="Shipments per destination country",
    requires={"orders": ["order_id", "ship_country"]},
    key_columns=["ship_country"],
)
def international_shipments(snapshot: Snapshot) -> pl.DataFrame:
    """Number of distinct orders shipped to each country."""
    grouped = group_aggregate(
        snapshot.table("orders"),
        "ship_country",
        {"shipment_count": Aggregation.count_distinct("order_id")},
    )
    return grouped.sort(["shipment_count", "ship_country"], descending=[True, False])


@register_report(
    "employee_country_reach",
    position=14,
    title="Countries served per employee",
    requires={
        "orders": ["order_id", "employee_id", "ship_country"],
        "employees": ["employee_id", "first_name", "last_name"],
    },
    key_columns=["employee_id"],
)
def employee_country_reach(snapshot: Snapshot) -> pl.DataFrame:
    """Distinct destination countries each employee has shipped orders to."""
    employees = snapshot.table("employees").select("employee_id", employee_name())
    orders = snapshot.table("orders").select("order_id", "employee_id", "ship_country")
    grouped = group_aggregate(
        join(employees, orders, on="employee_id"),
        ["employee_id", "employee_name"],
        {
            "country_count": Aggregation.count_distinct("ship_country"),
            "order_count": Aggregation.count_distinct("order_id"),
        },
    )
    return grouped.sort(["country_count", "employee_id"], descending=[True, False])


@register_report(
    "top_employee_by_revenue",
    position=15,
    title="Top employee by revenue",
    requires={
        "orders": ["order_id", "employee_id"],
        "order_details": _LINE_COLUMNS,
        "employees": ["employee_id", "first_name", "last_name"],
    },
    key_columns=["employee_id"],
)
def top_employee_by_revenue(snapshot: Snapshot) -> pl.DataFrame:
    """The employee whose orders generated the most revenue."""
    employees = snapshot.table("employees").select("employee_id", employee_name())
    grouped = group_aggregate(
        join(lines_with_orders(snapshot, "employee_id"), employees, on="employee_id"),
        ["employee_id", "employee_name"],
        {"revenue": Aggregation.sum(LINE_REVENUE)},
    )
    top = top_n(grouped, 1, by=["revenue", "employee_id"], descending=[True, False])
    return top.with_columns(rounded_total("revenue"))


@register_report(
    "supplier_revenue",
    position=17,
    title="Revenue by supplier",
    requires={
        "order_details": _LINE_COLUMNS,
        "products": ["product_id", "supplier_id"],
        "suppliers": ["supplier_id", "company_name", "country"],
    },
    key_columns=["supplier_id"],
)
def supplier_revenue(snapshot: Snapshot) -> pl.DataFrame:
    """Revenue from each supplier's products."""
    products = snapshot.table("products").select("product_id", "supplier_id")
    suppliers = snapshot.table("suppliers").select(
        "supplier_id", pl.col("company_name").alias("supplier_name"), "country"
    )
    lines = join(join(order_lines(snapshot), products, on="product_id"), suppliers, on="supplier_id")
    grouped = group_aggregate(
        lines,
        ["supplier_id", "supplier_name", "country"],
        {"revenue": Aggregation.sum(LINE_REVENUE)},
    )
    return grouped.with_columns(rounded_total("revenue")).sort(
        ["revenue", "supplier_id"], descending=[True, False]
    )


@register_report(
    "shipper_revenue",
    position=18,
    title="Revenue by shipper",
    requires={
        "orders": ["order_id", "ship_via"],
        "order_details": _LINE_COLUMNS,
        "shippers": ["shipper_id", "company_name"],
    },
    key_columns=["shipper_id"],
)
def shipper_revenue(snapshot: Snapshot) -> pl.DataFrame:
    """Orders carried and revenue shipped by each shipper."""
    shippers = snapshot.table("shippers").select(
        "shipper_id", pl.col("company_name").alias("shipper_name")
    )
    lines = join(lines_with_orders(snapshot, "ship_via"), shippers, left_on="ship_via", right_on="shipper_id")
    grouped = group_aggregate(
        lines.rename({"ship_via": "shipper_id"}),
        ["shipper_id", "shipper_name"],
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "revenue": Aggregation.sum(LINE_REVENUE),
        },
    )
    return grouped.with_columns(rounded_total("revenue")).sort(
        ["revenue", "shipper_id"], descending=[True, False]
    )


@register_report(
    "freight_by_region",
    position=19,
    title="Freight cost by destination country",
    requires={"orders": ["order_id", "ship_country", "freight"]},
    key_columns=["ship_country"],
)
def freight_by_region(snapshot: Snapshot) -> pl.DataFrame:
    """Total freight charged per destination country."""
    grouped = group_aggregate(
        snapshot.table("orders"),
        "ship_country",
        {
            "order_count": Aggregation.count_distinct("order_id"),
            "total_freight": Aggregation.sum("freight"),
        },
    )
    return grouped.with_columns(rounded_total("total_freight")).sort(
        ["total_freight", "ship_country"], descending=[True, False]
    )
