"""
Northwind Snapshot Schema

Canonical column names and polars dtypes for the eight tables a snapshot may
hold, plus the key relationships the integrity checks enforce.
"""

from typing import Dict, List, Tuple

import polars as pl

TABLE_SCHEMAS: Dict[str, Dict[str, pl.DataType]] = {
    "customers": {
        "customer_id": pl.String,
        "company_name": pl.String,
        "country": pl.String,
    },
    "orders": {
        "order_id": pl.Int64,
        "customer_id": pl.String,
        "employee_id": pl.Int64,
        "ship_country": pl.String,
        "order_date": pl.Date,
        "freight": pl.Float64,
        "ship_via": pl.Int64,
    },
    "order_details": {
        "order_id": pl.Int64,
        "product_id": pl.Int64,
        "unit_price": pl.Float64,
        "quantity": pl.Int64,
        "discount": pl.Float64,
    },
    "products": {
        "product_id": pl.Int64,
        "product_name": pl.String,
        "category_id": pl.Int64,
        "supplier_id": pl.Int64,
        "units_in_stock": pl.Int64,
        "units_on_order": pl.Int64,
        "reorder_level": pl.Int64,
    },
    "categories": {
        "category_id": pl.Int64,
        "category_name": pl.String,
    },
    "suppliers": {
        "supplier_id": pl.Int64,
        "company_name": pl.String,
        "country": pl.String,
    },
    "employees": {
        "employee_id": pl.Int64,
        "first_name": pl.String,
        "last_name": pl.String,
    },
    "shippers": {
        "shipper_id": pl.Int64,
        "company_name": pl.String,
    },
}

TABLE_NAMES: Tuple[str, ...] = tuple(TABLE_SCHEMAS)

# Single-column keys; order_details uses a composite key
PRIMARY_KEYS: Dict[str, List[str]] = {
    "customers": ["customer_id"],
    "orders": ["order_id"],
    "order_details": ["order_id", "product_id"],
    "products": ["product_id"],
    "categories": ["category_id"],
    "suppliers": ["supplier_id"],
    "employees": ["employee_id"],
    "shippers": ["shipper_id"],
}

# (child table, child column, parent table, parent column)
FOREIGN_KEYS: List[Tuple[str, str, str, str]] = [
    ("orders", "customer_id", "customers", "customer_id"),
    ("orders", "employee_id", "employees", "employee_id"),
    ("orders", "ship_via", "shippers", "shipper_id"),
    ("order_details", "order_id", "orders", "order_id"),
    ("order_details", "product_id", "products", "product_id"),
    ("products", "category_id", "categories", "category_id"),
    ("products", "supplier_id", "suppliers", "supplier_id"),
]


def empty_table(name: str) -> pl.DataFrame:
    """Zero-row frame carrying the canonical schema of ``name``."""
    return pl.DataFrame(schema=TABLE_SCHEMAS[name])
