"""
Test Suite Configuration
"""
from datetime import date
from typing import Dict

import polars as pl
import pytest

from northwind_analytics.config import Settings
from northwind_analytics.data import Snapshot, load_snapshot
from northwind_analytics.reports import ReportRunner


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


def _dimensions() -> Dict[str, pl.DataFrame]:
    return {
        "employees": pl.DataFrame({
            "employee_id": [1, 2],
            "first_name": ["Nancy", "Andrew"],
            "last_name": ["Davolio", "Fuller"],
        }),
        "shippers": pl.DataFrame({
            "shipper_id": [1, 2],
            "company_name": ["Speedy Express", "United Package"],
        }),
        "categories": pl.DataFrame({
            "category_id": [1, 2],
            "category_name": ["Beverages", "Condiments"],
        }),
        "suppliers": pl.DataFrame({
            "supplier_id": [1, 2],
            "company_name": ["Exotic Liquids", "New Orleans Cajun Delights"],
            "country": ["UK", "USA"],
        }),
        "products": pl.DataFrame({
            "product_id": [1, 2, 3],
            "product_name": ["Chai", "Chang", "Aniseed Syrup"],
            "category_id": [1, 1, 2],
            "supplier_id": [1, 1, 2],
            "units_in_stock": [39, 17, 13],
            "units_on_order": [0, 40, 70],
            "reorder_level": [10, 25, 25],
        }),
    }


@pytest.fixture
def revenue_tables() -> Dict[str, pl.DataFrame]:
    """
    Two customers, two orders, three order lines.

    Line revenue: 18*10*1.0 = 180, 10*5*0.9 = 45, 19*20*0.75 = 285.
    """
    return {
        **_dimensions(),
        "customers": pl.DataFrame({
            "customer_id": ["ALFKI", "BONAP"],
            "company_name": ["Alfreds Futterkiste", "Bon app'"],
            "country": ["Germany", "France"],
        }),
        "orders": pl.DataFrame({
            "order_id": [10248, 10249],
            "customer_id": ["ALFKI", "BONAP"],
            "employee_id": [1, 2],
            "ship_country": ["Germany", "France"],
            "order_date": [date(1997, 7, 4), date(1998, 1, 15)],
            "freight": [32.38, 11.61],
            "ship_via": [1, 2],
        }),
        "order_details": pl.DataFrame({
            "order_id": [10248, 10248, 10249],
            "product_id": [1, 3, 2],
            "unit_price": [18.0, 10.0, 19.0],
            "quantity": [10, 5, 20],
            "discount": [0.0, 0.1, 0.25],
        }),
    }


@pytest.fixture
def revenue_snapshot(revenue_tables) -> Snapshot:
    return load_snapshot(revenue_tables, snapshot_id="revenue-fixture")


@pytest.fixture
def history_snapshot() -> Snapshot:
    """
    Three customers ordering across 1996-1998.

    ALFKI orders only in 1996, BONAP in 1996 and 1998 (shipping to two
    countries), CHOPS in 1997 and 1998. No discounts.
    """
    tables = {
        **_dimensions(),
        "customers": pl.DataFrame({
            "customer_id": ["ALFKI", "BONAP", "CHOPS"],
            "company_name": ["Alfreds Futterkiste", "Bon app'", "Chop-suey Chinese"],
            "country": ["Germany", "France", "Switzerland"],
        }),
        "orders": pl.DataFrame({
            "order_id": [1, 2, 3, 4, 5, 6],
            "customer_id": ["ALFKI", "ALFKI", "BONAP", "BONAP", "CHOPS", "CHOPS"],
            "employee_id": [1, 1, 2, 2, 1, 2],
            "ship_country": ["Germany", "Germany", "France", "Belgium", "Switzerland", "Switzerland"],
            "order_date": [
                "1996-08-01", "1996-11-15", "1996-09-10",
                "1998-02-03", "1997-03-01", "1998-04-01",
            ],
            "freight": [10.0, 20.0, 5.5, 4.5, 7.0, 3.0],
            "ship_via": [1, 1, 2, 2, 1, 2],
        }),
        "order_details": pl.DataFrame({
            "order_id": [1, 2, 3, 4, 5, 6, 6],
            "product_id": [1, 2, 1, 3, 1, 2, 3],
            "unit_price": [10.0, 20.0, 10.0, 15.0, 10.0, 20.0, 15.0],
            "quantity": [10, 5, 3, 10, 20, 15, 2],
            "discount": [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        }),
    }
    return load_snapshot(tables, snapshot_id="history-fixture")


@pytest.fixture
def runner() -> ReportRunner:
    return ReportRunner(max_workers=4, parallel=True)


@pytest.fixture
def serial_runner() -> ReportRunner:
    return ReportRunner(parallel=False)
