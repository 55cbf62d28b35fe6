"""
Unit Tests - Report Catalog
"""
import polars as pl
import pytest

from northwind_analytics.data import load_snapshot
from northwind_analytics.errors import UnknownReportError
from northwind_analytics.reports import get_report, list_reports, report_names


def rows(serial_runner, name, snapshot, *columns):
    frame = serial_runner.run(name, snapshot).frame
    if columns:
        frame = frame.select(columns)
    return frame.rows()


class TestCatalog:
    """Tests for the report registry"""

    def test_twenty_reports_in_position_order(self):
        definitions = list_reports()

        assert len(definitions) == 20
        assert [d.position for d in definitions] == list(range(1, 21))
        assert definitions[0].name == "top_customers_by_orders"
        assert definitions[-1].name == "category_revenue"

    def test_names_are_unique(self):
        names = report_names()
        assert len(set(names)) == len(names)

    def test_every_report_declares_keys_and_requirements(self):
        for definition in list_reports():
            assert definition.key_columns, definition.name
            assert definition.requires, definition.name
            assert definition.description, definition.name

    def test_declared_metric_columns(self):
        assert get_report("customer_revenue_delta").metric_columns == (
            "revenue",
            "previous_year_revenue",
            "revenue_delta",
        )
        assert get_report("category_revenue").metric_columns is None

    def test_unknown_report(self):
        with pytest.raises(UnknownReportError) as exc_info:
            get_report("top_customers_by_mood")

        assert exc_info.value.code == "UnknownReport"
        assert "category_revenue" in exc_info.value.available


class TestCustomerReports:
    """Customer-level reports over the multi-year fixture"""

    def test_top_customers_by_orders(self, serial_runner, history_snapshot):
        """Ties on order count fall back to customer id"""
        assert rows(serial_runner, "top_customers_by_orders", history_snapshot, "customer_id", "order_count") == [
            ("ALFKI", 2),
            ("BONAP", 2),
            ("CHOPS", 2),
        ]

    def test_top_customers_limited_to_five(self, serial_runner):
        ids = [f"C{i}" for i in range(7)]
        snapshot = load_snapshot({
            "customers": {"customer_id": ids, "company_name": ids, "country": ["UK"] * 7},
            "orders": {"order_id": list(range(7)), "customer_id": ids},
        })

        result = serial_runner.run("top_customers_by_orders", snapshot)

        assert result.row_count == 5

    def test_multi_country_customers(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "multi_country_customers", history_snapshot) == [
            ("BONAP", "Bon app'", 2, "Belgium, France"),
        ]

    def test_churned_customers(self, serial_runner, history_snapshot):
        """Customers active in only one year are not churn candidates"""
        result = serial_runner.run("churned_customers", history_snapshot)

        assert result.frame["customer_id"].to_list() == ["BONAP", "CHOPS"]
        assert result.frame.row(0, named=True)["first_order_year"] == 1996
        assert result.frame.row(0, named=True)["last_order_year"] == 1998

    def test_customer_revenue_delta(self, serial_runner, history_snapshot):
        """1998 revenue compared with the previous active year"""
        assert rows(
            serial_runner,
            "customer_revenue_delta",
            history_snapshot,
            "customer_id",
            "revenue",
            "previous_year_revenue",
            "revenue_delta",
        ) == [
            ("CHOPS", 330, 200, 130),
            ("BONAP", 150, 30, 120),
        ]

    def test_customer_revenue_delta_first_year_compares_to_zero(self, serial_runner, revenue_snapshot):
        assert rows(
            serial_runner, "customer_revenue_delta", revenue_snapshot, "customer_id", "previous_year_revenue"
        ) == [("BONAP", 0)]

    def test_average_order_size(self, serial_runner, revenue_snapshot):
        assert rows(
            serial_runner, "average_order_size", revenue_snapshot, "customer_id", "order_count", "avg_units_per_order"
        ) == [
            ("BONAP", 1, 20.0),
            ("ALFKI", 1, 15.0),
        ]

    def test_average_order_value_by_country(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "average_order_value_by_country", revenue_snapshot) == [
            ("France", 1, 285.0),
            ("Germany", 1, 225.0),
        ]


class TestProductReports:
    """Product-level reports"""

    def test_top_product_by_category(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "top_product_by_category", history_snapshot) == [
            ("Beverages", "Chang", 400),
            ("Condiments", "Aniseed Syrup", 180),
        ]

    def test_top_product_ties_are_kept(self, serial_runner):
        snapshot = load_snapshot({
            "categories": {"category_id": [1], "category_name": ["Beverages"]},
            "products": {"product_id": [1, 2], "product_name": ["Chai", "Chang"], "category_id": [1, 1]},
            "order_details": {
                "order_id": [1, 2],
                "product_id": [1, 2],
                "unit_price": [10.0, 25.0],
                "quantity": [5, 2],
                "discount": [0.0, 0.0],
            },
        })

        assert rows(serial_runner, "top_product_by_category", snapshot, "product_name") == [("Chai",), ("Chang",)]

    def test_restock_products(self, serial_runner):
        """Stock plus units on order below the reorder level"""
        snapshot = load_snapshot({
            "products": {
                "product_id": [1, 2, 3],
                "product_name": ["Low", "Fine", "Exact"],
                "units_in_stock": [5, 10, 8],
                "units_on_order": [2, 0, 2],
                "reorder_level": [10, 5, 10],
            },
        })

        result = serial_runner.run("restock_products", snapshot)

        assert result.frame["product_name"].to_list() == ["Low"]
        assert result.frame["units_short"].to_list() == [3]

    def test_restock_nothing_to_order(self, serial_runner, history_snapshot):
        assert serial_runner.run("restock_products", history_snapshot).is_empty

    def test_product_customer_reach(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "product_customer_reach", history_snapshot, "product_name", "unique_customers") == [
            ("Chai", 3),
            ("Chang", 2),
            ("Aniseed Syrup", 2),
        ]

    def test_rarely_sold_products(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "rarely_sold_products", history_snapshot, "product_name", "order_count", "units_sold") == [
            ("Chang", 2, 20),
            ("Aniseed Syrup", 2, 12),
            ("Chai", 3, 33),
        ]

    def test_rarely_sold_excludes_ten_orders(self, serial_runner):
        snapshot = load_snapshot({
            "products": {"product_id": [1], "product_name": ["Chai"]},
            "order_details": {
                "order_id": list(range(10)),
                "product_id": [1] * 10,
                "unit_price": [1.0] * 10,
                "quantity": [1] * 10,
                "discount": [0.0] * 10,
            },
        })

        assert serial_runner.run("rarely_sold_products", snapshot).is_empty


class TestRevenueReports:
    """Category revenue reports"""

    def test_category_revenue(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "category_revenue", revenue_snapshot) == [
            ("Beverages", 2, 465),
            ("Condiments", 1, 45),
        ]

    def test_revenue_is_integer(self, serial_runner, revenue_snapshot):
        result = serial_runner.run("category_revenue", revenue_snapshot)
        assert result.frame.schema["revenue"] == pl.Int64

    def test_top_category_by_country(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "top_category_by_country", history_snapshot) == [
            ("France", "Condiments", 150),
            ("Germany", "Beverages", 200),
            ("Switzerland", "Beverages", 500),
        ]

    def test_monthly_category_revenue(self, serial_runner, history_snapshot):
        result = serial_runner.run("monthly_category_revenue", history_snapshot)

        assert result.row_count == 7
        assert result.frame.row(0) == ("Beverages", 1996, 8, 100)
        assert result.frame.row(-1) == ("Condiments", 1998, 4, 30)

    def test_average_discount_depth(self, serial_runner, revenue_snapshot):
        """Only discounted lines count; reported in percent"""
        assert rows(serial_runner, "average_discount_depth", revenue_snapshot) == [
            ("Beverages", 1, 25.0),
            ("Condiments", 1, 10.0),
        ]

    def test_average_discount_depth_without_discounts(self, serial_runner, history_snapshot):
        assert serial_runner.run("average_discount_depth", history_snapshot).is_empty


class TestOperationsReports:
    """Shipping, staff, supplier and shipper reports"""

    def test_international_shipments(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "international_shipments", history_snapshot) == [
            ("Germany", 2),
            ("Switzerland", 2),
            ("Belgium", 1),
            ("France", 1),
        ]

    def test_employee_country_reach(self, serial_runner, history_snapshot):
        assert rows(serial_runner, "employee_country_reach", history_snapshot) == [
            (2, "Andrew Fuller", 3, 3),
            (1, "Nancy Davolio", 2, 3),
        ]

    def test_top_employee_by_revenue(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "top_employee_by_revenue", revenue_snapshot) == [(2, "Andrew Fuller", 285)]

    def test_supplier_revenue(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "supplier_revenue", revenue_snapshot) == [
            (1, "Exotic Liquids", "UK", 465),
            (2, "New Orleans Cajun Delights", "USA", 45),
        ]

    def test_shipper_revenue(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "shipper_revenue", revenue_snapshot) == [
            (2, "United Package", 1, 285),
            (1, "Speedy Express", 1, 225),
        ]

    def test_freight_by_region(self, serial_runner, revenue_snapshot):
        assert rows(serial_runner, "freight_by_region", revenue_snapshot) == [
            ("Germany", 1, 32),
            ("France", 1, 12),
        ]

    def test_freight_halves_round_away_from_zero(self, serial_runner, history_snapshot):
        """5.5 -> 6 and 4.5 -> 5, not banker's rounding"""
        assert rows(serial_runner, "freight_by_region", history_snapshot, "ship_country", "total_freight") == [
            ("Germany", 30),
            ("Switzerland", 10),
            ("France", 6),
            ("Belgium", 5),
        ]

    def test_rounding_applies_to_total_not_rows(self, serial_runner):
        snapshot = load_snapshot({
            "orders": {"order_id": [1, 2], "ship_country": ["UK", "UK"], "freight": [10.25, 0.25]},
        })

        assert rows(serial_runner, "freight_by_region", snapshot, "total_freight") == [(11,)]
