"""
Unit Tests - Snapshot Loading and Integrity
"""
from datetime import date

import polars as pl
import pytest

from northwind_analytics.data import TABLE_NAMES, Snapshot, load_snapshot, load_snapshot_from_directory
from northwind_analytics.errors import SchemaMismatchError, SnapshotIntegrityError, TypeMismatchError
from northwind_analytics.quality import DataValidator, ValidationStatus, validate_snapshot


class TestLoadSnapshot:
    """Tests for load_snapshot"""

    def test_casts_to_canonical_types(self):
        """ISO date strings become dates and integer freight becomes float"""
        snapshot = load_snapshot({
            "orders": {
                "order_id": [1],
                "customer_id": ["ALFKI"],
                "employee_id": [1],
                "ship_country": ["Germany"],
                "order_date": ["1997-07-04"],
                "freight": [32],
                "ship_via": [1],
            },
        })

        orders = snapshot.table("orders")
        assert orders.schema["order_date"] == pl.Date
        assert orders.schema["freight"] == pl.Float64
        assert orders["order_date"].to_list() == [date(1997, 7, 4)]

    def test_accepts_row_lists(self):
        snapshot = load_snapshot({
            "categories": [
                {"category_id": 1, "category_name": "Beverages"},
                {"category_id": 2, "category_name": "Condiments"},
            ],
            "shippers": [],
        })

        assert snapshot.row_counts() == {"categories": 2, "shippers": 0}
        assert snapshot.table("shippers").columns == ["shipper_id", "company_name"]

    def test_uncastable_column(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            load_snapshot({"categories": {"category_id": ["abc"], "category_name": ["x"]}})

        assert exc_info.value.column == "categories.category_id"

    def test_unknown_table(self):
        with pytest.raises(ValueError, match="Unknown tables"):
            load_snapshot({"territories": {"id": [1]}})

    def test_source_frames_not_mutated(self, revenue_tables):
        before = {name: df.clone() for name, df in revenue_tables.items()}

        load_snapshot(revenue_tables)

        for name, df in revenue_tables.items():
            assert df.equals(before[name])


class TestSnapshot:
    """Tests for Snapshot"""

    def test_empty_has_every_table(self):
        snapshot = Snapshot.empty()

        assert sorted(snapshot.table_names) == sorted(TABLE_NAMES)
        assert all(count == 0 for count in snapshot.row_counts().values())

    def test_tables_are_read_only(self, revenue_snapshot):
        with pytest.raises(TypeError):
            revenue_snapshot.tables["orders"] = pl.DataFrame()

    def test_missing_table_and_column(self, revenue_snapshot):
        missing = revenue_snapshot.missing({
            "orders": ["order_id", "ship_region"],
            "territories": ["territory_id"],
        })

        assert missing == {"orders": ["ship_region"], "territories": []}

    def test_require_raises(self):
        snapshot = load_snapshot({"customers": {"customer_id": ["A"], "company_name": ["x"], "country": ["UK"]}})

        with pytest.raises(SchemaMismatchError) as exc_info:
            snapshot.require({"orders": ["order_id"]}, report="top_customers_by_orders")

        assert exc_info.value.missing == {"orders": []}
        assert exc_info.value.report == "top_customers_by_orders"

    def test_for_year(self, revenue_snapshot):
        """Orders and their lines are restricted; dimensions are kept"""
        period = revenue_snapshot.for_year(1997)

        assert period.snapshot_id == "revenue-fixture@1997"
        assert period.table("orders")["order_id"].to_list() == [10248]
        assert period.table("order_details")["order_id"].to_list() == [10248, 10248]
        assert period.table("customers").height == 2
        # source snapshot is unchanged
        assert revenue_snapshot.table("orders").height == 2


class TestLoadFromDirectory:
    """Tests for load_snapshot_from_directory"""

    def test_reads_csv_and_parquet(self, tmp_path, revenue_tables):
        for name, df in revenue_tables.items():
            if name == "orders":
                df.write_parquet(tmp_path / f"{name}.parquet")
            else:
                df.write_csv(tmp_path / f"{name}.csv")

        snapshot = load_snapshot_from_directory(tmp_path, snapshot_id="disk")

        assert snapshot.snapshot_id == "disk"
        assert snapshot.row_counts()["order_details"] == 3
        assert snapshot.table("orders").schema["order_date"] == pl.Date
        assert snapshot.table("customers")["customer_id"].to_list() == ["ALFKI", "BONAP"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot_from_directory(tmp_path / "nope")


class TestValidateSnapshot:
    """Tests for snapshot integrity checks"""

    def test_valid_snapshot_passes(self, revenue_snapshot):
        result = validate_snapshot(revenue_snapshot)

        assert result.status == ValidationStatus.PASSED
        assert result.failed_checks == 0
        assert result.success_rate == 100.0
        assert result.started_at.tzinfo is not None
        assert result.completed_at >= result.started_at

    def test_discount_out_of_range(self, revenue_tables):
        revenue_tables["order_details"] = revenue_tables["order_details"].with_columns(
            pl.Series("discount", [0.0, 1.5, 0.25])
        )

        result = validate_snapshot(load_snapshot(revenue_tables))

        assert result.status == ValidationStatus.FAILED
        assert [c.name for c in result.failures] == ["order_details.range_discount"]

    def test_dangling_foreign_key(self, revenue_tables):
        revenue_tables["order_details"] = revenue_tables["order_details"].with_columns(
            pl.Series("product_id", [1, 3, 99])
        )

        with pytest.raises(SnapshotIntegrityError) as exc_info:
            validate_snapshot(load_snapshot(revenue_tables), raise_on_failure=True)

        assert exc_info.value.failed_checks == ["order_details.ref_integrity_product_id"]

    def test_non_positive_quantity(self):
        validator = DataValidator("order_details").add_range_check("quantity", min_value=0, exclusive_min=True)

        result = validator.validate(pl.DataFrame({"quantity": [1, 0, 5]}))

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_duplicate_composite_key(self):
        validator = DataValidator("order_details").add_unique_check(["order_id", "product_id"])

        result = validator.validate(pl.DataFrame({"order_id": [1, 1, 1], "product_id": [1, 2, 1]}))

        assert result.checks[0].failed_rows == 1
