"""
Unit Tests - Report API
"""
import pytest
from fastapi.testclient import TestClient

from northwind_analytics.data import load_snapshot
from northwind_analytics.serving import SnapshotRegistry
from northwind_analytics.serving.api import create_api_app


@pytest.fixture
def registry(revenue_snapshot, history_snapshot) -> SnapshotRegistry:
    registry = SnapshotRegistry()
    registry.register(revenue_snapshot, make_default=True)
    registry.register(history_snapshot)
    return registry


@pytest.fixture
def client(registry, serial_runner) -> TestClient:
    return TestClient(create_api_app(registry=registry, runner=serial_runner))


class TestHealthEndpoints:
    """Tests for health routes"""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["reports"] == 20
        assert body["snapshots"] == ["revenue-fixture", "history-fixture"]

    def test_live(self, client):
        assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    def test_not_ready_without_snapshot(self, serial_runner):
        client = TestClient(create_api_app(registry=SnapshotRegistry(), runner=serial_runner))

        response = client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert client.get("/api/v1/health").json()["status"] == "degraded"


class TestReportEndpoints:
    """Tests for report routes"""

    def test_catalog(self, client):
        response = client.get("/api/v1/reports")

        assert response.status_code == 200
        catalog = response.json()
        assert len(catalog) == 20
        assert catalog[0]["name"] == "top_customers_by_orders"
        assert catalog[0]["position"] == 1

    def test_run_on_default_snapshot(self, client):
        response = client.get("/api/v1/reports/category_revenue")

        assert response.status_code == 200
        body = response.json()
        assert body["snapshot_id"] == "revenue-fixture"
        assert body["rows"] == [
            {"category_name": "Beverages", "order_count": 2, "revenue": 465},
            {"category_name": "Condiments", "order_count": 1, "revenue": 45},
        ]

    def test_run_on_named_snapshot_and_year(self, client):
        response = client.get(
            "/api/v1/reports/category_revenue",
            params={"snapshot_id": "history-fixture", "year": 1996},
        )

        body = response.json()
        assert body["snapshot_id"] == "history-fixture@1996"
        assert body["rows"] == [{"category_name": "Beverages", "order_count": 3, "revenue": 230}]

    def test_unknown_report(self, client):
        response = client.get("/api/v1/reports/best_weather")

        assert response.status_code == 404
        assert response.json()["error"] == "UnknownReport"

    def test_unknown_snapshot(self, client):
        response = client.get("/api/v1/reports/category_revenue", params={"snapshot_id": "missing"})

        assert response.status_code == 404
        assert "missing" in response.json()["detail"]

    def test_schema_mismatch(self, client, registry):
        registry.register(load_snapshot(
            {"customers": {"customer_id": ["A"], "company_name": ["x"], "country": ["UK"]}},
            snapshot_id="partial",
        ))

        response = client.get("/api/v1/reports/top_customers_by_orders", params={"snapshot_id": "partial"})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "SchemaMismatch"
        assert body["details"]["missing"] == {"orders": []}

    def test_run_all(self, client):
        response = client.post("/api/v1/reports/run-all", params={"snapshot_id": "history-fixture"})

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 20
        assert body["churned_customers"]["row_count"] == 2

    def test_diff(self, client):
        response = client.get(
            "/api/v1/reports/category_revenue/diff",
            params={"baseline_year": 1997, "current_year": 1998},
        )

        assert response.status_code == 200
        body = response.json()
        beverages = next(r for r in body["rows"] if r["category_name"] == "Beverages")
        assert beverages["revenue_baseline"] == 180
        assert beverages["revenue_current"] == 285
        assert beverages["revenue_delta"] == 105

    def test_diff_requires_years(self, client):
        response = client.get("/api/v1/reports/category_revenue/diff")

        assert response.status_code == 422
