from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from salesboard.api.dependencies import get_sales_dashboard_service
from salesboard.core.config import Settings
from salesboard.core.errors import UpstreamError
from salesboard.main import create_app

from conftest import FakeSalesSheetsRepository, FixedDateSalesDashboardService


def _names(items):
    return [item["advisor"] for item in items]


def test_sales_dashboard_defaults_to_month_to_date(client):
    response = client.get("/api/v1/sales")
    assert response.status_code == 200
    payload = response.json()
    data = payload["data"]

    assert data["filters"] == {
        "preset": "MTD",
        "start": "2026-02-01",
        "end": "2026-02-20",
        "unit": "All",
        "advisor": "All",
    }
    assert payload["meta"]["timeWindow"] == "MTD"
    assert payload["meta"]["asOfDate"] == "2026-02-20"
    assert payload["meta"]["source"] == "google_sheets"
    assert data["options"]["units"] == ["All", "Alpha", "Beta"]
    assert data["options"]["advisors"] == ["All", "Ana Cruz", "Bea Santos", "Carlo Reyes"]
    assert data["advisorDetail"] is None


def test_sales_dashboard_classifies_advisors(client):
    data = client.get("/api/v1/sales").json()["data"]
    statuses = data["producingAdvisors"]

    assert "advisors" not in statuses
    assert _names(statuses["producing"]) == ["Ana Cruz", "Dan Lim"]
    assert _names(statuses["pending"]) == ["Bea Santos"]
    assert _names(statuses["nonProducing"]) == ["Carlo Reyes"]
    assert statuses["producing"][0]["approved"]["fyc"] == 60_000
    assert statuses["producing"][0]["approved"]["caseCount"] == 2
    assert statuses["pending"][0]["open"]["fyc"] == 5_000

    assert data["team"]["approved"]["fyc"] == 61_000
    assert data["team"]["paid"]["fyc"] == 5_000
    assert data["leaderboards"]["advisorsByFYC"][0] == {"advisor": "Ana Cruz", "value": 60_000}
    assert data["leaderboards"]["unitsByFYC"][:2] == [
        {"unit": "Alpha", "value": 60_000},
        {"unit": "Unassigned", "value": 1_000},
    ]
    assert [point["date"] for point in data["trends"]["approvedByDay"]] == [
        "2026-02-05",
        "2026-02-07",
        "2026-02-10",
    ]


def test_sales_dashboard_builds_incentive_blocks(client):
    data = client.get("/api/v1/sales").json()["data"]

    ppb = data["ppbTracker"]
    assert ppb["quarter"] == "Q1 2026"
    assert ppb["months"] == ["Jan", "Feb", "Mar"]
    ana = ppb["rows"][0]
    assert ana["advisor"] == "Ana Cruz"
    assert ana["fyc"] == 70_000
    assert ana["cases"] == 3
    assert ana["ppbRate"] == 0.15
    assert ana["ccbRate"] == 0.05
    assert ana["projectedBonus"] == pytest.approx(14_000)

    premiums = data["monthlyExcellence"]["premiums"]
    assert data["monthlyExcellence"]["month"] == "2026-02"
    assert premiums["achieved"][0]["advisor"] == "Ana Cruz"
    assert premiums["achieved"][0]["tier"] == "Gold"

    cmp = data["specialLookouts"]["cmp"]
    assert cmp["asOfMonth"] == "2026-01"
    assert _names(cmp["watchOne"]) == ["Ana Cruz"]
    assert cmp["threePlus"] == []

    products = data["specialLookouts"]["products"]
    assert _names(products["aPlusSignature"]) == ["Ana Cruz"]
    assert _names(products["ascend"]) == ["Ana Cruz"]
    assert products["futureSafeUsd5Pay"] == []

    assert data["spartanMonitoring"]["totalAdvisors"] == 2
    assert data["spartanMonitoring"]["producingAdvisors"] == 1
    assert data["legacyMonitoring"]["activityRatio"] == 0
    assert data["mdrtTracker"]["rows"][0]["mdrtFyp"] == 120_000


def test_sales_dashboard_applies_unit_filter(client):
    data = client.get("/api/v1/sales", params={"unit": "Beta"}).json()["data"]
    statuses = data["producingAdvisors"]
    assert statuses["producing"] == []
    assert statuses["pending"] == []
    assert _names(statuses["nonProducing"]) == ["Carlo Reyes"]
    assert data["team"]["approved"]["fyc"] == 0
    assert data["spartanMonitoring"]["activityRatio"] == 0


def test_sales_dashboard_returns_advisor_detail(client):
    data = client.get("/api/v1/sales", params={"advisor": "ana cruz"}).json()["data"]
    detail = data["advisorDetail"]
    assert detail["advisor"] == "Ana Cruz"
    assert detail["approved"]["fyc"] == 60_000
    assert [item["product"] for item in detail["productMix"]] == ["A+ Signature", "Ascend"]
    assert len(detail["approvedByDay"]) == 2


def test_sales_dashboard_previous_month_preset(client):
    data = client.get("/api/v1/sales", params={"preset": "prev_month"}).json()["data"]
    assert data["filters"]["start"] == "2026-01-01"
    assert data["filters"]["end"] == "2026-01-31"
    assert _names(data["producingAdvisors"]["producing"]) == ["Ana Cruz"]
    assert data["team"]["approved"]["fyc"] == 10_000


def test_sales_dashboard_custom_range(client):
    response = client.get(
        "/api/v1/sales",
        params={"preset": "CUSTOM", "start": "2026-02-05", "end": "2026-02-05"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["filters"]["start"] == "2026-02-05"
    assert data["team"]["approved"]["fyc"] == 40_000


def test_sales_dashboard_rejects_malformed_custom_range(client):
    response = client.get(
        "/api/v1/sales",
        params={"preset": "CUSTOM", "start": "2026-02-30", "end": "2026-03-01"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_range"


def test_sales_dashboard_rejects_inverted_custom_range(client):
    response = client.get(
        "/api/v1/sales",
        params={"preset": "CUSTOM", "start": "2026-03-01", "end": "2026-02-01"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_range"
    assert error["details"] == {"start": "2026-03-01", "end": "2026-02-01"}


def test_sales_dashboard_rejects_unknown_preset(client):
    response = client.get("/api/v1/sales", params={"preset": "LAST_WEEK"})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


class _FailingRepository(FakeSalesSheetsRepository):
    def list_transactions(self):
        raise UpstreamError("Unable to read sheet 'New Business'")


def test_sales_dashboard_reports_upstream_failures():
    app = create_app()
    app.dependency_overrides[get_sales_dashboard_service] = lambda: FixedDateSalesDashboardService(
        repository=_FailingRepository(), settings=Settings()
    )
    response = TestClient(app).get("/api/v1/sales")
    assert response.status_code == 502
    assert response.json()["error"]["code"] == "upstream_error"
