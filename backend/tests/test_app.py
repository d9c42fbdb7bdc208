"""
Tests for the Flask API.

Run with: cd backend && python -m pytest tests/ -v
"""

import sys
from pathlib import Path

# Ensure backend directory is on path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from app import app
from calculation_store import CalculationStore


@pytest.fixture
def client(tmp_path):
    app.config["TESTING"] = True
    original_store = app.config["CALCULATION_STORE"]
    app.config["CALCULATION_STORE"] = CalculationStore(tmp_path / "api.db")
    with app.test_client() as client:
        yield client
    app.config["CALCULATION_STORE"] = original_store


def calc_body(**overrides):
    body = {"gross_income": 50_000, "currency_code": "GBP", "jurisdiction_code": "UK"}
    body.update(overrides)
    return body


class TestBasicEndpoints:
    def test_health(self, client):
        """Health check answers ok."""
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"

    def test_unknown_route_is_json_404(self, client):
        """Unknown routes return a JSON 404."""
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_wrong_method_is_json_405(self, client):
        """GET on a POST endpoint returns a JSON 405."""
        resp = client.get("/api/tax/calculate")
        assert resp.status_code == 405
        assert "error" in resp.get_json()

    def test_jurisdictions(self, client):
        """All ten jurisdictions are listed."""
        data = client.get("/api/jurisdictions").get_json()
        assert data["count"] == 10
        assert {j["code"] for j in data["jurisdictions"]} >= {"US", "IN", "SG"}

    def test_jurisdiction_detail(self, client):
        """Detail shows brackets and deductions; the code is case-insensitive."""
        data = client.get("/api/jurisdictions/fr").get_json()
        assert data["code"] == "FR"
        assert data["brackets"][0]["rate"] == 0.0
        assert data["deductions"][0]["name"] == "professional_abatement"

    def test_unknown_jurisdiction_detail(self, client):
        """An unknown jurisdiction is a 404 naming the code."""
        resp = client.get("/api/jurisdictions/XX")
        assert resp.status_code == 404
        assert resp.get_json()["jurisdiction_code"] == "XX"


class TestCalculateEndpoint:
    def test_calculate(self, client):
        """UK at £50K returns the full breakdown with allocations."""
        resp = client.post("/api/tax/calculate", json=calc_body())
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["jurisdiction_code"] == "UK"
        assert data["federal_or_national_tax"] == pytest.approx(7_486)
        assert data["net_income"] == pytest.approx(50_000 - data["total_tax"])
        assert len(data["allocations"]) == 3

    def test_jurisdiction_params(self, client):
        """jurisdiction_params reach the strategy."""
        resp = client.post(
            "/api/tax/calculate",
            json=calc_body(jurisdiction_params={"student_loan_plan": "plan2"}),
        )
        assert resp.get_json()["other_deductions"] > 0

    def test_invalid_income_is_400(self, client):
        """Negative income is a 400."""
        resp = client.post("/api/tax/calculate", json=calc_body(gross_income=-10))
        assert resp.status_code == 400

    def test_currency_mismatch_is_400(self, client):
        """The wrong currency is a 400 naming the expected one."""
        resp = client.post("/api/tax/calculate", json=calc_body(currency_code="USD"))
        assert resp.status_code == 400
        assert "GBP" in resp.get_json()["error"]

    def test_bad_param_is_400(self, client):
        """A mistyped parameter is a 400."""
        resp = client.post("/api/tax/calculate", json=calc_body(jurisdiction_params={"is_scotland": "yes"}))
        assert resp.status_code == 400

    def test_nan_param_is_400(self, client):
        """A bare NaN token in jurisdiction_params is a 400, not a zero tax base."""
        body = (
            '{"gross_income": 5000000, "currency_code": "INR", "jurisdiction_code": "IN",'
            ' "jurisdiction_params": {"regime": "old", "section_80c": NaN}}'
        )
        resp = client.post("/api/tax/calculate", data=body, content_type="application/json")
        assert resp.status_code == 400
        assert "section_80c" in resp.get_json()["error"]

    def test_missing_field_is_400(self, client):
        """Missing required fields are a 400."""
        resp = client.post("/api/tax/calculate", json={"gross_income": 1_000})
        assert resp.status_code == 400

    def test_non_json_body_is_400(self, client):
        """A non-JSON body is a 400."""
        resp = client.post("/api/tax/calculate", data="not json", content_type="text/plain")
        assert resp.status_code == 400

    def test_fallback(self, client):
        """Unknown jurisdictions fall back and keep the requested code."""
        resp = client.post(
            "/api/tax/calculate",
            json={"gross_income": 50_000, "currency_code": "NOK", "jurisdiction_code": "NO"},
        )
        data = resp.get_json()
        assert resp.status_code == 200
        assert data["is_fallback"] is True
        assert data["jurisdiction_code"] == "NO"

    def test_unsupported_without_fallback_is_404(self, client):
        """With fallback disabled an unknown jurisdiction is a 404."""
        resp = client.post(
            "/api/tax/calculate",
            json={"gross_income": 50_000, "currency_code": "NOK", "jurisdiction_code": "NO", "allow_fallback": False},
        )
        assert resp.status_code == 404


class TestCompareEndpoint:
    def test_compare(self, client):
        """Variants come back in order with deltas against the base."""
        resp = client.post(
            "/api/tax/compare",
            json={
                "base": {
                    "gross_income": 1_000_000,
                    "currency_code": "INR",
                    "jurisdiction_code": "IN",
                    "jurisdiction_params": {"regime": "new"},
                },
                "variants": [
                    {"name": "old regime", "jurisdiction_params": {"regime": "old"}},
                    {"name": "raise", "gross_income": 1_500_000},
                ],
            },
        )
        assert resp.status_code == 200
        data = resp.get_json()
        assert [v["name"] for v in data["variants"]] == ["old regime", "raise"]
        raise_variant = data["variants"][1]
        assert raise_variant["delta"]["total_tax"] == pytest.approx(
            raise_variant["result"]["total_tax"] - data["base"]["total_tax"]
        )

    def test_requires_variants(self, client):
        """An empty variant list is a 400."""
        resp = client.post("/api/tax/compare", json={"base": calc_body(), "variants": []})
        assert resp.status_code == 400

    def test_rejects_unknown_variant_field(self, client):
        """Unknown variant fields are a 400 naming the field."""
        resp = client.post(
            "/api/tax/compare",
            json={"base": calc_body(), "variants": [{"name": "x", "salary": 1}]},
        )
        assert resp.status_code == 400
        assert "salary" in resp.get_json()["error"]

    def test_non_bool_variant_allow_fallback_is_400(self, client):
        """A variant's allow_fallback must be a real boolean."""
        resp = client.post(
            "/api/tax/compare",
            json={
                "base": calc_body(),
                "variants": [{"name": "norway", "jurisdiction_code": "NO", "currency_code": "NOK", "allow_fallback": "no"}],
            },
        )
        assert resp.status_code == 400
        assert "allow_fallback" in resp.get_json()["error"]


class TestSavedCalculations:
    def save(self, client, **overrides):
        resp = client.post("/api/calculations", json=calc_body(**overrides))
        assert resp.status_code == 201
        return resp.get_json()["calculation"]

    def test_save_and_get(self, client):
        """A saved calculation can be fetched by id."""
        saved = self.save(client, note="current job")
        assert saved["freeform_note"] == "current job"
        assert saved["jurisdiction"] == "UK"

        resp = client.get(f"/api/calculations/{saved['id']}")
        assert resp.status_code == 200
        assert resp.get_json() == saved

    def test_list_and_filter(self, client):
        """Listing filters by jurisdiction and honours limit."""
        self.save(client)
        self.save(client, gross_income=100_000, currency_code="AUD", jurisdiction_code="AU")

        assert client.get("/api/calculations").get_json()["count"] == 2
        au = client.get("/api/calculations?jurisdiction=au").get_json()
        assert [c["jurisdiction"] for c in au["calculations"]] == ["AU"]
        assert client.get("/api/calculations?limit=1").get_json()["count"] == 1

    def test_bad_limit_is_400(self, client):
        """A non-integer limit is a 400."""
        assert client.get("/api/calculations?limit=abc").status_code == 400

    def test_favorite(self, client):
        """Favorites can be set and filtered; unknown ids are 404."""
        saved = self.save(client)
        resp = client.put(f"/api/calculations/{saved['id']}/favorite", json={"is_favorite": True})
        assert resp.get_json()["is_favorite"] is True

        favorites = client.get("/api/calculations?favorites=true").get_json()
        assert [c["id"] for c in favorites["calculations"]] == [saved["id"]]

        assert client.put("/api/calculations/999/favorite", json={}).status_code == 404

    def test_delete(self, client):
        """Deleted calculations are gone; deleting twice is a 404."""
        saved = self.save(client)
        assert client.delete(f"/api/calculations/{saved['id']}").status_code == 200
        assert client.get(f"/api/calculations/{saved['id']}").status_code == 404
        assert client.delete(f"/api/calculations/{saved['id']}").status_code == 404

    def test_export(self, client):
        """Export returns CSV with the header row and saved notes."""
        self.save(client, note="exported")
        resp = client.get("/api/calculations/export")
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        text = resp.get_data(as_text=True)
        assert text.splitlines()[0].startswith("id,timestamp,jurisdiction")
        assert "exported" in text

    def test_invalid_note_is_400(self, client):
        """A non-string note is a 400."""
        resp = client.post("/api/calculations", json=calc_body(note=5))
        assert resp.status_code == 400
