"""Tests for the /v1/responses API."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import settings
from app.main import app as esg_app
from app.middleware.security import RequestBodySizeLimitMiddleware

pytestmark = pytest.mark.anyio


async def _submit(client: AsyncClient, year: int, data: dict) -> dict:
    resp = await client.post("/v1/responses", json={"financialYear": year, "data": data})
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestSaveResponse:
    async def test_save_returns_record_with_auto_calculated(self, client: AsyncClient) -> None:
        body = await _submit(
            client,
            2022,
            {"totalElectricityConsumption": 1000, "renewableElectricityConsumption": 250},
        )
        assert body["message"] == "Response saved successfully"
        record = body["response"]
        assert record["financialYear"] == 2022
        assert record["data"]["autoCalculated"]["renewableElectricityRatio"] == pytest.approx(25.0)
        assert "carbonIntensity" not in record["data"]["autoCalculated"]
        assert "userId" in record and "createdAt" in record

    async def test_resubmission_overwrites(self, client: AsyncClient) -> None:
        await _submit(client, 2024, {"totalEmployees": 10, "femaleEmployees": 2})
        await _submit(client, 2024, {"totalEmployees": 10, "femaleEmployees": 5})

        resp = await client.get("/v1/responses")
        responses = resp.json()["responses"]
        assert len(responses) == 1
        assert responses[0]["data"]["femaleEmployees"] == 5
        assert responses[0]["data"]["autoCalculated"]["diversityRatio"] == pytest.approx(50.0)

    @pytest.mark.parametrize("year", [1999, 2101])
    async def test_out_of_range_year_422(self, client: AsyncClient, year: int) -> None:
        resp = await client.post("/v1/responses", json={"financialYear": year, "data": {}})
        assert resp.status_code == 422
        assert "Financial year" in resp.json()["message"]

    async def test_string_year_is_not_coerced(self, client: AsyncClient) -> None:
        resp = await client.post("/v1/responses", json={"financialYear": "2024", "data": {}})
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    async def test_non_object_data_422(self, client: AsyncClient) -> None:
        resp = await client.post("/v1/responses", json={"financialYear": 2024, "data": [1, 2]})
        assert resp.status_code == 422

    async def test_negative_metric_422(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/v1/responses", json={"financialYear": 2024, "data": {"carbonEmissions": -1}}
        )
        assert resp.status_code == 422

    @pytest.mark.parametrize("literal", ["Infinity", "NaN", "-Infinity"])
    async def test_non_finite_metric_422(self, client: AsyncClient, literal: str) -> None:
        body = (
            '{"financialYear": 2024, "data": {"totalElectricityConsumption": '
            f"{literal}, \"renewableElectricityConsumption\": {literal}}}}}"
        )
        resp = await client.post(
            "/v1/responses", content=body, headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    async def test_huge_headcount_omits_diversity(self, client: AsyncClient) -> None:
        body = await _submit(client, 2024, {"totalEmployees": 1, "femaleEmployees": 10**400})
        assert "diversityRatio" not in body["response"]["data"]["autoCalculated"]


class TestReadDelete:
    async def test_get_by_year(self, client: AsyncClient) -> None:
        await _submit(client, 2023, {"carbonEmissions": 200, "totalRevenue": 1_000_000})
        resp = await client.get("/v1/responses/2023")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["autoCalculated"]["carbonIntensity"] == pytest.approx(0.0002)

    async def test_get_missing_year_404(self, client: AsyncClient) -> None:
        resp = await client.get("/v1/responses/2030")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Response not found for this year"

    async def test_list_empty(self, client: AsyncClient) -> None:
        resp = await client.get("/v1/responses")
        assert resp.status_code == 200
        assert resp.json() == {"responses": []}

    async def test_delete_then_404(self, client: AsyncClient) -> None:
        await _submit(client, 2023, {})
        resp = await client.delete("/v1/responses/2023")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Response deleted successfully"

        resp = await client.delete("/v1/responses/2023")
        assert resp.status_code == 404


class TestReportAndExport:
    async def test_report_trend_and_insights(self, client: AsyncClient) -> None:
        await _submit(
            client,
            2022,
            {"totalElectricityConsumption": 1000, "renewableElectricityConsumption": 250},
        )
        await _submit(
            client,
            2023,
            {"totalElectricityConsumption": 1000, "renewableElectricityConsumption": 600},
        )

        resp = await client.get("/v1/responses/report")
        assert resp.status_code == 200
        report = resp.json()

        assert report["latestYear"] == 2023
        trend = report["trends"]["renewable_electricity_ratio"]
        assert trend["trend"] == pytest.approx(140.0)
        assert trend["improvement"] is True
        assert report["trends"]["diversity_ratio"]["trend"] == "N/A"
        assert [i["title"] for i in report["insights"]] == ["Renewable Energy Leadership"]
        assert set(report["scores"]) == {"envScore", "socialScore", "govScore", "overallScore"}

    async def test_report_without_records(self, client: AsyncClient) -> None:
        resp = await client.get("/v1/responses/report")
        assert resp.status_code == 200
        report = resp.json()
        assert report["records"] == []
        assert report["grade"] == "N/A"
        assert "scores" not in report

    async def test_export_csv(self, client: AsyncClient) -> None:
        await _submit(client, 2023, {"totalRevenue": 500})
        resp = await client.get("/v1/responses/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "esg-responses.csv" in resp.headers["content-disposition"]
        assert resp.text.splitlines()[1].startswith("2023,")


class TestAuth:
    async def test_missing_token_rejected(self, anonymous_client: AsyncClient) -> None:
        resp = await anonymous_client.get("/v1/responses")
        assert resp.status_code in (401, 403)

    async def test_invalid_token_401(self, anonymous_client: AsyncClient) -> None:
        resp = await anonymous_client.get(
            "/v1/responses", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert resp.status_code == 401

    async def test_valid_token(
        self, anonymous_client: AsyncClient, auth_headers: dict[str, str]
    ) -> None:
        resp = await anonymous_client.get("/v1/responses", headers=auth_headers)
        assert resp.status_code == 200


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert resp.headers["x-api-version"] == "v1"
        assert resp.headers["x-content-type-options"] == "nosniff"


class TestBodySizeLimit:
    async def test_oversized_submission_413(self) -> None:
        limited = RequestBodySizeLimitMiddleware(esg_app, max_bytes=16)
        async with AsyncClient(
            transport=ASGITransport(app=limited), base_url="http://test"
        ) as ac:
            resp = await ac.post(
                "/v1/responses", json={"financialYear": 2024, "data": {"carbonEmissions": 1}}
            )
        assert resp.status_code == 413
        assert resp.json()["error"] == "http_413"


class TestCors:
    async def _preflight(self, client: AsyncClient, method: str):
        return await client.options(
            "/v1/responses/2024",
            headers={
                "Origin": settings.FRONTEND_URL,
                "Access-Control-Request-Method": method,
            },
        )

    async def test_delete_preflight_allowed(self, client: AsyncClient) -> None:
        resp = await self._preflight(client, "DELETE")
        assert resp.status_code == 200
        assert "DELETE" in resp.headers["access-control-allow-methods"]

    async def test_put_preflight_rejected(self, client: AsyncClient) -> None:
        resp = await self._preflight(client, "PUT")
        assert resp.status_code == 400
        assert "PUT" not in resp.headers["access-control-allow-methods"]
