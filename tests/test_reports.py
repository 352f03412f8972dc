"""Tests for saved reports."""

import pytest

from src.c2_report_service import ReportService
from src.core.errors import NotFoundError

PAYLOAD = {"summary": {"total": 12, "closed": 9}, "notes": "Stable week"}


class TestReportService:

    @pytest.mark.asyncio
    async def test_weekly_upsert_replaces_payload(self):
        first = await ReportService.upsert_weekly("2025-W10", "2025-03-03 to 2025-03-09", PAYLOAD)
        second = await ReportService.upsert_weekly("2025-W10", "2025-03-03 to 2025-03-09", {"notes": "Revised"})

        assert second["id"] == first["id"]
        assert (await ReportService.get_weekly("2025-W10"))["data"] == {"notes": "Revised"}
        assert len(await ReportService.list_weekly()) == 1

    @pytest.mark.asyncio
    async def test_weekly_list_newest_first(self):
        await ReportService.upsert_weekly("2025-W09", "w9", PAYLOAD)
        await ReportService.upsert_weekly("2025-W11", "w11", PAYLOAD)
        await ReportService.upsert_weekly("2025-W10", "w10", PAYLOAD)

        keys = [r["week_key"] for r in await ReportService.list_weekly()]

        assert keys == ["2025-W11", "2025-W10", "2025-W09"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "week_key,period,data",
        [(None, "p", PAYLOAD), ("2025-W10", "", PAYLOAD), ("2025-W10", "p", None)],
    )
    async def test_weekly_required_fields(self, week_key, period, data):
        with pytest.raises(ValueError, match="is required"):
            await ReportService.upsert_weekly(week_key, period, data)

    @pytest.mark.asyncio
    async def test_missing_weekly(self):
        with pytest.raises(NotFoundError):
            await ReportService.get_weekly("2025-W10")
        with pytest.raises(NotFoundError):
            await ReportService.delete_weekly("2025-W10")

    @pytest.mark.asyncio
    async def test_monthly_and_quarterly(self):
        await ReportService.upsert_monthly("2025-03", PAYLOAD)
        await ReportService.upsert_quarterly("2025-Q1", PAYLOAD)

        assert [r["month_key"] for r in await ReportService.list_monthly()] == ["2025-03"]
        assert (await ReportService.list_quarterly())[0]["data"] == PAYLOAD

        with pytest.raises(ValueError):
            await ReportService.upsert_quarterly("", PAYLOAD)


class TestReportEndpoints:

    def test_admin_writes_public_reads(self, client, admin):
        response = client.post(
            "/api/reports/weekly",
            json={"week_key": "2025-W10", "period": "2025-03-03 to 2025-03-09", "data": PAYLOAD},
            headers=admin.headers,
        )
        assert response.status_code == 200

        report = client.get("/api/reports/weekly/2025-W10").json()
        assert report["period"] == "2025-03-03 to 2025-03-09"
        assert report["data"] == PAYLOAD

        assert client.delete("/api/reports/weekly/2025-W10", headers=admin.headers).status_code == 204
        assert client.get("/api/reports/weekly/2025-W10").status_code == 404

    def test_regular_user_cannot_write(self, client, regular_user):
        response = client.post(
            "/api/reports/monthly", json={"month_key": "2025-03", "data": PAYLOAD}, headers=regular_user.headers
        )

        assert response.status_code == 403

    def test_missing_data_is_400(self, client, admin):
        response = client.post("/api/reports/quarterly", json={"quarter_key": "2025-Q1"}, headers=admin.headers)

        assert response.status_code == 400
        assert response.json() == {"error": "data is required"}
