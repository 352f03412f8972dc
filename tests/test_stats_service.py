"""Tests for dashboard statistics."""

from datetime import datetime
from types import SimpleNamespace

import pytest
import pytest_asyncio

from src.c2_ticket_service import TicketService, TicketStatsService
from src.c2_ticket_service.stats_service import root_cause_breakdown


@pytest_asyncio.fixture
async def seeded_tickets(admin):
    """Four tickets in March 2025 (three in ISO week 10) and one in February."""
    rows = [
        ("Login broken", datetime(2025, 3, 3, 10), "correcao_tecnica", "alta", "pendente"),
        ("How to export", datetime(2025, 3, 5, 9), "orientacao", "media", "fechado"),
        ("Timeout", datetime(2025, 3, 8, 16), "erro_temporario", "baixa", "aberto"),
        ("Access request", datetime(2025, 3, 10, 8), "outros", "media", "aberto"),
        ("New report", datetime(2025, 2, 15, 11), "melhorias", "alta", "fechado"),
    ]
    for title, registered, ticket_type, priority, status in rows:
        await TicketService.create_ticket(
            {
                "title": title,
                "registration_date": registered,
                "type": ticket_type,
                "priority": priority,
                "status": status,
            },
            admin.id,
        )
    return rows


class TestWeeklyStats:

    @pytest.mark.asyncio
    async def test_summary(self, seeded_tickets):
        stats = await TicketStatsService.weekly_stats("2025-W10")

        assert stats["period"] == "2025-03-03 to 2025-03-09"
        assert stats["summary"] == {
            "total": 3,
            "closed": 1,
            "pending": 1,
            "open": 1,
            "resolution_rate": 33.3,
            "critical_count": 1,
        }
        assert stats["by_priority"] == {"alta": 1, "media": 1, "baixa": 1}
        assert [t["title"] for t in stats["critical_pending"]] == ["Login broken"]

    @pytest.mark.asyncio
    async def test_by_day_counts_every_ticket(self, seeded_tickets):
        stats = await TicketStatsService.weekly_stats("2025-W10")

        by_day = {d["day"]: d for d in stats["by_day"]}
        assert list(by_day) == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert by_day["Mon"]["opened"] == 1
        assert by_day["Wed"] == {"day": "Wed", "opened": 1, "closed": 1}
        assert by_day["Sat"]["opened"] == 1
        assert sum(d["opened"] for d in stats["by_day"]) == stats["summary"]["total"]

    @pytest.mark.asyncio
    async def test_empty_week(self, seeded_tickets):
        stats = await TicketStatsService.weekly_stats("2024-W01")

        assert stats["summary"]["total"] == 0
        assert stats["summary"]["resolution_rate"] == 0.0


class TestMonthStats:

    @pytest.mark.asyncio
    async def test_month_with_variation(self, seeded_tickets):
        stats = await TicketStatsService.month_stats("2025-03")

        assert stats["month_name"] == "March 2025"
        assert stats["summary"]["total"] == 4
        assert stats["summary"]["variation"] == 300.0
        assert stats["by_week"] == [
            {"week": "Week 1", "total": 2, "closed": 1, "pending": 1},
            {"week": "Week 2", "total": 2, "closed": 0, "pending": 0},
        ]

    @pytest.mark.asyncio
    async def test_no_previous_month_means_no_variation(self, seeded_tickets):
        stats = await TicketStatsService.month_stats("2025-02")

        assert stats["summary"]["total"] == 1
        assert stats["summary"]["variation"] == 0.0


class TestQuarterlyStats:

    @pytest.mark.asyncio
    async def test_quarter(self, seeded_tickets):
        stats = await TicketStatsService.quarterly_stats("2025-Q1")

        assert stats["period"] == "Q1 2025 (Jan-Mar)"
        assert stats["period_dates"] == "2025-01-01 to 2025-03-31"
        assert stats["summary"]["total"] == 5
        assert stats["root_cause"][0] == {"name": "Software (Bug)", "value": 40, "count": 2}
        assert sum(item["value"] for item in stats["root_cause"]) == 100
        assert "software bugs" in stats["analysis"]

    def test_breakdown_always_adds_up_to_100(self):
        tickets = [SimpleNamespace(type=t) for t in ("correcao_tecnica", "orientacao", "erro_temporario")]

        breakdown = root_cause_breakdown(tickets)

        assert sorted(item["value"] for item in breakdown) == [33, 33, 34]
        assert sum(item["value"] for item in breakdown) == 100

    def test_unknown_type_falls_back_to_other(self):
        breakdown = root_cause_breakdown([SimpleNamespace(type=None)])

        assert breakdown == [{"name": "Outros", "value": 100, "count": 1}]


class TestOverviewAndPeriods:

    @pytest.mark.asyncio
    async def test_overview(self, seeded_tickets):
        overview = await TicketStatsService.overview()

        assert overview["total"] == 5
        assert overview["closed"] == 2
        assert overview["open"] == 2
        assert overview["resolution_rate"] == 40.0
        assert overview["by_type"]["orientacao"] == 1

    @pytest.mark.asyncio
    async def test_monthly_evolution(self, seeded_tickets):
        evolution = await TicketStatsService.monthly_evolution()

        assert evolution == [
            {"month": "2025-02", "total": 1, "closed": 1, "pending": 0},
            {"month": "2025-03", "total": 4, "closed": 1, "pending": 1},
        ]

    @pytest.mark.asyncio
    async def test_critical_tickets(self, seeded_tickets):
        critical = await TicketStatsService.critical_tickets()

        assert [t["title"] for t in critical] == ["Login broken"]

    @pytest.mark.asyncio
    async def test_available_periods(self, seeded_tickets):
        periods = await TicketStatsService.available_periods()

        assert periods["weeks"] == ["2025-W11", "2025-W10", "2025-W07"]
        assert periods["months"] == ["2025-03", "2025-02"]
        assert await TicketStatsService.available_quarters() == {"quarters": ["2025-Q1"]}
