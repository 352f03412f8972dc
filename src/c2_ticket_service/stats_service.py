"""Dashboard statistics computed from tickets."""

import logging
import math
from collections import Counter
from typing import List, Dict, Any

from sqlalchemy import func

from src.core.database import get_db, Ticket
from src.c1_ticket_enums import TicketPriority, TicketStatus, root_cause_for
from src.c2_ticket_service.periods import (
    MONTH_ABBREVIATIONS,
    MONTH_NAMES,
    Period,
    month_key_for,
    parse_month_key,
    parse_quarter_key,
    parse_week_key,
    previous_month,
    previous_quarter,
    quarter_key_for,
    week_key_for,
)
from src.c2_ticket_service.ticket_service import ticket_to_dict

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
TOP_TYPES_LIMIT = 5


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def _variation(current: int, previous: int) -> float:
    return round((current - previous) / previous * 100, 1) if previous else 0.0


def _priority_counts(tickets: List[Ticket]) -> Dict[str, int]:
    counts = Counter(t.priority for t in tickets)
    return {
        TicketPriority.ALTA.value: counts[TicketPriority.ALTA.value],
        TicketPriority.MEDIA.value: counts[TicketPriority.MEDIA.value],
        TicketPriority.BAIXA.value: counts[TicketPriority.BAIXA.value],
    }


def _top_types(by_type: Dict[str, int]) -> List[Dict[str, Any]]:
    ranked = sorted(by_type.items(), key=lambda item: item[1], reverse=True)
    return [{"type": t, "count": c} for t, c in ranked[:TOP_TYPES_LIMIT]]


def _is_critical(ticket: Ticket) -> bool:
    return ticket.status == TicketStatus.PENDENTE.value and ticket.priority == TicketPriority.ALTA.value


def root_cause_breakdown(tickets: List[Ticket]) -> List[Dict[str, Any]]:
    """
    Percentage of tickets per root cause, largest first.

    Percentages are rounded and the largest share absorbs the rounding
    difference so the values always add up to 100.
    """
    total = len(tickets)
    if not total:
        return []

    counts = Counter(root_cause_for(t.type) for t in tickets)
    breakdown = [
        {"name": name, "value": round(count / total * 100), "count": count}
        for name, count in counts.items()
    ]
    breakdown.sort(key=lambda item: item["value"], reverse=True)

    difference = 100 - sum(item["value"] for item in breakdown)
    if difference:
        breakdown[0]["value"] += difference
    return breakdown


def root_cause_analysis(breakdown: List[Dict[str, Any]]) -> str:
    if not breakdown:
        return ""
    top = breakdown[0]
    if top["name"] == "Software (Bug)":
        return (
            f"Most incidents ({top['value']}%) are caused by software bugs, which justifies "
            f"focusing the development team on stability fixes in the next cycle."
        )
    if top["name"] == "Infraestrutura":
        return (
            f"Infrastructure problems account for {top['value']}% of incidents, pointing to "
            f"the need to invest in environment stability."
        )
    if top["name"] == "Usuário (Treinamento)":
        return (
            f"{top['value']}% of tickets are questions and guidance requests, an opportunity "
            f"to invest in training and documentation."
        )
    return f"{top['name']} accounts for {top['value']}% of incidents in the quarter."


class TicketStatsService:
    """Aggregations behind the weekly, monthly and quarterly dashboards."""

    @staticmethod
    def _tickets_in(db, period: Period) -> List[Ticket]:
        return (
            db.query(Ticket)
            .filter(Ticket.registration_date >= period.start, Ticket.registration_date < period.end)
            .order_by(Ticket.registration_date.asc(), Ticket.id.asc())
            .all()
        )

    @staticmethod
    def _count_in(db, period: Period) -> int:
        return (
            db.query(func.count(Ticket.id))
            .filter(Ticket.registration_date >= period.start, Ticket.registration_date < period.end)
            .scalar()
        )

    @staticmethod
    def _registration_dates(db) -> List:
        rows = (
            db.query(Ticket.registration_date)
            .filter(Ticket.registration_date.isnot(None))
            .order_by(Ticket.registration_date.desc())
            .all()
        )
        return [row.registration_date for row in rows]

    @staticmethod
    async def overview() -> Dict[str, Any]:
        """Global counts and distributions by status, type and priority."""
        with get_db() as db:
            def grouped(column) -> Dict[str, int]:
                return {value: count for value, count in db.query(column, func.count(Ticket.id)).group_by(column).all()}

            by_status = grouped(Ticket.status)
            total = sum(by_status.values())
            closed = by_status.get(TicketStatus.FECHADO.value, 0)
            return {
                "total": total,
                "pending": by_status.get(TicketStatus.PENDENTE.value, 0),
                "open": by_status.get(TicketStatus.ABERTO.value, 0),
                "closed": closed,
                "resolution_rate": _rate(closed, total),
                "by_status": by_status,
                "by_type": grouped(Ticket.type),
                "by_priority": grouped(Ticket.priority),
            }

    @staticmethod
    async def monthly_evolution() -> List[Dict[str, Any]]:
        """Tickets per registration month with closed and pending counts, oldest first."""
        with get_db() as db:
            rows = (
                db.query(Ticket.registration_date, Ticket.status)
                .filter(Ticket.registration_date.isnot(None))
                .all()
            )

        by_month: Dict[str, Dict[str, int]] = {}
        for registration_date, status in rows:
            bucket = by_month.setdefault(
                month_key_for(registration_date), {"total": 0, "closed": 0, "pending": 0}
            )
            bucket["total"] += 1
            if status == TicketStatus.FECHADO.value:
                bucket["closed"] += 1
            elif status == TicketStatus.PENDENTE.value:
                bucket["pending"] += 1

        return [{"month": month, **counts} for month, counts in sorted(by_month.items())]

    @staticmethod
    async def critical_tickets() -> List[Dict[str, Any]]:
        """Pending high-priority tickets, most recently registered first."""
        with get_db() as db:
            tickets = (
                db.query(Ticket)
                .filter(
                    Ticket.status == TicketStatus.PENDENTE.value,
                    Ticket.priority == TicketPriority.ALTA.value,
                )
                .order_by(Ticket.registration_date.desc(), Ticket.id.desc())
                .all()
            )
            return [ticket_to_dict(t) for t in tickets]

    @staticmethod
    async def weekly_stats(week_key: str) -> Dict[str, Any]:
        """Statistics for one ISO week (``YYYY-Www``)."""
        period = parse_week_key(week_key)

        with get_db() as db:
            tickets = TicketStatsService._tickets_in(db, period)

            total = len(tickets)
            statuses = Counter(t.status for t in tickets)
            by_type = dict(Counter(t.type for t in tickets))
            critical = [t for t in tickets if _is_critical(t)]

            by_day = {label: {"day": label, "opened": 0, "closed": 0} for label in WEEKDAY_LABELS}
            for t in tickets:
                entry = by_day[WEEKDAY_LABELS[t.registration_date.weekday()]]
                entry["opened"] += 1
                if t.status == TicketStatus.FECHADO.value:
                    entry["closed"] += 1

            logger.debug(f"Weekly stats for {week_key}: {total} tickets")
            return {
                "week_key": week_key,
                "period": period.label(),
                "summary": {
                    "total": total,
                    "closed": statuses[TicketStatus.FECHADO.value],
                    "pending": statuses[TicketStatus.PENDENTE.value],
                    "open": statuses[TicketStatus.ABERTO.value],
                    "resolution_rate": _rate(statuses[TicketStatus.FECHADO.value], total),
                    "critical_count": len(critical),
                },
                "by_priority": _priority_counts(tickets),
                "by_type": by_type,
                "by_day": list(by_day.values()),
                "top_types": _top_types(by_type),
                "critical_pending": [ticket_to_dict(t) for t in critical],
                "tickets": [ticket_to_dict(t) for t in tickets],
            }

    @staticmethod
    async def month_stats(month_key: str) -> Dict[str, Any]:
        """Statistics for one month (``YYYY-MM``) compared with the previous month."""
        period = parse_month_key(month_key)

        with get_db() as db:
            tickets = TicketStatsService._tickets_in(db, period)
            previous_total = TicketStatsService._count_in(db, previous_month(period))

            total = len(tickets)
            statuses = Counter(t.status for t in tickets)
            by_type = dict(Counter(t.type for t in tickets))
            critical = [t for t in tickets if _is_critical(t)]

            by_week: Dict[int, Dict[str, Any]] = {}
            for t in tickets:
                week_of_month = math.ceil(t.registration_date.day / 7)
                entry = by_week.setdefault(
                    week_of_month,
                    {"week": f"Week {week_of_month}", "total": 0, "closed": 0, "pending": 0},
                )
                entry["total"] += 1
                if t.status == TicketStatus.FECHADO.value:
                    entry["closed"] += 1
                elif t.status == TicketStatus.PENDENTE.value:
                    entry["pending"] += 1

            return {
                "month_key": month_key,
                "month_name": f"{MONTH_NAMES[period.start.month - 1]} {period.start.year}",
                "period": period.label(),
                "summary": {
                    "total": total,
                    "closed": statuses[TicketStatus.FECHADO.value],
                    "pending": statuses[TicketStatus.PENDENTE.value],
                    "resolution_rate": _rate(statuses[TicketStatus.FECHADO.value], total),
                    "critical_count": len(critical),
                    "variation": _variation(total, previous_total),
                },
                "by_priority": _priority_counts(tickets),
                "by_type": by_type,
                "by_week": [by_week[k] for k in sorted(by_week)],
                "top_types": _top_types(by_type),
                "critical_pending": [ticket_to_dict(t) for t in critical],
            }

    @staticmethod
    async def available_periods() -> Dict[str, List[str]]:
        """Week and month keys that have at least one ticket, newest first."""
        with get_db() as db:
            dates = TicketStatsService._registration_dates(db)
        return {
            "weeks": sorted({week_key_for(d) for d in dates}, reverse=True),
            "months": sorted({month_key_for(d) for d in dates}, reverse=True),
        }

    @staticmethod
    async def quarterly_stats(quarter_key: str) -> Dict[str, Any]:
        """Quarter summary with the root-cause breakdown and its analysis text."""
        period = parse_quarter_key(quarter_key)

        with get_db() as db:
            tickets = TicketStatsService._tickets_in(db, period)
            previous_total = TicketStatsService._count_in(db, previous_quarter(period))

            total = len(tickets)
            statuses = Counter(t.status for t in tickets)
            breakdown = root_cause_breakdown(tickets)

            quarter = (period.start.month - 1) // 3 + 1
            first, last = period.start.month - 1, period.start.month + 1
            return {
                "quarter_key": quarter_key,
                "period": f"Q{quarter} {period.start.year} ({MONTH_ABBREVIATIONS[first]}-{MONTH_ABBREVIATIONS[last]})",
                "period_dates": period.label(),
                "summary": {
                    "total": total,
                    "closed": statuses[TicketStatus.FECHADO.value],
                    "pending": statuses[TicketStatus.PENDENTE.value],
                    "resolution_rate": _rate(statuses[TicketStatus.FECHADO.value], total),
                    "variation": _variation(total, previous_total),
                },
                "by_type": dict(Counter(t.type for t in tickets)),
                "root_cause": breakdown,
                "analysis": root_cause_analysis(breakdown),
            }

    @staticmethod
    async def available_quarters() -> Dict[str, List[str]]:
        with get_db() as db:
            dates = TicketStatsService._registration_dates(db)
        return {"quarters": sorted({quarter_key_for(d) for d in dates}, reverse=True)}
