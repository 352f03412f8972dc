"""Service layer for saved weekly, monthly and quarterly reports."""

import logging
from typing import List, Dict, Any

from src.core.database import get_db, WeeklyReport, MonthlyReport, QuarterlyReport
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso

logger = logging.getLogger(__name__)


def _report_to_dict(report, key_field: str) -> Dict[str, Any]:
    data = {
        "id": report.id,
        key_field: getattr(report, key_field),
        "data": report.data,
        "created_at": to_iso(report.created_at),
        "updated_at": to_iso(report.updated_at),
    }
    if isinstance(report, WeeklyReport):
        data["period"] = report.period
    return data


def _require(value, message: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(message)


class ReportService:
    """Opaque report payloads stored per period key."""

    @staticmethod
    def _upsert(model, key_field: str, key: str, values: Dict[str, Any]) -> Dict[str, Any]:
        with get_db() as db:
            report = db.query(model).filter(getattr(model, key_field) == key).first()
            if report is None:
                report = model(**{key_field: key}, **values)
                db.add(report)
                action = "created"
            else:
                for field, value in values.items():
                    setattr(report, field, value)
                action = "updated"
            db.flush()
            logger.info(f"{model.__name__} {key} {action}")
            return _report_to_dict(report, key_field)

    @staticmethod
    def _list(model, key_field: str) -> List[Dict[str, Any]]:
        with get_db() as db:
            reports = db.query(model).order_by(getattr(model, key_field).desc()).all()
            return [_report_to_dict(r, key_field) for r in reports]

    # Weekly

    @staticmethod
    async def list_weekly() -> List[Dict[str, Any]]:
        return ReportService._list(WeeklyReport, "week_key")

    @staticmethod
    async def get_weekly(week_key: str) -> Dict[str, Any]:
        with get_db() as db:
            report = db.query(WeeklyReport).filter(WeeklyReport.week_key == week_key).first()
            if not report:
                raise NotFoundError("Report not found")
            return _report_to_dict(report, "week_key")

    @staticmethod
    async def upsert_weekly(week_key: str, period: str, data: Any) -> Dict[str, Any]:
        _require(week_key, "week_key is required")
        _require(period, "period is required")
        _require(data, "data is required")
        return ReportService._upsert(WeeklyReport, "week_key", week_key, {"period": period, "data": data})

    @staticmethod
    async def delete_weekly(week_key: str) -> None:
        with get_db() as db:
            report = db.query(WeeklyReport).filter(WeeklyReport.week_key == week_key).first()
            if not report:
                raise NotFoundError("Report not found")
            db.delete(report)
        logger.info(f"WeeklyReport {week_key} deleted")

    # Monthly

    @staticmethod
    async def list_monthly() -> List[Dict[str, Any]]:
        return ReportService._list(MonthlyReport, "month_key")

    @staticmethod
    async def upsert_monthly(month_key: str, data: Any) -> Dict[str, Any]:
        _require(month_key, "month_key is required")
        _require(data, "data is required")
        return ReportService._upsert(MonthlyReport, "month_key", month_key, {"data": data})

    # Quarterly

    @staticmethod
    async def list_quarterly() -> List[Dict[str, Any]]:
        return ReportService._list(QuarterlyReport, "quarter_key")

    @staticmethod
    async def upsert_quarterly(quarter_key: str, data: Any) -> Dict[str, Any]:
        _require(quarter_key, "quarter_key is required")
        _require(data, "data is required")
        return ReportService._upsert(QuarterlyReport, "quarter_key", quarter_key, {"data": data})
