"""Saved report routes (weekly, monthly, quarterly)."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_admin_user
from src.c2_report_service import ReportService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class WeeklyReportRequest(BaseModel):
    week_key: Optional[str] = Field(None, description="ISO week key, e.g. 2025-W10")
    period: Optional[str] = Field(None, description="Human readable period label")
    data: Optional[Any] = Field(None, description="Report payload")


class MonthlyReportRequest(BaseModel):
    month_key: Optional[str] = Field(None, description="Month key, e.g. 2025-03")
    data: Optional[Any] = Field(None, description="Report payload")


class QuarterlyReportRequest(BaseModel):
    quarter_key: Optional[str] = Field(None, description="Quarter key, e.g. 2025-Q1")
    data: Optional[Any] = Field(None, description="Report payload")


def create_report_router():
    """Create the report router. Reads are public, writes need an administrator.

    Returns:
        APIRouter: Configured router with report endpoints
    """
    router = APIRouter(tags=["reports"])

    @router.get("/reports/weekly")
    async def list_weekly():
        try:
            return await ReportService.list_weekly()
        except Exception as e:
            raise http_error(e, "list weekly reports")

    @router.get("/reports/weekly/{week_key}")
    async def get_weekly(week_key: str):
        try:
            return await ReportService.get_weekly(week_key)
        except Exception as e:
            raise http_error(e, "load weekly report")

    @router.post("/reports/weekly")
    async def upsert_weekly(request: WeeklyReportRequest, admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await ReportService.upsert_weekly(request.week_key, request.period, request.data)
        except Exception as e:
            raise http_error(e, "save weekly report")

    @router.delete("/reports/weekly/{week_key}", status_code=204)
    async def delete_weekly(week_key: str, admin: CurrentUser = Depends(get_admin_user)):
        try:
            await ReportService.delete_weekly(week_key)
        except Exception as e:
            raise http_error(e, "delete weekly report")
        return Response(status_code=204)

    @router.get("/reports/monthly")
    async def list_monthly():
        try:
            return await ReportService.list_monthly()
        except Exception as e:
            raise http_error(e, "list monthly reports")

    @router.post("/reports/monthly")
    async def upsert_monthly(request: MonthlyReportRequest, admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await ReportService.upsert_monthly(request.month_key, request.data)
        except Exception as e:
            raise http_error(e, "save monthly report")

    @router.get("/reports/quarterly")
    async def list_quarterly():
        try:
            return await ReportService.list_quarterly()
        except Exception as e:
            raise http_error(e, "list quarterly reports")

    @router.post("/reports/quarterly")
    async def upsert_quarterly(request: QuarterlyReportRequest, admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await ReportService.upsert_quarterly(request.quarter_key, request.data)
        except Exception as e:
            raise http_error(e, "save quarterly report")

    return router
