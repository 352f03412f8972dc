"""Saved period report models for TicketDesk.

The payloads are produced and edited by the dashboard; the API stores them
as opaque JSON keyed by period.
"""

from sqlalchemy import Column, String, Integer, DateTime, JSON

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


class WeeklyReport(Base):
    __tablename__ = "weekly_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    week_key = Column(String(10), unique=True, nullable=False)  # YYYY-Www
    period = Column(String(100), nullable=False)  # Human readable date range
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class MonthlyReport(Base):
    __tablename__ = "monthly_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    month_key = Column(String(7), unique=True, nullable=False)  # YYYY-MM
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class QuarterlyReport(Base):
    __tablename__ = "quarterly_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quarter_key = Column(String(7), unique=True, nullable=False)  # YYYY-Qn
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
