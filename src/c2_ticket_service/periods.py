"""Period keys (week, month, quarter) and their date boundaries.

Weeks follow ISO 8601: they start on Monday and belong to the ISO year of
their Thursday, so ``2025-W01`` starts on 2024-12-30.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

WEEK_KEY_PATTERN = re.compile(r"^(\d{4})-W(\d{2})$")
MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
QUARTER_KEY_PATTERN = re.compile(r"^(\d{4})-Q([1-4])$")

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
MONTH_ABBREVIATIONS = [name[:3] for name in MONTH_NAMES]


@dataclass(frozen=True)
class Period:
    """Half-open datetime range ``[start, end)``."""

    key: str
    start: datetime
    end: datetime

    @property
    def last_day(self) -> date:
        return (self.end - timedelta(days=1)).date()

    def label(self) -> str:
        return f"{self.start.date().isoformat()} to {self.last_day.isoformat()}"


def _month_start(year: int, month: int) -> datetime:
    # Normalizes month overflow/underflow (e.g. month 13 or 0)
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def parse_week_key(week_key: str) -> Period:
    match = WEEK_KEY_PATTERN.match(week_key or "")
    if not match:
        raise ValueError("Invalid week key. Use YYYY-Www (e.g. 2025-W07)")
    year, week = int(match.group(1)), int(match.group(2))
    try:
        monday = date.fromisocalendar(year, week, 1)
    except ValueError:
        raise ValueError(f"Week {week} does not exist in {year}")
    start = datetime.combine(monday, datetime.min.time())
    return Period(week_key, start, start + timedelta(days=7))


def parse_month_key(month_key: str) -> Period:
    match = MONTH_KEY_PATTERN.match(month_key or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError("Invalid month key. Use YYYY-MM (e.g. 2025-03)")
    year, month = int(match.group(1)), int(match.group(2))
    return Period(month_key, _month_start(year, month), _month_start(year, month + 1))


def parse_quarter_key(quarter_key: str) -> Period:
    match = QUARTER_KEY_PATTERN.match(quarter_key or "")
    if not match:
        raise ValueError("Invalid quarter key. Use YYYY-QX (e.g. 2025-Q4)")
    year, quarter = int(match.group(1)), int(match.group(2))
    first_month = (quarter - 1) * 3 + 1
    return Period(quarter_key, _month_start(year, first_month), _month_start(year, first_month + 3))


def previous_month(period: Period) -> Period:
    start = _month_start(period.start.year, period.start.month - 1)
    return Period(month_key_for(start), start, period.start)


def previous_quarter(period: Period) -> Period:
    start = _month_start(period.start.year, period.start.month - 3)
    return Period(quarter_key_for(start), start, period.start)


def week_key_for(value) -> str:
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key_for(value) -> str:
    return f"{value.year}-{value.month:02d}"


def quarter_key_for(value) -> str:
    return f"{value.year}-Q{(value.month - 1) // 3 + 1}"
