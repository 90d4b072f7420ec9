# backend/stockchart/services/ranges.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from stockchart.core.config import settings


class RangeToken(str, Enum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"


class Granularity(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def yahoo_interval(self) -> str:
        return {"hourly": "1h", "daily": "1d", "weekly": "1wk"}[self.value]

    @property
    def finnhub_resolution(self) -> str:
        return {"hourly": "60", "daily": "D", "weekly": "W"}[self.value]


DEFAULT_RANGE = RangeToken.ONE_YEAR


@dataclass(frozen=True)
class ResolvedRange:
    token: RangeToken
    start: datetime
    end: datetime
    granularity: Granularity
    time_unit: str  # x-axis unit hint: day | month | year

    @property
    def start_ts(self) -> int:
        return int(self.start.timestamp())

    @property
    def end_ts(self) -> int:
        return int(self.end.timestamp())


def parse_range_token(raw: Optional[str]) -> RangeToken:
    """Map a user supplied token to a RangeToken. Unknown tokens fall back to 1Y."""
    t = str(raw or "").strip().upper()
    try:
        return RangeToken(t)
    except ValueError:
        return DEFAULT_RANGE


def range_duration(token: RangeToken) -> timedelta:
    days = {
        RangeToken.ONE_MONTH: 30,
        RangeToken.THREE_MONTHS: 90,
        RangeToken.SIX_MONTHS: settings.SIX_MONTH_DAYS,
        RangeToken.ONE_YEAR: 365,
        RangeToken.FIVE_YEARS: 5 * 365,
    }[token]
    return timedelta(days=days)


def range_granularity(token: RangeToken) -> Granularity:
    if token == RangeToken.FIVE_YEARS:
        return Granularity.WEEKLY
    if token == RangeToken.ONE_MONTH:
        return Granularity(settings.ONE_MONTH_GRANULARITY)
    return Granularity.DAILY


def range_time_unit(token: RangeToken) -> str:
    if token == RangeToken.ONE_MONTH:
        return "day"
    if token == RangeToken.FIVE_YEARS:
        return "year"
    return "month"


def resolve_range(token: Optional[str] = None, now: Optional[datetime] = None) -> ResolvedRange:
    """
    Resolve a range token against `now` (UTC).
    Never fails: missing or unknown tokens resolve to the 1Y window.
    """
    rt = token if isinstance(token, RangeToken) else parse_range_token(token)
    end = now or datetime.now(tz=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return ResolvedRange(
        token=rt,
        start=end - range_duration(rt),
        end=end,
        granularity=range_granularity(rt),
        time_unit=range_time_unit(rt),
    )
