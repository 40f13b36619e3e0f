"""날짜 구간 유틸리티 — 겹침 판정.

Date range helpers shared by the vacation workflow and its queries:
the inclusive overlap predicate and attendance-day conversions.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from staffhub.config import settings


def overlap_clause(start_col, end_col, d1: date, d2: date) -> ColumnElement[bool]:
    """겹침 판정 SQL 조건식.

    SQL predicate matching rows whose [start_col, end_col] intersects [d1, d2]:
    the row contains d1, contains d2, or lies fully inside [d1, d2].
    """
    return or_(
        and_(start_col <= d1, end_col >= d1),
        and_(start_col <= d2, end_col >= d2),
        and_(start_col >= d1, end_col <= d2),
    )


def local_day_bounds(day: date | None = None) -> tuple[datetime, datetime]:
    """근태 기준 시간대의 하루를 UTC 구간으로 반환합니다.

    Return [start, end) of a local calendar day in ATTENDANCE_TIMEZONE as UTC datetimes.
    """
    tz = ZoneInfo(settings.ATTENDANCE_TIMEZONE)
    if day is None:
        day = datetime.now(tz).date()
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = start_local + timedelta(days=1)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def to_local(value: datetime | None) -> datetime | None:
    """UTC 시각을 근태 기준 시간대로 변환합니다 (naive 값은 UTC로 간주)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(settings.ATTENDANCE_TIMEZONE))
