"""근태 서비스 — 출퇴근 비즈니스 로직.

Attendance Service — Check-in / check-out business logic.
The attendance day is the calendar day in ATTENDANCE_TIMEZONE: a user may
hold at most one open record per local day, and check-out closes the
open record of the same local day.
"""

from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.attendance import AttendanceRecord
from staffhub.models.user import ROLE_ADMIN, User
from staffhub.repositories.attendance_repository import attendance_repository
from staffhub.utils.dates import local_day_bounds
from staffhub.utils.exceptions import ValidationError

# 조회 기본/최대 행 수 — Default and maximum listing sizes
DEFAULT_MY_LIMIT: int = 50
DEFAULT_ALL_LIMIT: int = 100
MAX_LIMIT: int = 1000


def hours_between(check_in: datetime, check_out: datetime | None) -> float | None:
    """근무 시간(시간 단위)을 계산합니다. 퇴근 전이면 None."""
    if check_out is None:
        return None
    if check_in.tzinfo is None:
        check_in = check_in.replace(tzinfo=timezone.utc)
    if check_out.tzinfo is None:
        check_out = check_out.replace(tzinfo=timezone.utc)
    return round((check_out - check_in).total_seconds() / 3600, 2)


class AttendanceService:
    """근태 서비스.

    Attendance service for check-in, check-out and history listings.
    """

    async def check_in(self, db: AsyncSession, user: User) -> dict:
        """출근을 기록합니다.

        Record a check-in for the current local day.

        Raises:
            ValidationError: 오늘 이미 출근 상태 (Already checked in today)
        """
        window_start, window_end = local_day_bounds()
        open_record = await attendance_repository.get_open_in_window(db, user.id, window_start, window_end)
        if open_record is not None:
            raise ValidationError("Already checked in today")

        record: AttendanceRecord = await attendance_repository.create(
            db,
            {"user_id": user.id, "check_in_time": datetime.now(timezone.utc)},
        )
        return self.build_response(record, user.name)

    async def check_out(self, db: AsyncSession, user: User) -> dict:
        """퇴근을 기록합니다.

        Close today's open record.

        Raises:
            ValidationError: 오늘 열린 출근 기록 없음 (No open check-in today)
        """
        window_start, window_end = local_day_bounds()
        open_record = await attendance_repository.get_open_in_window(db, user.id, window_start, window_end)
        if open_record is None:
            raise ValidationError("No active check-in found for today")

        record: AttendanceRecord | None = await attendance_repository.update(
            db, open_record.id, {"check_out_time": datetime.now(timezone.utc)}
        )
        return self.build_response(record, user.name)

    async def today_status(self, db: AsyncSession, user: User) -> dict:
        """오늘 출퇴근 상태를 반환합니다."""
        window_start, window_end = local_day_bounds()
        record = await attendance_repository.get_latest_in_window(db, user.id, window_start, window_end)
        return {
            "checked_in": record is not None,
            "checked_out": record is not None and record.check_out_time is not None,
            "record": self.build_response(record, user.name) if record else None,
        }

    async def list_mine(
        self,
        db: AsyncSession,
        user: User,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = DEFAULT_MY_LIMIT,
    ) -> list[dict]:
        """본인 출퇴근 기록을 조회합니다."""
        window_start, window_end = self._window(start_date, end_date)
        rows = await attendance_repository.list_records(
            db,
            user_id=user.id,
            window_start=window_start,
            window_end=window_end,
            limit=min(limit, MAX_LIMIT),
        )
        return [self.build_response(row[0], row.user_name) for row in rows]

    async def list_all(
        self,
        db: AsyncSession,
        viewer: User,
        user_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = DEFAULT_ALL_LIMIT,
    ) -> list[dict]:
        """전체 출퇴근 기록을 조회합니다 — 매니저는 본인 지역만.

        List attendance across users; managers only see their region.
        """
        window_start, window_end = self._window(start_date, end_date)
        rows = await attendance_repository.list_records(
            db,
            user_id=user_id,
            window_start=window_start,
            window_end=window_end,
            region=viewer.region,
            scope_region=viewer.role != ROLE_ADMIN,
            limit=min(limit, MAX_LIMIT),
        )
        return [self.build_response(row[0], row.user_name) for row in rows]

    @staticmethod
    def _window(start_date: date | None, end_date: date | None) -> tuple[datetime | None, datetime | None]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must not be before start date")
        window_start = local_day_bounds(start_date)[0] if start_date else None
        window_end = local_day_bounds(end_date)[1] if end_date else None
        return window_start, window_end

    @staticmethod
    def build_response(record: AttendanceRecord, user_name: str | None = None) -> dict[str, Any]:
        """출퇴근 기록 응답 딕셔너리를 구성합니다."""
        return {
            "id": str(record.id),
            "user_id": str(record.user_id),
            "user_name": user_name,
            "check_in_time": record.check_in_time,
            "check_out_time": record.check_out_time,
            "hours_worked": hours_between(record.check_in_time, record.check_out_time),
        }


# 싱글턴 인스턴스 — Singleton instance
attendance_service: AttendanceService = AttendanceService()
