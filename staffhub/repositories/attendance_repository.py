"""근태 레포지토리 — 출퇴근 기록 관련 DB 쿼리 담당.

Attendance Repository — Handles check-in/check-out record queries.
"Today" is always a [start, end) UTC window computed from the
attendance timezone by the caller.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.attendance import AttendanceRecord
from staffhub.models.user import User
from staffhub.repositories.base import BaseRepository, in_region


class AttendanceRepository(BaseRepository[AttendanceRecord]):
    """근태 레포지토리.

    Extends:
        BaseRepository[AttendanceRecord]
    """

    def __init__(self) -> None:
        super().__init__(AttendanceRecord)

    async def get_open_in_window(
        self,
        db: AsyncSession,
        user_id: UUID,
        window_start: datetime,
        window_end: datetime,
    ) -> AttendanceRecord | None:
        """구간 내 퇴근하지 않은 기록을 조회합니다.

        Latest record without check-out whose check-in falls in the window.
        """
        result = await db.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.check_out_time.is_(None),
                AttendanceRecord.check_in_time >= window_start,
                AttendanceRecord.check_in_time < window_end,
            )
            .order_by(AttendanceRecord.check_in_time.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest_in_window(
        self,
        db: AsyncSession,
        user_id: UUID,
        window_start: datetime,
        window_end: datetime,
    ) -> AttendanceRecord | None:
        """구간 내 가장 최근 기록을 조회합니다."""
        result = await db.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.check_in_time >= window_start,
                AttendanceRecord.check_in_time < window_end,
            )
            .order_by(AttendanceRecord.check_in_time.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_records(
        self,
        db: AsyncSession,
        user_id: UUID | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
        region: str | None = None,
        scope_region: bool = False,
        limit: int | None = None,
    ) -> Sequence[Any]:
        """출퇴근 기록을 사용자 이름과 함께 최신순으로 조회합니다.

        List records newest first with the user's name; each filter
        narrows only when provided.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 필터 (User filter)
            window_start: 출근 시각 하한, 포함 (Inclusive lower bound on check-in)
            window_end: 출근 시각 상한, 미포함 (Exclusive upper bound on check-in)
            region: 지역 필터 (Region filter, managers)
            scope_region: 지역 제한 적용 여부, 지역 없음은 빈 결과
                          (Apply the region filter; a null region matches nothing)
            limit: 최대 행 수 (Row limit)

        Returns:
            Sequence[Any]: (AttendanceRecord, user_name) 행 목록
        """
        query: Select = select(AttendanceRecord, User.name.label("user_name")).join(
            User, AttendanceRecord.user_id == User.id
        )
        if user_id is not None:
            query = query.where(AttendanceRecord.user_id == user_id)
        if window_start is not None:
            query = query.where(AttendanceRecord.check_in_time >= window_start)
        if window_end is not None:
            query = query.where(AttendanceRecord.check_in_time < window_end)
        if scope_region:
            query = query.where(in_region(User.region, region))
        query = query.order_by(AttendanceRecord.check_in_time.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return result.all()


# 싱글턴 인스턴스 — Singleton instance
attendance_repository: AttendanceRepository = AttendanceRepository()
