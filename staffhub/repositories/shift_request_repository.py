"""근무조 변경 신청 레포지토리 — 근무조 변경 관련 DB 쿼리 담당.

Shift Request Repository — Handles shift change request queries.
The review transition is a conditional UPDATE on status='pending';
the one-pending-per-user rule lives in a partial unique index.
"""

from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.shift_request import SHIFT_STATUS_PENDING, ShiftRequest
from staffhub.models.user import User
from staffhub.repositories.base import BaseRepository, in_region


class ShiftRequestRepository(BaseRepository[ShiftRequest]):
    """근무조 변경 신청 레포지토리.

    Extends:
        BaseRepository[ShiftRequest]
    """

    def __init__(self) -> None:
        super().__init__(ShiftRequest)

    def _with_user_query(self) -> Select:
        """신청자 이름과 현재 근무조를 포함한 기본 조회 쿼리."""
        return (
            select(
                ShiftRequest,
                User.name.label("user_name"),
                User.shift.label("current_shift"),
            )
            .join(User, ShiftRequest.user_id == User.id)
            .execution_options(populate_existing=True)
        )

    async def list_for_user(self, db: AsyncSession, user_id: UUID) -> Sequence[Any]:
        """사용자 본인의 신청을 최신순으로 조회합니다."""
        result = await db.execute(
            self._with_user_query()
            .where(ShiftRequest.user_id == user_id)
            .order_by(ShiftRequest.created_at.desc())
        )
        return result.all()

    async def list_requests(
        self,
        db: AsyncSession,
        status: str | None = None,
        region: str | None = None,
        scope_region: bool = False,
    ) -> Sequence[Any]:
        """근무조 변경 신청 목록을 조회합니다.

        List shift requests newest first. status narrows only when given;
        scope_region restricts to requesters of the region (managers).
        """
        query: Select = self._with_user_query()
        if status:
            query = query.where(ShiftRequest.status == status)
        if scope_region:
            query = query.where(in_region(User.region, region))
        result = await db.execute(query.order_by(ShiftRequest.created_at.desc()))
        return result.all()

    async def get_with_user(self, db: AsyncSession, request_id: UUID) -> Any | None:
        """신청자 정보가 포함된 단일 신청을 조회합니다."""
        result = await db.execute(self._with_user_query().where(ShiftRequest.id == request_id))
        return result.one_or_none()

    async def get_with_requester(self, db: AsyncSession, request_id: UUID) -> tuple[ShiftRequest, User] | None:
        """신청과 신청자 ORM 객체를 함께 조회합니다."""
        result = await db.execute(
            select(ShiftRequest, User)
            .join(User, ShiftRequest.user_id == User.id)
            .where(ShiftRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    async def apply_review(
        self,
        db: AsyncSession,
        request_id: UUID,
        reviewer_id: UUID,
        status: str,
        region: str | None = None,
        scope_region: bool = False,
    ) -> int:
        """pending 신청에 대한 결정을 조건부 UPDATE로 반영합니다.

        Decide a pending request. For managers the requester's region is
        re-checked inside the UPDATE.

        Returns:
            int: 변경된 행 수 (Rows affected, 0 or 1)
        """
        conditions: list[Any] = [
            ShiftRequest.id == request_id,
            ShiftRequest.status == SHIFT_STATUS_PENDING,
        ]
        if scope_region:
            conditions.append(ShiftRequest.user_id.in_(select(User.id).where(in_region(User.region, region))))

        result = await db.execute(
            update(ShiftRequest)
            .where(*conditions)
            .values(
                status=status,
                reviewed_by=reviewer_id,
                reviewed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def set_user_shift(self, db: AsyncSession, user_id: UUID, shift: int) -> None:
        """사용자의 근무조를 덮어씁니다 (승인과 같은 트랜잭션)."""
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(shift=shift)
            .execution_options(synchronize_session=False)
        )
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
shift_request_repository: ShiftRequestRepository = ShiftRequestRepository()
