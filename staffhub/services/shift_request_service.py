"""근무조 변경 서비스 — 근무조 변경 신청 비즈니스 로직.

Shift Request Service — Business logic for shift change requests.

Status Flow:
    pending → approved | rejected (decided once)

At most one pending request per user is enforced by a partial unique
index; the resulting IntegrityError is translated into a ConflictError.
Approval rewrites users.shift in the same transaction.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.shift_request import (
    SHIFT_STATUS_APPROVED,
    SHIFT_STATUS_PENDING,
    SHIFT_STATUS_REJECTED,
    ShiftRequest,
)
from staffhub.models.user import ROLE_ADMIN, SHIFTS, User
from staffhub.repositories.shift_request_repository import shift_request_repository
from staffhub.utils.exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

REVIEW_DECISIONS: tuple[str, ...] = (SHIFT_STATUS_APPROVED, SHIFT_STATUS_REJECTED)
SHIFT_STATUSES: tuple[str, ...] = (SHIFT_STATUS_PENDING, SHIFT_STATUS_APPROVED, SHIFT_STATUS_REJECTED)


class ShiftRequestService:
    """근무조 변경 서비스.

    Shift change request creation, listing and review.
    """

    async def create_request(self, db: AsyncSession, user: User, requested_shift: int | None) -> dict:
        """근무조 변경을 신청합니다.

        Create a pending shift change request.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 신청자 (Requesting user)
            requested_shift: 희망 근무조 (Requested shift, 1 or 2)

        Returns:
            dict: 생성된 신청 응답 (Created request response)

        Raises:
            ValidationError: 잘못된 근무조 또는 현재 근무조와 동일 (Invalid or unchanged shift)
            ConflictError: 이미 대기 중인 신청 존재 (A pending request already exists)
        """
        if requested_shift not in SHIFTS:
            raise ValidationError("Requested shift must be 1 or 2")
        if user.shift == requested_shift:
            raise ValidationError("You are already assigned to this shift")

        try:
            request: ShiftRequest = await shift_request_repository.create(
                db,
                {
                    "user_id": user.id,
                    "requested_shift": requested_shift,
                    "status": SHIFT_STATUS_PENDING,
                },
            )
        except IntegrityError:
            await db.rollback()
            raise ConflictError("You already have a pending shift change request")

        row = await shift_request_repository.get_with_user(db, request.id)
        return self.build_response(row)

    async def list_mine(self, db: AsyncSession, user: User) -> list[dict]:
        """본인 신청 목록을 최신순으로 반환합니다."""
        rows = await shift_request_repository.list_for_user(db, user.id)
        return [self.build_response(row) for row in rows]

    async def list_requests(self, db: AsyncSession, reviewer: User, status: str | None = None) -> list[dict]:
        """신청 목록을 반환합니다 — 관리자는 전체, 매니저는 본인 지역.

        List requests: admins see all, managers only their region.
        """
        if status and status not in SHIFT_STATUSES:
            raise ValidationError(f"Invalid status filter: {status}")
        rows = await shift_request_repository.list_requests(
            db,
            status=status or None,
            region=reviewer.region,
            scope_region=reviewer.role != ROLE_ADMIN,
        )
        return [self.build_response(row) for row in rows]

    async def review_request(
        self,
        db: AsyncSession,
        request_id: UUID,
        reviewer: User,
        status: str,
    ) -> dict:
        """대기 중인 신청을 승인 또는 거절합니다.

        Decide a pending request. Approval overwrites the requester's
        shift in the same transaction.

        Raises:
            ValidationError: 잘못된 결정 값 (Invalid decision)
            NotFoundError: 신청 없음 (Request does not exist)
            AuthorizationError: 매니저 지역 밖 (Outside the manager's region)
            AlreadyProcessedError: 이미 처리됨 (Already decided)
        """
        if status not in REVIEW_DECISIONS:
            raise ValidationError("Status must be 'approved' or 'rejected'")

        scope_region: bool = reviewer.role != ROLE_ADMIN
        affected: int = await shift_request_repository.apply_review(
            db,
            request_id,
            reviewer.id,
            status,
            region=reviewer.region,
            scope_region=scope_region,
        )
        if affected == 0:
            found = await shift_request_repository.get_with_requester(db, request_id)
            if found is None:
                raise NotFoundError("Shift request not found")
            _, requester = found
            if scope_region and (reviewer.region is None or requester.region != reviewer.region):
                raise AuthorizationError("Shift request is outside your region")
            raise AlreadyProcessedError("Shift request not found or already processed")

        row = await shift_request_repository.get_with_user(db, request_id)
        request: ShiftRequest = row[0]
        if status == SHIFT_STATUS_APPROVED:
            await shift_request_repository.set_user_shift(db, request.user_id, request.requested_shift)
            row = await shift_request_repository.get_with_user(db, request_id)

        return self.build_response(row)

    @staticmethod
    def build_response(row: Any) -> dict:
        """신청 응답 딕셔너리를 구성합니다 (ShiftRequest, user_name, current_shift)."""
        request: ShiftRequest = row[0]
        return {
            "id": str(request.id),
            "user_id": str(request.user_id),
            "user_name": row.user_name,
            "current_shift": row.current_shift,
            "requested_shift": request.requested_shift,
            "status": request.status,
            "reviewed_by": str(request.reviewed_by) if request.reviewed_by else None,
            "reviewed_at": request.reviewed_at,
            "created_at": request.created_at,
        }


# 싱글턴 인스턴스 — Singleton instance
shift_request_service: ShiftRequestService = ShiftRequestService()
