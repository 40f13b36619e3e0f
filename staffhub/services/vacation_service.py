"""휴가 서비스 — 휴가 신청 워크플로 비즈니스 로직.

Vacation Service — Business logic for the vacation approval chain.

Status Flow:
    pending_replacement_acceptance
        → (replacement accepts) pending_manager_approval
        → (manager approves) pending_admin_approval
        → (admin approves) approved
    Any negative decision ends the request in rejected.

Each transition is delegated to a single conditional UPDATE in the
repository. When no row changes, the service re-reads the request to
tell the caller why: missing row, wrong actor, wrong region or an
already-processed request. Notifications are not sent here; routers
send them after the transition is committed.
"""

from datetime import date
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.user import User
from staffhub.models.vacation import (
    REPLACEMENT_PENDING,
    STATUS_APPROVED,
    STATUS_PENDING_ADMIN,
    STATUS_PENDING_MANAGER,
    STATUS_PENDING_REPLACEMENT,
    STATUS_REJECTED,
    VACATION_STATUSES,
    Vacation,
)
from staffhub.repositories.user_repository import user_repository
from staffhub.repositories.vacation_repository import vacation_repository
from staffhub.schemas.vacation import VacationCreate
from staffhub.services.storage_service import storage_service
from staffhub.utils.exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

# 관리자 결정 허용 값 — Accepted admin decisions
ADMIN_DECISIONS: tuple[str, ...] = (STATUS_APPROVED, STATUS_REJECTED)


def _parse_uuid(value: str | None, message: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(message)


class VacationService:
    """휴가 서비스.

    Vacation service handling replacement eligibility, request
    creation, the three approval stages and read receipts.
    """

    def _validate_status_filter(self, status: str | None) -> str | None:
        if status and status not in VACATION_STATUSES:
            raise ValidationError(f"Invalid status filter: {status}")
        return status or None

    # --- 대체자 후보 (Eligible replacements) ---

    async def list_eligible_replacements(
        self,
        db: AsyncSession,
        requester: User,
        start_date: date | None,
        end_date: date | None,
    ) -> list[dict]:
        """기간 내 대체 가능한 동료 목록을 반환합니다.

        List colleagues who can cover the range, with public image URLs.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            requester: 신청자 (Requesting user)
            start_date: 시작일 (Range start, required)
            end_date: 종료일 (Range end, required)

        Returns:
            list[dict]: 대체 후보 목록 (Candidate list ordered by name)

        Raises:
            ValidationError: 날짜 누락 (Missing dates)
        """
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")

        candidates: Sequence[User] = await vacation_repository.get_eligible_replacements(
            db, requester.id, requester.region, start_date, end_date
        )
        return [
            {
                "id": str(u.id),
                "name": u.name,
                "title": u.title,
                "region": u.region,
                "image_url": storage_service.get_public_url(u.profile_image_key),
            }
            for u in candidates
        ]

    # --- 신청 (Creation) ---

    async def request_vacation(
        self,
        db: AsyncSession,
        requester: User,
        data: VacationCreate,
    ) -> Vacation:
        """휴가를 신청합니다.

        Create a vacation request awaiting the replacement's answer.
        No notification is sent at creation; the replacement discovers
        the request through the replacement-requests listing.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            requester: 신청자 (Requesting user)
            data: 신청 데이터 (Request data)

        Returns:
            Vacation: 생성된 휴가 신청 (Created request)

        Raises:
            ValidationError: 대체자 누락/본인 지정, 날짜 누락/역전
                             (Missing or self replacement, missing or reversed dates)
            NotFoundError: 대체자가 없거나 비활성 (Replacement missing or inactive)
            ConflictError: 기존 신청과 기간 겹침 (Overlaps an existing request)
        """
        if not data.replacement_user_id:
            raise ValidationError("Replacement user is required")
        replacement_id: UUID = _parse_uuid(data.replacement_user_id, "Invalid replacement user id")
        if replacement_id == requester.id:
            raise ValidationError("Cannot select yourself as replacement")

        if data.start_date is None or data.end_date is None:
            raise ValidationError("Start date and end date are required")
        if data.end_date < data.start_date:
            raise ValidationError("End date must not be before start date")

        replacement: User | None = await user_repository.get_by_id(db, replacement_id)
        if replacement is None or not replacement.active:
            raise NotFoundError("Replacement user not found")

        overlapping: bool = await vacation_repository.has_overlapping_request(
            db, requester.id, data.start_date, data.end_date
        )
        if overlapping:
            raise ConflictError("Vacation dates overlap with existing request")

        return await vacation_repository.create(
            db,
            {
                "user_id": requester.id,
                "start_date": data.start_date,
                "end_date": data.end_date,
                "replacement_user_id": replacement_id,
                "status": STATUS_PENDING_REPLACEMENT,
                "replacement_status": REPLACEMENT_PENDING,
            },
        )

    # --- 전이 (Transitions) ---

    async def respond_to_replacement(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        responder: User,
        accept: bool,
    ) -> dict:
        """대체자가 대체 요청에 응답합니다.

        The designated replacement accepts (→ pending_manager_approval)
        or declines (→ rejected). An acceptance is refused when the
        responder is away or already covering someone in the same range.

        Returns:
            dict: 갱신된 휴가 신청 응답 (Updated vacation response)

        Raises:
            NotFoundError: 응답할 대체 요청이 없음 (No pending request for this responder)
            ConflictError: 대체자가 해당 기간에 이미 바쁨 (Responder busy in the range)
        """
        affected: int = await vacation_repository.apply_replacement_response(
            db, vacation_id, responder.id, accept
        )
        if affected == 0:
            found = await vacation_repository.get_with_requester(db, vacation_id)
            vacation: Vacation | None = found[0] if found else None
            still_pending: bool = (
                vacation is not None
                and vacation.replacement_user_id == responder.id
                and vacation.replacement_status == REPLACEMENT_PENDING
                and vacation.status == STATUS_PENDING_REPLACEMENT
            )
            if accept and still_pending:
                raise ConflictError("You already have a vacation or replacement duty during this period")
            raise NotFoundError("Replacement request not found")

        return await self.get_vacation_response(db, vacation_id)

    async def manager_respond(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        manager: User,
        approve: bool | None,
        comment: str | None = None,
    ) -> dict:
        """지역 매니저가 휴가 신청을 승인 또는 거절합니다.

        Manager decision on a request from the manager's region:
        approve → pending_admin_approval, reject → rejected.

        Raises:
            ValidationError: approve 누락 (approve missing)
            NotFoundError: 신청 없음 (Request does not exist)
            AuthorizationError: 다른 지역 신청 (Requester outside the manager's region)
            AlreadyProcessedError: 매니저 단계가 아님 (Not awaiting a manager)
        """
        if approve is None:
            raise ValidationError("Approval status is required")

        affected: int = await vacation_repository.apply_manager_decision(
            db, vacation_id, manager.id, manager.region, approve, comment
        )
        if affected == 0:
            found = await vacation_repository.get_with_requester(db, vacation_id)
            if found is None:
                raise NotFoundError("Vacation request not found")
            vacation, requester = found
            if manager.region is None or requester.region != manager.region:
                raise AuthorizationError("Vacation request is outside your region")
            raise AlreadyProcessedError("Vacation request not found or already processed")

        return await self.get_vacation_response(db, vacation_id)

    async def admin_respond(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        admin: User,
        status: str | None,
        comment: str | None,
    ) -> dict:
        """관리자가 최종 승인 또는 거절합니다.

        Final admin decision on a request awaiting it. A rejection needs
        a non-blank comment.

        Raises:
            ValidationError: 잘못된 상태 또는 거절 사유 누락 (Invalid status or missing comment)
            NotFoundError: 신청 없음 (Request does not exist)
            AlreadyProcessedError: 관리자 단계가 아님 (Not awaiting an admin)
        """
        if status not in ADMIN_DECISIONS:
            raise ValidationError("Status must be 'approved' or 'rejected'")
        if status == STATUS_REJECTED and (comment is None or not comment.strip()):
            raise ValidationError("A comment is required when rejecting a vacation request")

        affected: int = await vacation_repository.apply_admin_decision(
            db, vacation_id, admin.id, status, comment
        )
        if affected == 0:
            if await vacation_repository.get_by_id(db, vacation_id) is None:
                raise NotFoundError("Vacation request not found")
            raise AlreadyProcessedError("Vacation request not found or already processed")

        return await self.get_vacation_response(db, vacation_id)

    # --- 확인 처리 (Read receipts) ---

    async def mark_seen(self, db: AsyncSession, vacation_id: UUID, user: User) -> None:
        """본인 휴가 신청을 확인 처리합니다 (멱등)."""
        await vacation_repository.mark_seen(db, vacation_id, user.id)

    async def mark_all_seen(self, db: AsyncSession, user: User) -> int:
        """결정된 본인 휴가 신청을 모두 확인 처리합니다."""
        return await vacation_repository.mark_all_seen(db, user.id)

    # --- 조회 (Listings) ---

    async def list_mine(self, db: AsyncSession, user: User) -> dict:
        """본인 휴가 신청 목록과 미확인 결정 수를 반환합니다."""
        rows = await vacation_repository.list_for_user(db, user.id)
        unseen: int = await vacation_repository.count_unseen(db, user.id)
        return {
            "vacations": [self.build_response(row) for row in rows],
            "unseen_count": unseen,
        }

    async def list_replacement_requests(self, db: AsyncSession, user: User) -> list[dict]:
        """본인이 응답해야 할 대체 요청 목록을 반환합니다."""
        rows = await vacation_repository.list_replacement_requests(db, user.id)
        return [self.build_response(row) for row in rows]

    async def list_for_manager(self, db: AsyncSession, manager: User, status: str | None = None) -> list[dict]:
        """매니저 지역의 휴가 신청 목록을 반환합니다."""
        rows = await vacation_repository.list_for_region(db, manager.region, self._validate_status_filter(status))
        return [self.build_response(row) for row in rows]

    async def list_all(self, db: AsyncSession, status: str | None = None) -> list[dict]:
        """전체 휴가 신청 목록을 반환합니다 (관리자)."""
        rows = await vacation_repository.list_all(db, self._validate_status_filter(status))
        return [self.build_response(row) for row in rows]

    async def get_vacation_response(self, db: AsyncSession, vacation_id: UUID) -> dict:
        """이름이 포함된 단일 휴가 신청 응답을 반환합니다."""
        row = await vacation_repository.get_decorated(db, vacation_id)
        if row is None:
            raise NotFoundError("Vacation request not found")
        return self.build_response(row)

    @staticmethod
    def build_response(row: Any) -> dict:
        """휴가 신청 응답 딕셔너리를 구성합니다.

        Build a vacation response dict from a decorated row
        (Vacation, user_name, user_region, replacement_name, manager_name, admin_name).
        """
        vacation: Vacation = row[0]
        return {
            "id": str(vacation.id),
            "user_id": str(vacation.user_id),
            "user_name": row.user_name,
            "user_region": row.user_region,
            "start_date": vacation.start_date,
            "end_date": vacation.end_date,
            "replacement_user_id": str(vacation.replacement_user_id) if vacation.replacement_user_id else None,
            "replacement_name": row.replacement_name,
            "status": vacation.status,
            "replacement_status": vacation.replacement_status,
            "manager_approver_id": str(vacation.manager_approver_id) if vacation.manager_approver_id else None,
            "manager_name": row.manager_name,
            "admin_approver_id": str(vacation.admin_approver_id) if vacation.admin_approver_id else None,
            "admin_name": row.admin_name,
            "admin_comment": vacation.admin_comment,
            "is_seen": vacation.is_seen,
            "requested_at": vacation.requested_at,
        }


# 싱글턴 인스턴스 — Singleton instance
vacation_service: VacationService = VacationService()
