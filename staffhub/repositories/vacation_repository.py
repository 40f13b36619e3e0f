"""휴가 신청 레포지토리 — 휴가 워크플로 관련 DB 쿼리 담당.

Vacation Repository — Handles all vacation-workflow database queries.
Every state transition is a single conditional UPDATE whose WHERE clause
encodes the expected prior state; the returned rowcount tells the
service whether the transition applied (1) or lost a race (0).

Listings are decorated with participant names through aliased outer
joins on the users table.
"""

from datetime import date
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from staffhub.models.user import User
from staffhub.models.vacation import (
    REPLACEMENT_ACCEPTED,
    REPLACEMENT_DECLINED,
    REPLACEMENT_PENDING,
    STATUS_APPROVED,
    STATUS_DECLINED,
    STATUS_PENDING_ADMIN,
    STATUS_PENDING_MANAGER,
    STATUS_PENDING_REPLACEMENT,
    STATUS_REJECTED,
    TERMINAL_STATUSES,
    Vacation,
)
from staffhub.repositories.base import BaseRepository, in_region
from staffhub.utils.dates import overlap_clause

# 겹침 검사에서 제외되는 상태 — Statuses ignored by the owner overlap check
INACTIVE_STATUSES: tuple[str, ...] = (STATUS_REJECTED, STATUS_DECLINED)

# 대체 후보에서 제외: 해당 기간 본인 휴가 보유 — Owners considered away
OWNER_BUSY_STATUSES: tuple[str, ...] = (
    STATUS_APPROVED,
    STATUS_PENDING_MANAGER,
    STATUS_PENDING_REPLACEMENT,
)

# 대체 후보에서 제외: 이미 수락한 대체 업무 — Accepted replacements considered committed
REPLACEMENT_BUSY_STATUSES: tuple[str, ...] = (
    STATUS_APPROVED,
    STATUS_PENDING_MANAGER,
    STATUS_PENDING_ADMIN,
)

# 조인용 사용자 별칭 — User aliases for decorated listings
Requester = aliased(User, name="requester")
Replacement = aliased(User, name="replacement")
Manager = aliased(User, name="manager")
Admin = aliased(User, name="admin")


class VacationRepository(BaseRepository[Vacation]):
    """휴가 신청 레포지토리.

    Vacation repository with eligibility, overlap and conditional
    transition queries.

    Extends:
        BaseRepository[Vacation]
    """

    def __init__(self) -> None:
        super().__init__(Vacation)

    # --- 대체자 후보 / 겹침 (Eligibility and overlap) ---

    async def get_eligible_replacements(
        self,
        db: AsyncSession,
        requester_id: UUID,
        region: str | None,
        start_date: date,
        end_date: date,
    ) -> Sequence[User]:
        """기간 내 대체 가능한 같은 지역 활성 사용자를 조회합니다.

        Active users in the requester's region, excluding the requester,
        owners of an intersecting active request, and accepted
        replacements on an intersecting in-flight or approved request.
        Ordered by name.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            requester_id: 신청자 UUID (Requester UUID)
            region: 신청자 지역 (Requester region)
            start_date: 시작일 (Range start)
            end_date: 종료일 (Range end)

        Returns:
            Sequence[User]: 대체 가능 사용자 목록 (Eligible users)
        """
        busy_owners: Select = select(Vacation.user_id).where(
            Vacation.status.in_(OWNER_BUSY_STATUSES),
            overlap_clause(Vacation.start_date, Vacation.end_date, start_date, end_date),
        )
        # NOT IN과 NULL 조합 방지 — NULLs would make NOT IN match nothing
        busy_replacements: Select = select(Vacation.replacement_user_id).where(
            Vacation.replacement_user_id.is_not(None),
            Vacation.replacement_status == REPLACEMENT_ACCEPTED,
            Vacation.status.in_(REPLACEMENT_BUSY_STATUSES),
            overlap_clause(Vacation.start_date, Vacation.end_date, start_date, end_date),
        )

        query: Select = (
            select(User)
            .where(
                User.active.is_(True),
                in_region(User.region, region),
                User.id != requester_id,
                User.id.not_in(busy_owners),
                User.id.not_in(busy_replacements),
            )
            .order_by(User.name.asc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def has_overlapping_request(
        self,
        db: AsyncSession,
        user_id: UUID,
        start_date: date,
        end_date: date,
    ) -> bool:
        """사용자의 활성 휴가 신청 중 기간이 겹치는 것이 있는지 확인합니다.

        Whether the user owns a request not in {rejected, declined}
        intersecting the range.
        """
        query: Select = (
            select(func.count())
            .select_from(Vacation)
            .where(
                Vacation.user_id == user_id,
                Vacation.status.not_in(INACTIVE_STATUSES),
                overlap_clause(Vacation.start_date, Vacation.end_date, start_date, end_date),
            )
        )
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0

    # --- 상태 전이 (Conditional transitions) ---

    async def apply_replacement_response(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        responder_id: UUID,
        accept: bool,
    ) -> int:
        """대체자 응답을 조건부 UPDATE로 반영합니다.

        Apply the replacement's answer. The row must still await this
        responder; an acceptance additionally requires the responder not
        to be away or already covering someone else in the same range.

        Returns:
            int: 변경된 행 수 (Rows affected, 0 or 1)
        """
        conditions: list[Any] = [
            Vacation.id == vacation_id,
            Vacation.replacement_user_id == responder_id,
            Vacation.replacement_status == REPLACEMENT_PENDING,
            Vacation.status == STATUS_PENDING_REPLACEMENT,
        ]

        if accept:
            other = aliased(Vacation, name="other")
            busy = (
                select(other.id)
                .where(
                    other.id != Vacation.id,
                    or_(
                        and_(
                            other.user_id == responder_id,
                            other.status.not_in(INACTIVE_STATUSES),
                        ),
                        and_(
                            other.replacement_user_id == responder_id,
                            other.replacement_status == REPLACEMENT_ACCEPTED,
                            other.status.in_(REPLACEMENT_BUSY_STATUSES),
                        ),
                    ),
                    overlap_clause(other.start_date, other.end_date, Vacation.start_date, Vacation.end_date),
                )
                .correlate(Vacation)
                .exists()
            )
            conditions.append(~busy)

        result = await db.execute(
            update(Vacation)
            .where(*conditions)
            .values(
                status=STATUS_PENDING_MANAGER if accept else STATUS_REJECTED,
                replacement_status=REPLACEMENT_ACCEPTED if accept else REPLACEMENT_DECLINED,
            )
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def apply_manager_decision(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        manager_id: UUID,
        manager_region: str | None,
        approve: bool,
        comment: str | None,
    ) -> int:
        """매니저 결정을 조건부 UPDATE로 반영합니다.

        Apply a manager decision. The requester's region is re-checked
        inside the UPDATE so a region change between read and write
        cannot leak authority.

        Returns:
            int: 변경된 행 수 (Rows affected, 0 or 1)
        """
        same_region_users: Select = select(User.id).where(in_region(User.region, manager_region))

        result = await db.execute(
            update(Vacation)
            .where(
                Vacation.id == vacation_id,
                Vacation.status == STATUS_PENDING_MANAGER,
                Vacation.user_id.in_(same_region_users),
            )
            .values(
                status=STATUS_PENDING_ADMIN if approve else STATUS_REJECTED,
                manager_approver_id=manager_id,
                admin_comment=comment or None,
            )
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def apply_admin_decision(
        self,
        db: AsyncSession,
        vacation_id: UUID,
        admin_id: UUID,
        status: str,
        comment: str | None,
    ) -> int:
        """관리자 최종 결정을 조건부 UPDATE로 반영합니다.

        Apply the admin's final decision to a request awaiting it.

        Returns:
            int: 변경된 행 수 (Rows affected, 0 or 1)
        """
        result = await db.execute(
            update(Vacation)
            .where(
                Vacation.id == vacation_id,
                Vacation.status == STATUS_PENDING_ADMIN,
            )
            .values(
                status=status,
                admin_approver_id=admin_id,
                admin_comment=comment,
            )
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def mark_seen(self, db: AsyncSession, vacation_id: UUID, user_id: UUID) -> int:
        """신청자의 휴가 신청을 확인 처리합니다 (멱등).

        Set is_seen on a request owned by the user. Idempotent.
        """
        result = await db.execute(
            update(Vacation)
            .where(Vacation.id == vacation_id, Vacation.user_id == user_id)
            .values(is_seen=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def mark_all_seen(self, db: AsyncSession, user_id: UUID) -> int:
        """결정된 모든 휴가 신청을 확인 처리합니다.

        Set is_seen on every decided (approved/rejected) request of the user.
        """
        result = await db.execute(
            update(Vacation)
            .where(Vacation.user_id == user_id, Vacation.status.in_(TERMINAL_STATUSES))
            .values(is_seen=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    # --- 조회 (Listings) ---

    def _decorated_query(self) -> Select:
        """참여자 이름이 포함된 기본 조회 쿼리.

        Base query selecting each vacation with requester, replacement,
        manager and admin names. populate_existing refreshes rows already
        in the session after a Core UPDATE.
        """
        return (
            select(
                Vacation,
                Requester.name.label("user_name"),
                Requester.region.label("user_region"),
                Replacement.name.label("replacement_name"),
                Manager.name.label("manager_name"),
                Admin.name.label("admin_name"),
            )
            .join(Requester, Vacation.user_id == Requester.id)
            .outerjoin(Replacement, Vacation.replacement_user_id == Replacement.id)
            .outerjoin(Manager, Vacation.manager_approver_id == Manager.id)
            .outerjoin(Admin, Vacation.admin_approver_id == Admin.id)
            .execution_options(populate_existing=True)
        )

    async def get_decorated(self, db: AsyncSession, vacation_id: UUID) -> Any | None:
        """이름이 포함된 단일 휴가 신청 행을 조회합니다."""
        result = await db.execute(self._decorated_query().where(Vacation.id == vacation_id))
        return result.one_or_none()

    async def get_with_requester(self, db: AsyncSession, vacation_id: UUID) -> tuple[Vacation, User] | None:
        """휴가 신청과 신청자를 함께 조회합니다.

        Fetch a vacation together with its requester, used to classify
        a transition that affected no rows.
        """
        result = await db.execute(
            select(Vacation, User)
            .join(User, Vacation.user_id == User.id)
            .where(Vacation.id == vacation_id)
            .execution_options(populate_existing=True)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]

    async def list_for_user(self, db: AsyncSession, user_id: UUID) -> Sequence[Any]:
        """사용자 본인의 휴가 신청을 최신순으로 조회합니다."""
        result = await db.execute(
            self._decorated_query()
            .where(Vacation.user_id == user_id)
            .order_by(Vacation.requested_at.desc())
        )
        return result.all()

    async def count_unseen(self, db: AsyncSession, user_id: UUID) -> int:
        """결정되었지만 확인하지 않은 휴가 신청 수.

        Count of decided requests the user has not seen yet.
        """
        query: Select = (
            select(func.count())
            .select_from(Vacation)
            .where(
                Vacation.user_id == user_id,
                Vacation.status.in_(TERMINAL_STATUSES),
                Vacation.is_seen.is_(False),
            )
        )
        return (await db.execute(query)).scalar() or 0

    async def list_replacement_requests(self, db: AsyncSession, user_id: UUID) -> Sequence[Any]:
        """사용자가 응답해야 할 대체 요청을 조회합니다."""
        result = await db.execute(
            self._decorated_query()
            .where(
                Vacation.replacement_user_id == user_id,
                Vacation.replacement_status == REPLACEMENT_PENDING,
            )
            .order_by(Vacation.requested_at.desc())
        )
        return result.all()

    async def list_for_region(
        self,
        db: AsyncSession,
        region: str | None,
        status: str | None = None,
    ) -> Sequence[Any]:
        """매니저 지역 신청자의 휴가 신청을 조회합니다.

        Requests whose requester belongs to the region. Without a status
        filter the manager sees what awaits them, what they forwarded,
        what was approved, and the rejections decided at their stage.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            region: 매니저 지역 (Manager region)
            status: 상태 필터 (Optional status filter)

        Returns:
            Sequence[Any]: 이름이 포함된 행 목록 (Decorated rows)
        """
        query: Select = self._decorated_query().where(in_region(Requester.region, region))
        if status:
            query = query.where(Vacation.status == status)
        else:
            query = query.where(
                or_(
                    Vacation.status.in_((STATUS_PENDING_MANAGER, STATUS_PENDING_ADMIN, STATUS_APPROVED)),
                    and_(
                        Vacation.status == STATUS_REJECTED,
                        Vacation.manager_approver_id.is_not(None),
                    ),
                )
            )
        result = await db.execute(query.order_by(Vacation.requested_at.desc()))
        return result.all()

    async def list_all(self, db: AsyncSession, status: str | None = None) -> Sequence[Any]:
        """전체 휴가 신청을 조회합니다 (상태 필터 선택)."""
        query: Select = self._decorated_query()
        if status:
            query = query.where(Vacation.status == status)
        result = await db.execute(query.order_by(Vacation.requested_at.desc()))
        return result.all()


# 싱글턴 인스턴스 — Singleton instance
vacation_repository: VacationRepository = VacationRepository()
