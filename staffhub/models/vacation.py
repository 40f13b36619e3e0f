"""휴가 신청 SQLAlchemy ORM 모델 정의.

Vacation request SQLAlchemy ORM model definitions.
The row itself is the workflow state: every transition is a conditional
UPDATE keyed on the expected prior status.

Tables:
    - vacations: 휴가 신청 (Vacation requests with replacement and approval chain)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, Boolean, Date, DateTime, Text, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.database import Base

# 상태 값 — Workflow status values
STATUS_PENDING_REPLACEMENT: str = "pending_replacement_acceptance"
STATUS_PENDING_MANAGER: str = "pending_manager_approval"
STATUS_PENDING_ADMIN: str = "pending_admin_approval"
STATUS_APPROVED: str = "approved"
STATUS_REJECTED: str = "rejected"
# 과거 데이터 호환 — Legacy value treated like rejected by overlap checks
STATUS_DECLINED: str = "declined"

VACATION_STATUSES: tuple[str, ...] = (
    STATUS_PENDING_REPLACEMENT,
    STATUS_PENDING_MANAGER,
    STATUS_PENDING_ADMIN,
    STATUS_APPROVED,
    STATUS_REJECTED,
)
TERMINAL_STATUSES: tuple[str, ...] = (STATUS_APPROVED, STATUS_REJECTED)

# 대체자 응답 값 — Replacement response values
REPLACEMENT_PENDING: str = "pending"
REPLACEMENT_ACCEPTED: str = "accepted"
REPLACEMENT_DECLINED: str = "declined"


class Vacation(Base):
    """휴가 신청 모델 — 신청자, 대체자, 매니저, 관리자의 승인 체인.

    Vacation request model — approval chain across the requester,
    the designated replacement, the regional manager and an admin.

    Status Flow:
        pending_replacement_acceptance → pending_manager_approval → pending_admin_approval → approved
        각 단계의 거절은 rejected로 종료 (A negative decision at any stage ends in rejected)

    replacement_status는 첫 전이와 함께 한 번만 accepted/declined로 바뀌고
    이후 매니저/관리자 결정과 무관하게 유지됩니다.
    (replacement_status is set once with the first transition and never changes afterwards.)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 신청자 FK (Requester)
        start_date: 시작일 (First day of leave, inclusive)
        end_date: 종료일 (Last day of leave, inclusive)
        replacement_user_id: 대체자 FK (Designated replacement)
        status: 워크플로 상태 (Workflow status)
        replacement_status: 대체자 응답 (pending | accepted | declined)
        manager_approver_id: 처리한 매니저 FK (Manager who decided)
        admin_approver_id: 처리한 관리자 FK (Admin who decided)
        admin_comment: 매니저/관리자 코멘트 (Decision comment, required on admin rejection)
        is_seen: 신청자 확인 여부 (Read receipt, no workflow effect)
        requested_at: 신청 일시 UTC (Request timestamp)
    """

    __tablename__ = "vacations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 신청자 FK — Requester (CASCADE: 사용자 삭제 시 신청도 삭제)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 대체자 FK — Designated replacement
    replacement_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status: Mapped[str] = mapped_column(String(40), nullable=False, default=STATUS_PENDING_REPLACEMENT)
    replacement_status: Mapped[str] = mapped_column(String(20), nullable=False, default=REPLACEMENT_PENDING)
    manager_approver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    admin_approver_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    admin_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_seen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 신청 일시 — Request timestamp (UTC)
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_vacations_date_order"),
        CheckConstraint("replacement_user_id IS NULL OR replacement_user_id <> user_id", name="ck_vacations_no_self_replacement"),
        Index("ix_vacations_user_dates", "user_id", "start_date", "end_date"),
        Index("ix_vacations_replacement_dates", "replacement_user_id", "start_date", "end_date"),
        Index("ix_vacations_status", "status"),
    )
