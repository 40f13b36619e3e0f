"""근무조 변경 신청 SQLAlchemy ORM 모델 정의.

Shift change request SQLAlchemy ORM model definitions.

Tables:
    - shift_requests: 근무조 변경 신청 (Requests to move between shift 1 and 2)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime, ForeignKey, CheckConstraint, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.database import Base

SHIFT_STATUS_PENDING: str = "pending"
SHIFT_STATUS_APPROVED: str = "approved"
SHIFT_STATUS_REJECTED: str = "rejected"


class ShiftRequest(Base):
    """근무조 변경 신청 모델.

    Shift change request model — pending → approved | rejected, decided once.
    Approval overwrites users.shift with requested_shift.

    Constraints:
        uq_shift_requests_one_pending: 사용자당 pending 신청 1건 (partial unique index)
            (At most one pending request per user)
    """

    __tablename__ = "shift_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 신청자 FK — Requester
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 희망 근무조 — 1 or 2
    requested_shift: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SHIFT_STATUS_PENDING)
    # 처리자 FK — Admin or manager who decided
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("requested_shift IN (1, 2)", name="ck_shift_requests_shift"),
        Index(
            "uq_shift_requests_one_pending",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )
