"""근태 관련 SQLAlchemy ORM 모델 정의.

Attendance SQLAlchemy ORM model definitions.

Tables:
    - attendance: 출퇴근 기록 (Check-in / check-out pairs)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.database import Base


class AttendanceRecord(Base):
    """출퇴근 기록 모델.

    Attendance record — one check-in / check-out pair.
    check_out_time은 퇴근 전까지 NULL이며 이후 변경되지 않습니다.
    (check_out_time stays NULL while open and is never mutated after close.)
    """

    __tablename__ = "attendance"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 출근 시각 — Check-in timestamp (UTC)
    check_in_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # 퇴근 시각 — Check-out timestamp (UTC), NULL while open
    check_out_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_attendance_user_check_in", "user_id", "check_in_time"),
    )
