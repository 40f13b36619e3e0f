"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and the test schema setup rely on.

Modules:
    user: 사용자 (Users: employees, managers, admins)
    vacation: 휴가 신청 (Vacation requests)
    shift_request: 근무조 변경 신청 (Shift change requests)
    attendance: 출퇴근 기록 (Attendance records)
    notification: 알림 이력 (Notification history)
"""

from staffhub.models.user import User
from staffhub.models.vacation import Vacation
from staffhub.models.shift_request import ShiftRequest
from staffhub.models.attendance import AttendanceRecord
from staffhub.models.notification import Notification

__all__ = [
    "User",
    "Vacation",
    "ShiftRequest",
    "AttendanceRecord",
    "Notification",
]
