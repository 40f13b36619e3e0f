"""근태 Pydantic 응답 스키마 정의.

Attendance Pydantic response schema definitions.
"""

from datetime import datetime
from pydantic import BaseModel


class AttendanceResponse(BaseModel):
    """출퇴근 기록 응답 스키마.

    Attendance record response. Times are returned in UTC; the local
    day used for grouping is ATTENDANCE_TIMEZONE.
    """

    id: str  # 기록 UUID (Record UUID)
    user_id: str  # 사용자 UUID (User UUID)
    user_name: str | None = None  # 사용자 이름 (User name)
    check_in_time: datetime  # 출근 시각 (Check-in time)
    check_out_time: datetime | None = None  # 퇴근 시각 (Check-out time)
    hours_worked: float | None = None  # 근무 시간 (Hours worked, closed records only)


class TodayStatusResponse(BaseModel):
    """오늘 근태 상태 응답 스키마.

    Today's attendance status for the current user.
    """

    checked_in: bool  # 출근 여부 (Has an open or closed record today)
    checked_out: bool  # 퇴근 여부 (Today's record is closed)
    record: AttendanceResponse | None = None  # 오늘 기록 (Today's latest record)
