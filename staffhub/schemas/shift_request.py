"""근무조 변경 신청 Pydantic 요청/응답 스키마 정의.

Shift change request Pydantic request/response schema definitions.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ShiftRequestCreate(BaseModel):
    """근무조 변경 신청 요청 스키마.

    Shift change request creation schema; range is validated by the service.
    """

    model_config = ConfigDict(populate_by_name=True)

    requested_shift: int | None = Field(None, alias="requestedShift")  # 희망 근무조 1|2 (Requested shift)


class ShiftRequestReview(BaseModel):
    """근무조 변경 신청 처리 요청 스키마.

    Shift change request review schema.
    """

    status: str  # "approved" | "rejected"


class ShiftRequestResponse(BaseModel):
    """근무조 변경 신청 응답 스키마."""

    id: str  # 신청 UUID (Request UUID)
    user_id: str  # 신청자 UUID (Requester UUID)
    user_name: str | None = None  # 신청자 이름 (Requester name)
    current_shift: int | None = None  # 현재 근무조 (Current shift)
    requested_shift: int  # 희망 근무조 (Requested shift)
    status: str  # 상태 — pending | approved | rejected
    reviewed_by: str | None = None  # 처리자 UUID (Reviewer UUID)
    reviewed_at: datetime | None = None  # 처리 일시 (Review timestamp)
    created_at: datetime | None = None  # 신청 일시 (Creation timestamp)
