"""휴가 신청 Pydantic 요청/응답 스키마 정의.

Vacation request Pydantic request/response schema definitions.
Request bodies accept the camelCase keys used by the mobile and web
clients (startDate, endDate, replacementUserId).
"""

from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field


class VacationCreate(BaseModel):
    """휴가 신청 생성 요청 스키마.

    Vacation request creation schema. Missing fields are validated by the
    service so the client receives the workflow's own error messages.

    Attributes:
        start_date: 시작일 (First day of leave)
        end_date: 종료일 (Last day of leave, inclusive)
        replacement_user_id: 대체자 UUID (Designated replacement)
    """

    model_config = ConfigDict(populate_by_name=True)

    start_date: date | None = Field(None, alias="startDate")  # 시작일 (Start date)
    end_date: date | None = Field(None, alias="endDate")  # 종료일 (End date)
    replacement_user_id: str | None = Field(None, alias="replacementUserId")  # 대체자 UUID (Replacement UUID)


class ReplacementRespond(BaseModel):
    """대체자 응답 요청 스키마.

    Replacement response schema — accept or decline the designation.
    """

    accept: bool  # 수락 여부 (True=accept, False=decline)


class ManagerRespond(BaseModel):
    """매니저 결정 요청 스키마.

    Manager decision schema. approve is required; comment is optional.
    """

    approve: bool | None = None  # 승인 여부 (Approve or reject, required)
    comment: str | None = None  # 코멘트 (Optional comment)


class AdminRespond(BaseModel):
    """관리자 결정 요청 스키마.

    Admin decision schema. Rejection requires a non-blank comment.
    """

    status: str | None = None  # "approved" | "rejected"
    admin_comment: str | None = None  # 코멘트 — 거절 시 필수 (Required on rejection)


class ReplacementCandidate(BaseModel):
    """대체 가능 인원 응답 스키마.

    Eligible replacement candidate with a public profile image URL.
    """

    id: str  # 사용자 UUID (User UUID)
    name: str  # 이름 (Name)
    title: str | None = None  # 직함 (Job title)
    region: str | None = None  # 지역 (Region)
    image_url: str | None = None  # 프로필 이미지 URL (Profile image URL)


class VacationResponse(BaseModel):
    """휴가 신청 응답 스키마 — 관련 사용자 이름 포함.

    Vacation request response decorated with participant names.
    """

    id: str  # 휴가 신청 UUID (Vacation UUID)
    user_id: str  # 신청자 UUID (Requester UUID)
    user_name: str | None = None  # 신청자 이름 (Requester name)
    user_region: str | None = None  # 신청자 지역 (Requester region)
    start_date: date  # 시작일 (Start date)
    end_date: date  # 종료일 (End date)
    replacement_user_id: str | None = None  # 대체자 UUID (Replacement UUID)
    replacement_name: str | None = None  # 대체자 이름 (Replacement name)
    status: str  # 워크플로 상태 (Workflow status)
    replacement_status: str  # 대체자 응답 (Replacement response)
    manager_approver_id: str | None = None  # 매니저 UUID (Manager UUID)
    manager_name: str | None = None  # 매니저 이름 (Manager name)
    admin_approver_id: str | None = None  # 관리자 UUID (Admin UUID)
    admin_name: str | None = None  # 관리자 이름 (Admin name)
    admin_comment: str | None = None  # 코멘트 (Decision comment)
    is_seen: bool  # 확인 여부 (Read receipt)
    requested_at: datetime | None = None  # 신청 일시 (Request timestamp)


class MyVacationsResponse(BaseModel):
    """내 휴가 목록 응답 스키마.

    Own vacation list with the count of unseen decided requests.
    """

    model_config = ConfigDict(populate_by_name=True)

    vacations: list[VacationResponse]  # 휴가 목록 (Vacation list)
    unseen_count: int = Field(..., serialization_alias="unseenCount")  # 미확인 결정 수 (Unseen decisions)
