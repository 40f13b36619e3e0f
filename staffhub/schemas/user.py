"""사용자 관리 Pydantic 요청/응답 스키마 정의.

User administration Pydantic request/response schema definitions
used by the admin user management endpoints.
"""

from datetime import date
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """관리자 사용자 생성 요청 스키마.

    Admin user creation request schema. Accounts created by an admin
    are approved immediately.
    """

    name: str = Field(..., min_length=1, max_length=100)  # 로그인 이름 (Login name)
    password: str = Field(..., min_length=6)  # 초기 비밀번호 (Initial password)
    number: str | None = None  # 직원 번호 (Employee number)
    email: str | None = None  # 이메일 (Email)
    role: Literal["user", "manager", "admin"] = "user"  # 역할 (Role)
    active: bool = True  # 활성 여부 (Active flag)
    region: str | None = None  # 지역 (Region)
    title: str | None = None  # 직함 (Job title)
    shift: Literal[1, 2] | None = None  # 근무조 (Shift)
    contract_start_date: date | None = None  # 계약 시작일 (Contract start date)


class UserUpdate(BaseModel):
    """사용자 수정 요청 스키마 (부분 업데이트).

    User update request schema (partial update, exclude_unset).
    """

    name: str | None = Field(None, min_length=1, max_length=100)  # 로그인 이름 (Login name)
    number: str | None = None  # 직원 번호 (Employee number)
    email: str | None = None  # 이메일 (Email)
    role: Literal["user", "manager", "admin"] | None = None  # 역할 (Role)
    active: bool | None = None  # 활성 여부 (Active flag)
    region: str | None = None  # 지역 (Region)
    title: str | None = None  # 직함 (Job title)
    shift: Literal[1, 2] | None = None  # 근무조 (Shift)
    contract_start_date: date | None = None  # 계약 시작일 (Contract start date)
    profile_image_key: str | None = None  # 업로드된 이미지 키 (Uploaded image object key)


class PasswordChange(BaseModel):
    """비밀번호 변경 요청 스키마.

    Admin-initiated password change request schema.
    """

    password: str = Field(..., min_length=6)  # 새 비밀번호 (New password)


class UserAccept(BaseModel):
    """가입 승인 요청 스키마.

    Signup acceptance request schema. Assigns region, shift and
    contract start date and flips status to approved.
    """

    model_config = ConfigDict(populate_by_name=True)

    region: str = Field(..., min_length=1)  # 배정 지역 (Assigned region)
    shift: Literal[1, 2]  # 배정 근무조 (Assigned shift)
    contract_start_date: date = Field(..., alias="contractStartDate")  # 계약 시작일 (Contract start date)
    title: str | None = None  # 직함 (Job title, optional)


class UserResponse(BaseModel):
    """사용자 응답 스키마.

    User response schema for admin listings and detail views.
    """

    id: str  # 사용자 UUID 문자열 (User UUID as string)
    name: str  # 로그인 이름 (Login name)
    number: str | None = None  # 직원 번호 (Employee number)
    email: str | None = None  # 이메일 (Email)
    role: str  # 역할 (Role)
    active: bool  # 활성 여부 (Active flag)
    status: bool  # 승인 여부 (Approval flag)
    region: str | None = None  # 지역 (Region)
    title: str | None = None  # 직함 (Job title)
    shift: int | None = None  # 근무조 (Shift)
    contract_start_date: date | None = None  # 계약 시작일 (Contract start date)
    image_url: str | None = None  # 프로필 이미지 공개 URL (Public profile image URL)
