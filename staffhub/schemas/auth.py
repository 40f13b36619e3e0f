"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers signup, web login, mobile login with push token registration,
and the current user profile.
"""

from datetime import date
from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """회원가입 요청 스키마.

    Self-registration request schema. The account starts unapproved
    (status=False) until an admin accepts it.

    Attributes:
        name: 로그인 이름 (Desired login name, globally unique)
        password: 비밀번호 (Plain text, bcrypt-hashed on server)
        number: 직원 번호/전화번호 (Employee or phone number, optional)
        email: 이메일 (Email address for the approval email, optional)
        title: 직함 (Job title, optional)
    """

    name: str = Field(..., min_length=1, max_length=100)  # 로그인 이름 (Login name)
    password: str = Field(..., min_length=6)  # 비밀번호 — 평문, 서버에서 bcrypt 해싱 (Plain text)
    number: str | None = None  # 직원 번호 (Employee number, optional)
    email: str | None = None  # 이메일 (Email, optional)
    title: str | None = None  # 직함 (Job title, optional)


class LoginRequest(BaseModel):
    """웹 로그인 요청 스키마.

    Web login request schema.

    Attributes:
        name: 로그인 이름 (Login name)
        password: 비밀번호 (Plain text password)
    """

    name: str  # 로그인 이름 (Login name)
    password: str  # 비밀번호 — bcrypt 해시와 비교 (Compared to bcrypt hash)


class MobileLoginRequest(LoginRequest):
    """모바일 로그인 요청 스키마.

    Mobile login request schema; optionally registers the Expo push token.

    Attributes:
        push_token: Expo 푸시 토큰 (Expo push token, optional)
        device_type: 기기 유형 (Device type, e.g. "ios", "android")
    """

    model_config = ConfigDict(populate_by_name=True)

    push_token: str | None = Field(None, alias="pushToken")  # Expo 푸시 토큰 (Expo push token)
    device_type: str | None = Field(None, alias="deviceType")  # 기기 유형 (Device type)


class PushTokenRequest(BaseModel):
    """푸시 토큰 등록 요청 스키마.

    Push token registration request schema (token refresh from the app).
    """

    model_config = ConfigDict(populate_by_name=True)

    push_token: str = Field(..., alias="pushToken")  # Expo 푸시 토큰 (Expo push token)
    device_type: str | None = Field(None, alias="deviceType")  # 기기 유형 (Device type)


class UserProfile(BaseModel):
    """사용자 프로필 응답 스키마.

    Current user profile response schema.
    """

    id: str  # 사용자 UUID 문자열 (User UUID as string)
    name: str  # 로그인 이름 (Login name)
    number: str | None = None  # 직원 번호 (Employee number)
    email: str | None = None  # 이메일 (Email)
    role: str  # 역할 — user | manager | admin (Role)
    active: bool  # 활성 여부 (Active flag)
    status: bool  # 승인 여부 (Approval flag)
    region: str | None = None  # 지역 (Region)
    title: str | None = None  # 직함 (Job title)
    shift: int | None = None  # 근무조 (Shift)
    contract_start_date: date | None = None  # 계약 시작일 (Contract start date)
    image_url: str | None = None  # 프로필 이미지 공개 URL (Public profile image URL)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema returned by both login flows.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer")
        user: 로그인한 사용자 프로필 (Logged-in user profile)
    """

    access_token: str  # JWT 액세스 토큰 (Access token)
    token_type: str = "bearer"  # 토큰 유형 — Authorization 헤더용 (For Authorization header)
    user: UserProfile  # 사용자 프로필 (User profile)
