"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definitions.
A single users table holds employees, regional managers and admins;
the role column drives authorization and the region column scopes
manager visibility and replacement eligibility.

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, Boolean, Date, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.database import Base

# 역할 값 — Role values
ROLE_USER: str = "user"
ROLE_MANAGER: str = "manager"
ROLE_ADMIN: str = "admin"
ROLES: tuple[str, ...] = (ROLE_USER, ROLE_MANAGER, ROLE_ADMIN)

# 근무조 값 — Fixed shift values
SHIFTS: tuple[int, ...] = (1, 2)


class User(Base):
    """사용자 모델 — 직원, 지역 매니저, 관리자 계정.

    User model — Employee, regional manager and admin accounts.

    Lifecycle:
        signup → status=False (승인 대기, awaiting approval)
        admin accept → status=True, region/shift/contract_start_date 지정
        hard delete → 행과 프로필 이미지 삭제 (row and stored image removed)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 로그인 이름, 전역 고유 (Login name, globally unique)
        password_hash: bcrypt 해시 (bcrypt-hashed password)
        number: 직원 번호/전화번호 (Employee or phone number)
        email: 이메일 (Email address, optional)
        role: 역할 (user | manager | admin)
        active: 활성 여부 — False면 모든 인증 차단 (False blocks all authentication)
        status: 승인 여부 — False면 모바일 로그인 차단 (False blocks mobile login)
        region: 지역 (Region, scoping unit for managers and replacements)
        title: 직함 (Job title)
        shift: 근무조 1 또는 2 (Assigned shift)
        contract_start_date: 계약 시작일 (Contract start date)
        profile_image_key: S3 객체 키 (Profile image object key)
        push_token: Expo 푸시 토큰 (Expo push token)
        device_type: 기기 유형 (Device type reported at mobile login)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이름 — Login name (unique)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 역할 — user | manager | admin
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 근무조 — 1 or 2, 미지정 시 NULL (NULL until assigned)
    shift: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contract_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    profile_image_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    push_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    device_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
