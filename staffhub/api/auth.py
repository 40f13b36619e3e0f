"""인증 라우터 — 회원가입, 웹/모바일 로그인, 로그아웃, 프로필.

Auth Router — Signup, web and mobile login, logout and profile endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.schemas.auth import (
    LoginRequest,
    MobileLoginRequest,
    SignupRequest,
    TokenResponse,
    UserProfile,
)
from staffhub.schemas.common import MessageResponse
from staffhub.services.auth_service import auth_service
from staffhub.utils.email import send_registration_pending_email

router: APIRouter = APIRouter()


@router.post("/signup", response_model=UserProfile, status_code=201)
async def signup(
    data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """회원가입 — 관리자 승인 대기 계정을 생성합니다.

    Register an account awaiting admin approval. A confirmation email is
    sent best-effort when the user gave an address.
    """
    user: User = await auth_service.signup(db, data)
    await db.commit()
    if user.email:
        await send_registration_pending_email(user.email, user.name)
    return auth_service.build_profile(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """웹 로그인."""
    return await auth_service.login(db, data)


@router.post("/mobile-login", response_model=TokenResponse)
async def mobile_login(
    data: MobileLoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """모바일 로그인 — 장기 토큰 발급 및 푸시 토큰 등록.

    Mobile login; approved accounts only. Registers the push token when given.
    """
    result: dict = await auth_service.mobile_login(db, data)
    await db.commit()
    return result


@router.post("/logout", response_model=MessageResponse)
async def logout(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    """로그아웃 — 푸시 토큰을 해제합니다."""
    await auth_service.logout(db, current_user)
    await db.commit()
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=UserProfile)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """현재 사용자 프로필."""
    return auth_service.build_profile(current_user)
