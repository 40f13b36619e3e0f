"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
Provides reusable dependencies for extracting the current user from JWT
and enforcing role-based access control on API endpoints.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    4. 비활성 사용자는 403 (Inactive users are refused with 403)

Authorization Flow (require_role):
    역할이 허용 목록에 없으면 403 Forbidden 반환
    (Returns 403 when the user's role is not in the allowed set)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.database import get_db
from staffhub.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from staffhub.repositories.user_repository import user_repository
from staffhub.utils.exceptions import AuthorizationError, UnauthorizedError
from staffhub.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더 누락 시 직접 401 처리
# (Extracts the bearer token; a missing header is turned into 401 below)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.

    Raises:
        UnauthorizedError(401): 토큰 누락/무효/만료 또는 사용자 없음
                                (Missing, invalid or expired token, or unknown user)
        AuthorizationError(403): 비활성 계정 (Inactive account)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type")
        user_id: UUID = UUID(str(payload["sub"]))
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise UnauthorizedError("Invalid or expired token")

    user: User | None = await user_repository.get_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    if not user.active:
        raise AuthorizationError("Account is inactive. Please contact support.")
    return user


def require_role(*roles: str) -> Callable[..., Awaitable[User]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing that the current user holds one of the
    given roles.

    Args:
        roles: 허용 역할 목록 (Allowed roles)

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (FastAPI dependency function that returns User or raises 403)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured role dependencies
require_admin = require_role(ROLE_ADMIN)                # 관리자만 (Admin only)
require_manager = require_role(ROLE_MANAGER)            # 매니저만 (Manager only)
require_staff_lead = require_role(ROLE_ADMIN, ROLE_MANAGER)  # 관리자 + 매니저 (Admin or manager)
