"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.

JWT Payload Structure:
    {
        "sub": "user_uuid",          # 사용자 ID (User identifier)
        "role": "user",              # 역할 (user | manager | admin)
        "exp": 1234567890,           # 만료 시간 UNIX timestamp (Expiration)
        "type": "access",            # 토큰 유형 (Token type discriminator)
        "client": "web"|"mobile"     # 발급 클라이언트 (Issuing client)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from staffhub.config import settings


def create_access_token(data: dict[str, Any], mobile: bool = False) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token. Mobile tokens live for
    JWT_MOBILE_TOKEN_EXPIRE_DAYS, web tokens for JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

    Args:
        data: JWT 페이로드 데이터 (Payload, typically {"sub": user_id, "role": role})
        mobile: 모바일 앱 토큰 여부 (Issue a long-lived mobile token)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    to_encode: dict[str, Any] = data.copy()
    if mobile:
        expire: datetime = datetime.now(timezone.utc) + timedelta(days=settings.JWT_MOBILE_TOKEN_EXPIRE_DAYS)
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access", "client": "mobile" if mobile else "web"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
