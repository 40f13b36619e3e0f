"""인증 서비스 — 회원가입, 로그인, 로그아웃 비즈니스 로직.

Auth Service — Business logic for signup, web/mobile login, logout,
push token registration and profile retrieval.

Account gates:
    active=False → 모든 로그인 차단 (blocks every login, 403)
    status=False → 모바일 로그인 차단, 관리자 승인 대기 (blocks mobile login until approved, 403)
"""

from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.user import ROLE_USER, User
from staffhub.repositories.user_repository import user_repository
from staffhub.schemas.auth import LoginRequest, MobileLoginRequest, SignupRequest
from staffhub.services.notification_service import is_expo_push_token
from staffhub.services.storage_service import storage_service
from staffhub.utils.exceptions import AuthorizationError, ConflictError, UnauthorizedError, ValidationError
from staffhub.utils.jwt import create_access_token
from staffhub.utils.password import hash_password, verify_password


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    async def signup(self, db: AsyncSession, data: SignupRequest) -> User:
        """회원가입 — 승인 대기 상태의 사용자를 생성합니다.

        Register a new user awaiting admin approval (status=False).

        Raises:
            ConflictError: 이미 존재하는 이름 (Name already taken)
        """
        if await user_repository.get_by_name(db, data.name) is not None:
            raise ConflictError("User already exists")

        return await user_repository.create(
            db,
            {
                "name": data.name,
                "password_hash": hash_password(data.password),
                "number": data.number,
                "email": data.email,
                "title": data.title,
                "role": ROLE_USER,
                "active": True,
                "status": False,
            },
        )

    async def _authenticate(self, db: AsyncSession, data: LoginRequest) -> User:
        user: User | None = await user_repository.get_by_name(db, data.name)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid name or password")
        if not user.active:
            raise AuthorizationError("Account is inactive. Please contact support.")
        return user

    async def login(self, db: AsyncSession, data: LoginRequest) -> dict:
        """웹 로그인 — 단기 토큰을 발급합니다.

        Web login issuing a token valid for JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

        Raises:
            UnauthorizedError: 이름 또는 비밀번호 불일치 (Bad credentials)
            AuthorizationError: 비활성 계정 (Inactive account)
        """
        user: User = await self._authenticate(db, data)
        token: str = create_access_token({"sub": str(user.id), "role": user.role})
        return {"access_token": token, "token_type": "bearer", "user": self.build_profile(user)}

    async def mobile_login(self, db: AsyncSession, data: MobileLoginRequest) -> dict:
        """모바일 로그인 — 장기 토큰 발급 및 푸시 토큰 등록.

        Mobile login issuing a long-lived token. Unapproved accounts are
        refused. A valid Expo push token in the request is registered;
        an invalid one is ignored.

        Raises:
            UnauthorizedError: 이름 또는 비밀번호 불일치 (Bad credentials)
            AuthorizationError: 비활성 또는 승인 대기 계정 (Inactive or unapproved account)
        """
        user: User = await self._authenticate(db, data)
        if not user.status:
            raise AuthorizationError("Account is pending approval")

        if data.push_token and is_expo_push_token(data.push_token):
            await user_repository.set_push_token(db, user.id, data.push_token, data.device_type)

        token: str = create_access_token({"sub": str(user.id), "role": user.role}, mobile=True)
        return {"access_token": token, "token_type": "bearer", "user": self.build_profile(user)}

    async def logout(self, db: AsyncSession, user: User) -> None:
        """로그아웃 — 푸시 토큰을 해제합니다."""
        await user_repository.set_push_token(db, user.id, None)

    async def register_push_token(
        self,
        db: AsyncSession,
        user: User,
        push_token: str,
        device_type: str | None = None,
    ) -> None:
        """푸시 토큰을 등록합니다.

        Raises:
            ValidationError: Expo 토큰 형식이 아님 (Not an Expo push token)
        """
        if not is_expo_push_token(push_token):
            raise ValidationError("Invalid Expo push token")
        await user_repository.set_push_token(db, user.id, push_token, device_type)

    @staticmethod
    def build_profile(user: User) -> dict:
        """사용자 프로필 응답 딕셔너리를 구성합니다."""
        return {
            "id": str(user.id),
            "name": user.name,
            "number": user.number,
            "email": user.email,
            "role": user.role,
            "active": user.active,
            "status": user.status,
            "region": user.region,
            "title": user.title,
            "shift": user.shift,
            "contract_start_date": user.contract_start_date,
            "image_url": storage_service.get_public_url(user.profile_image_key),
        }


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
