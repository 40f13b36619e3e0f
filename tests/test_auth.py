"""인증 API 테스트 — 회원가입, 웹/모바일 로그인, 로그아웃, 프로필.

Auth API tests — Signup, web and mobile login, logout, profile and
push token registration.
"""

from unittest.mock import AsyncMock

import jwt
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.config import settings
from staffhub.models.user import User
from tests.conftest import PASSWORD, auth_header, create_user

AUTH = "/api/auth"


# ===== Signup =====

class TestSignup:
    """회원가입 테스트."""

    async def test_signup_creates_pending_user(self, client: AsyncClient, db: AsyncSession, monkeypatch):
        """가입 시 승인 대기 상태로 생성되고 안내 메일 발송."""
        mail = AsyncMock(return_value=True)
        monkeypatch.setattr("staffhub.api.auth.send_registration_pending_email", mail)

        res = await client.post(f"{AUTH}/signup", json={
            "name": "New Nora",
            "password": "nora1234",
            "email": "nora@example.com",
        })
        assert res.status_code == 201
        data = res.json()
        assert data["status"] is False
        assert data["role"] == "user"
        mail.assert_awaited_once_with("nora@example.com", "New Nora")

        user = (await db.execute(select(User).where(User.name == "New Nora"))).scalar_one()
        assert user.password_hash != "nora1234"

    async def test_signup_duplicate_name(self, client: AsyncClient, staff_user):
        res = await client.post(f"{AUTH}/signup", json={"name": staff_user.name, "password": "whatever1"})
        assert res.status_code == 400
        assert res.json()["message"] == "User already exists"

    async def test_signup_short_password(self, client: AsyncClient):
        """검증 실패는 400 + message."""
        res = await client.post(f"{AUTH}/signup", json={"name": "Shorty", "password": "123"})
        assert res.status_code == 400
        assert "password" in res.json()["message"]


# ===== Login =====

class TestLogin:
    """웹/모바일 로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, staff_user):
        res = await client.post(f"{AUTH}/login", json={"name": staff_user.name, "password": PASSWORD})
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["name"] == staff_user.name

        payload = jwt.decode(data["access_token"], settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload["sub"] == str(staff_user.id)
        assert payload["client"] == "web"

    async def test_login_wrong_password(self, client: AsyncClient, staff_user):
        res = await client.post(f"{AUTH}/login", json={"name": staff_user.name, "password": "wrong-password"})
        assert res.status_code == 401

    async def test_login_unknown_user(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/login", json={"name": "Nobody", "password": "whatever"})
        assert res.status_code == 401

    async def test_login_inactive_user(self, client: AsyncClient, db: AsyncSession):
        await create_user(db, "Inactive Ina", active=False)
        res = await client.post(f"{AUTH}/login", json={"name": "Inactive Ina", "password": PASSWORD})
        assert res.status_code == 403

    async def test_mobile_login_registers_push_token(self, client: AsyncClient, db: AsyncSession, staff_user):
        res = await client.post(f"{AUTH}/mobile-login", json={
            "name": staff_user.name,
            "password": PASSWORD,
            "pushToken": "ExponentPushToken[new-device]",
            "deviceType": "android",
        })
        assert res.status_code == 200
        payload = jwt.decode(
            res.json()["access_token"], settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        assert payload["client"] == "mobile"

        await db.refresh(staff_user)
        assert staff_user.push_token == "ExponentPushToken[new-device]"
        assert staff_user.device_type == "android"

    async def test_mobile_login_pending_account(self, client: AsyncClient, db: AsyncSession):
        await create_user(db, "Pending Pema", status=False)
        res = await client.post(f"{AUTH}/mobile-login", json={"name": "Pending Pema", "password": PASSWORD})
        assert res.status_code == 403
        assert res.json()["message"] == "Account is pending approval"


# ===== Session =====

class TestSession:
    """프로필, 로그아웃, 푸시 토큰."""

    async def test_profile(self, client: AsyncClient, staff_token, staff_user):
        res = await client.get(f"{AUTH}/profile", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["id"] == str(staff_user.id)
        assert res.json()["region"] == "Gjilan"

    async def test_profile_without_token(self, client: AsyncClient):
        res = await client.get(f"{AUTH}/profile")
        assert res.status_code == 401

    async def test_profile_with_garbage_token(self, client: AsyncClient):
        res = await client.get(f"{AUTH}/profile", headers=auth_header("not-a-jwt"))
        assert res.status_code == 401

    async def test_logout_clears_push_token(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        res = await client.post(f"{AUTH}/logout", headers=auth_header(staff_token))
        assert res.status_code == 200
        await db.refresh(staff_user)
        assert staff_user.push_token is None

    async def test_register_push_token(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        res = await client.post(
            "/api/users/push-token",
            json={"pushToken": "ExpoPushToken[abc123]", "deviceType": "ios"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        await db.refresh(staff_user)
        assert staff_user.push_token == "ExpoPushToken[abc123]"

    async def test_register_invalid_push_token(self, client: AsyncClient, staff_token):
        res = await client.post(
            "/api/users/push-token",
            json={"pushToken": "not-a-token"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400


async def test_health(client: AsyncClient):
    res = await client.get("/health")
    assert res.json() == {"status": "ok"}
