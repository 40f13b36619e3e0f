"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) database, session and
httpx client fixtures. The schema is created from ORM metadata for every
test, so tests never share rows. Outbound push delivery is patched.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOCAL_UPLOADS_DIR"] = tempfile.mkdtemp(prefix="staffhub-uploads-")
os.environ["SMTP_HOST"] = ""
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["CLOUDFRONT_DOMAIN"] = ""
os.environ["PUSH_BATCH_DELAY_MS"] = "0"

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import date  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from staffhub.database import Base, get_db  # noqa: E402
from staffhub.main import app  # noqa: E402
from staffhub.models import *  # noqa: F401,F403,E402 — register all models with metadata
from staffhub.models.user import User  # noqa: E402
from staffhub.models.vacation import Vacation  # noqa: E402
from staffhub.services.notification_service import notification_service  # noqa: E402
from staffhub.utils.jwt import create_access_token  # noqa: E402
from staffhub.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"
PASSWORD = "secret123"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 인메모리 DB."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def push_mock(monkeypatch) -> AsyncMock:
    """Expo 전송을 대체합니다 — 모든 메시지에 ok 티켓을 반환."""
    async def _ok(messages):
        return [{"status": "ok", "id": f"ticket-{i}"} for i, _ in enumerate(messages)]

    mock = AsyncMock(side_effect=_ok)
    monkeypatch.setattr(notification_service, "_post_messages", mock)
    return mock


@pytest_asyncio.fixture
async def client(db: AsyncSession, push_mock) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def create_user(
    db: AsyncSession,
    name: str,
    role: str = "user",
    region: str | None = "Gjilan",
    **extra,
) -> User:
    """승인된 활성 사용자를 생성하고 커밋합니다."""
    values = {
        "name": name,
        "password_hash": hash_password(PASSWORD),
        "role": role,
        "region": region,
        "active": True,
        "status": True,
        "shift": 1,
        "push_token": f"ExponentPushToken[{name.replace(' ', '')}]",
    }
    values.update(extra)
    user = User(**values)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_vacation(
    db: AsyncSession,
    owner: User,
    start: date,
    end: date,
    replacement: User | None = None,
    status: str = "pending_replacement_acceptance",
    replacement_status: str = "pending",
    **extra,
) -> Vacation:
    """휴가 신청 행을 직접 생성합니다."""
    vacation = Vacation(
        user_id=owner.id,
        start_date=start,
        end_date=end,
        replacement_user_id=replacement.id if replacement else None,
        status=status,
        replacement_status=replacement_status,
        **extra,
    )
    db.add(vacation)
    await db.commit()
    await db.refresh(vacation)
    return vacation


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await create_user(db, "Admin One", role="admin", region=None)


@pytest_asyncio.fixture
async def manager_user(db: AsyncSession) -> User:
    """Gjilan 지역 매니저."""
    return await create_user(db, "Manager Gjilan", role="manager", region="Gjilan")


@pytest_asyncio.fixture
async def other_manager(db: AsyncSession) -> User:
    """다른 지역(Prishtina) 매니저."""
    return await create_user(db, "Manager Prishtina", role="manager", region="Prishtina")


@pytest_asyncio.fixture
async def staff_user(db: AsyncSession) -> User:
    return await create_user(db, "Arta Krasniqi")


@pytest_asyncio.fixture
async def colleague(db: AsyncSession) -> User:
    """같은 지역 동료 — 대체자 후보."""
    return await create_user(db, "Blerim Hoxha")


def make_token(user: User, mobile: bool = False) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role}, mobile=mobile)


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def manager_token(manager_user) -> str:
    return make_token(manager_user)


@pytest.fixture
def other_manager_token(other_manager) -> str:
    return make_token(other_manager)


@pytest.fixture
def staff_token(staff_user) -> str:
    return make_token(staff_user)


@pytest.fixture
def colleague_token(colleague) -> str:
    return make_token(colleague)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
