"""사용자 레포지토리 — 사용자 관련 DB 쿼리 담당.

User Repository — Handles all user-related database queries:
lookups by name, pending signups, role/region audiences for
notifications, and distinct title/region value lists.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.user import User
from staffhub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 레포지토리.

    User repository with name lookup and audience queries.

    Extends:
        BaseRepository[User]
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_name(self, db: AsyncSession, name: str) -> User | None:
        """로그인 이름으로 사용자를 조회합니다.

        Retrieve a user by login name.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            name: 로그인 이름 (Login name)

        Returns:
            User | None: 조회된 사용자 또는 None (Found user or None)
        """
        result = await db.execute(select(User).where(User.name == name))
        return result.scalar_one_or_none()

    async def list_users(
        self,
        db: AsyncSession,
        role: str | None = None,
        region: str | None = None,
        status: bool | None = None,
    ) -> Sequence[User]:
        """필터 조건으로 사용자 목록을 조회합니다.

        List users; each filter narrows only when provided.
        Ordered by name.
        """
        query: Select = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if region is not None:
            query = query.where(User.region == region)
        if status is not None:
            query = query.where(User.status.is_(status))
        result = await db.execute(query.order_by(User.name))
        return result.scalars().all()

    async def get_active_by_role(
        self,
        db: AsyncSession,
        role: str,
        region: str | None = None,
    ) -> Sequence[User]:
        """역할(및 지역)에 해당하는 활성 사용자를 조회합니다.

        Active users holding a role, optionally restricted to a region.
        Used to address workflow notifications to managers and admins.
        """
        query: Select = select(User).where(User.role == role, User.active.is_(True))
        if region is not None:
            query = query.where(User.region == region)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_push_audience(
        self,
        db: AsyncSession,
        role: str | None = None,
        region: str | None = None,
    ) -> Sequence[User]:
        """푸시 토큰이 있는 활성 사용자를 조회합니다.

        Active users with a registered push token; role and region
        narrow the audience only when provided.
        """
        query: Select = select(User).where(
            User.active.is_(True),
            User.push_token.is_not(None),
        )
        if role is not None:
            query = query.where(User.role == role)
        if region is not None:
            query = query.where(User.region == region)
        result = await db.execute(query.order_by(User.name))
        return result.scalars().all()

    async def set_push_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        push_token: str | None,
        device_type: str | None = None,
    ) -> None:
        """사용자의 푸시 토큰을 설정하거나 해제합니다.

        Set or clear a user's push token.
        """
        values: dict = {"push_token": push_token}
        if push_token is not None:
            values["device_type"] = device_type or "unknown"
        await db.execute(update(User).where(User.id == user_id).values(**values))
        await db.flush()

    async def get_distinct_values(self, db: AsyncSession, column) -> list[str]:
        """컬럼의 고유 값 목록을 조회합니다 (NULL/빈 문자열 제외).

        Distinct non-empty values of a user column, sorted.
        """
        result = await db.execute(
            select(column).where(column.is_not(None), column != "").distinct().order_by(column)
        )
        return [row[0] for row in result.all()]


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
