"""알림 이력 레포지토리.

Notification history repository — Per-user history rows written when a
push is accepted by the provider, plus read-state bookkeeping.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from staffhub.models.notification import Notification
from staffhub.repositories.base import BaseRepository


def _unread_of(user_id: UUID) -> list[ColumnElement[bool]]:
    return [Notification.user_id == user_id, Notification.is_read.is_(False)]


class NotificationRepository(BaseRepository[Notification]):
    """알림 이력 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Notification)

    async def get_user_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """사용자 알림을 최신순으로 페이지 조회합니다.

        Page through a user's history, newest first. Returns (items, total).
        """
        history: Select = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id)
        )
        return await self.get_paginated(db, history, page, per_page)

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count()).select_from(Notification).where(*_unread_of(user_id))
        )
        return result.scalar() or 0

    async def _set_read(self, db: AsyncSession, *conditions: ColumnElement[bool]) -> int:
        result = await db.execute(
            update(Notification)
            .where(*conditions)
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user_id: UUID) -> bool:
        """본인 알림 1건을 읽음 처리합니다. 타인 알림이면 False."""
        changed: int = await self._set_read(
            db, Notification.id == notification_id, Notification.user_id == user_id
        )
        return changed > 0

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        """읽지 않은 알림을 모두 읽음 처리하고 건수를 반환합니다."""
        return await self._set_read(db, *_unread_of(user_id))

    async def create_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """수신자 이력에 알림 1건을 기록합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 수신자 UUID (Recipient UUID)
            title: 제목 (Title)
            body: 본문 (Body)
            data: 푸시와 함께 전달된 부가 데이터 (Payload delivered with the push)
        """
        return await self.create(db, {"user_id": user_id, "title": title, "body": body, "data": data})


# 싱글턴 인스턴스 — Singleton instance
notification_repository: NotificationRepository = NotificationRepository()
