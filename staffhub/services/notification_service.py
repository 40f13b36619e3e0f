"""알림 서비스 — Expo 푸시 발송 및 알림 이력.

Notification Service — Expo push delivery, notification history and
batched broadcasts.

Delivery is best effort: every public send method catches transport and
persistence failures, logs them and reports them in its result. Routers
call these methods only after the workflow change has been committed, so
a failing provider can never undo or alter a transition.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Sequence
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.config import settings
from staffhub.models.notification import Notification
from staffhub.models.user import User
from staffhub.repositories.notification_repository import notification_repository
from staffhub.repositories.user_repository import user_repository

logger = logging.getLogger(__name__)

# Expo 푸시 토큰 형식 — ExponentPushToken[...] or ExpoPushToken[...]
_EXPO_TOKEN_PATTERN = re.compile(r"^Expo(nent)?PushToken\[.+\]$")


def is_expo_push_token(token: str | None) -> bool:
    """Expo 푸시 토큰 형식 여부."""
    return bool(token) and bool(_EXPO_TOKEN_PATTERN.match(token))


@dataclass
class PushResult:
    """단일 푸시 발송 결과 — Outcome of a single push."""

    success: bool
    error: str | None = None


@dataclass
class BatchResult:
    """일괄 발송 결과 — Outcome of a broadcast."""

    sent_count: int = 0
    failed_count: int = 0


class NotificationService:
    """알림 서비스.

    Notification service providing Expo push delivery, history
    read/unread operations and workflow notification helpers.
    """

    # --- Expo 전송 (Expo transport) ---

    @staticmethod
    def _build_message(token: str, title: str, body: str, data: dict[str, Any] | None) -> dict[str, Any]:
        return {
            "to": token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data or {},
            "priority": "high",
            "badge": 1,
        }

    async def _post_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Expo 푸시 API로 메시지를 전송하고 티켓 목록을 반환합니다.

        POST a list of messages to the Expo push API and return one ticket
        per message.

        Raises:
            httpx.HTTPError: 전송 실패 또는 오류 응답 (Transport failure or error status)
        """
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if settings.EXPO_ACCESS_TOKEN:
            headers["Authorization"] = f"Bearer {settings.EXPO_ACCESS_TOKEN}"

        async with httpx.AsyncClient(timeout=settings.PUSH_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.EXPO_PUSH_URL, json=messages, headers=headers)
            response.raise_for_status()
        return response.json().get("data", [])

    async def _record_history(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        body: str,
        data: dict[str, Any] | None,
    ) -> None:
        """알림 이력을 저장합니다. 실패 시 로그 후 롤백합니다."""
        try:
            await notification_repository.create_notification(db, user_id, title, body, data)
        except SQLAlchemyError:
            logger.exception("Failed to save notification history for user %s", user_id)
            await db.rollback()

    # --- 발송 (Sending) ---

    async def send_push_notification(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> PushResult:
        """단일 사용자에게 푸시 알림을 발송합니다. 예외를 던지지 않습니다.

        Send a push notification to one user and record it in the user's
        history. Never raises.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 수신자 UUID (Recipient UUID)
            title: 제목 (Title)
            body: 본문 (Body)
            data: 부가 데이터 (Extra payload)

        Returns:
            PushResult: 발송 결과 (Delivery outcome)
        """
        try:
            user: User | None = await user_repository.get_by_id(db, user_id)
        except SQLAlchemyError:
            logger.exception("Failed to load push recipient %s", user_id)
            await db.rollback()
            return PushResult(success=False, error="Recipient lookup failed")

        if user is None or not user.push_token:
            logger.info("No push token found for user %s", user_id)
            return PushResult(success=False, error="No push token found")

        if not is_expo_push_token(user.push_token):
            logger.warning("Invalid Expo push token for user %s", user_id)
            return PushResult(success=False, error="Invalid push token")

        try:
            tickets = await self._post_messages([self._build_message(user.push_token, title, body, data)])
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Push delivery to user %s failed: %s", user_id, exc)
            return PushResult(success=False, error=str(exc) or type(exc).__name__)

        ticket: dict[str, Any] = tickets[0] if tickets else {}
        if ticket.get("status") == "error":
            logger.warning("Expo rejected push to user %s: %s", user_id, ticket.get("message"))
            return PushResult(success=False, error=ticket.get("message", "Push rejected"))

        await self._record_history(db, user_id, title, body, data)
        return PushResult(success=True)

    async def send_batch_notifications(
        self,
        db: AsyncSession,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
        role: str | None = None,
        region: str | None = None,
    ) -> BatchResult:
        """활성 사용자에게 청크 단위로 푸시를 일괄 발송합니다.

        Broadcast to active users with a push token, in chunks of
        PUSH_BATCH_SIZE with a PUSH_BATCH_DELAY_MS pause between chunks.
        role and region narrow the audience only when provided.

        Returns:
            BatchResult: 성공/실패 수 (Sent and failed counts)
        """
        result = BatchResult()
        try:
            audience: Sequence[User] = await user_repository.get_push_audience(db, role=role, region=region)
        except SQLAlchemyError:
            logger.exception("Failed to load push audience")
            await db.rollback()
            return result

        recipients: list[User] = []
        for user in audience:
            if is_expo_push_token(user.push_token):
                recipients.append(user)
            else:
                result.failed_count += 1

        size: int = max(settings.PUSH_BATCH_SIZE, 1)
        for start in range(0, len(recipients), size):
            chunk: list[User] = recipients[start:start + size]
            messages = [self._build_message(u.push_token, title, body, data) for u in chunk]
            try:
                tickets = await self._post_messages(messages)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Push batch %d failed: %s", start // size + 1, exc)
                result.failed_count += len(chunk)
            else:
                for index, user in enumerate(chunk):
                    ticket = tickets[index] if index < len(tickets) else {}
                    if ticket.get("status") == "error":
                        result.failed_count += 1
                        continue
                    result.sent_count += 1
                    await self._record_history(db, user.id, title, body, data)

            # 청크 간 지연 — Pause between chunks to respect provider rate limits
            if start + size < len(recipients):
                await asyncio.sleep(settings.PUSH_BATCH_DELAY_MS / 1000)

        return result

    async def commit_history(self, db: AsyncSession) -> None:
        """발송 후 기록된 알림 이력을 커밋합니다. 실패 시 로그 후 롤백.

        Commit history rows recorded while sending. Runs after the
        workflow change is already committed, so a failure here is
        logged and rolled back instead of failing the request.
        """
        try:
            await db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to commit notification history")
            await db.rollback()

    # --- 워크플로 알림 (Workflow helpers) ---

    async def notify_user(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> PushResult:
        """워크플로 이벤트를 사용자에게 알립니다 (커밋 후 호출)."""
        if user_id is None:
            return PushResult(success=False, error="No recipient")
        return await self.send_push_notification(db, user_id, title, body, data)

    async def notify_role(
        self,
        db: AsyncSession,
        role: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
        region: str | None = None,
    ) -> BatchResult:
        """역할(및 지역)의 모든 활성 사용자에게 알립니다.

        Notify every active user holding the role, optionally only within a region.
        """
        result = BatchResult()
        try:
            recipients: Sequence[User] = await user_repository.get_active_by_role(db, role, region)
        except SQLAlchemyError:
            logger.exception("Failed to load %s recipients", role)
            await db.rollback()
            return result

        for recipient in recipients:
            outcome = await self.send_push_notification(db, recipient.id, title, body, data)
            if outcome.success:
                result.sent_count += 1
            else:
                result.failed_count += 1
        return result

    # --- 이력 조회/읽음 처리 (History) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다."""
        return await notification_repository.get_user_notifications(db, user_id, page, per_page)

    async def get_unread_count(self, db: AsyncSession, user_id: UUID) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다."""
        return await notification_repository.get_unread_count(db, user_id)

    async def mark_read(self, db: AsyncSession, notification_id: UUID, user_id: UUID) -> bool:
        """단일 알림을 읽음 처리합니다."""
        return await notification_repository.mark_read(db, notification_id, user_id)

    async def mark_all_read(self, db: AsyncSession, user_id: UUID) -> int:
        """사용자의 모든 읽지 않은 알림을 읽음 처리합니다."""
        return await notification_repository.mark_all_read(db, user_id)

    @staticmethod
    def build_response(notification: Notification) -> dict:
        """알림 응답 딕셔너리를 구성합니다."""
        return {
            "id": str(notification.id),
            "title": notification.title,
            "body": notification.body,
            "data": notification.data,
            "is_read": notification.is_read,
            "created_at": notification.created_at,
        }


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()
