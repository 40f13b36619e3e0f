"""알림 API 및 서비스 테스트.

Notification tests — History listing, read state, admin sending and
batch broadcasts with role/region targeting.
"""

import httpx
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.config import settings
from staffhub.models.notification import Notification
from staffhub.repositories.notification_repository import notification_repository
from staffhub.services.notification_service import is_expo_push_token, notification_service
from tests.conftest import auth_header, create_user

NOTIFICATIONS_URL = "/api/notifications"


async def _history_count(db: AsyncSession, user_id) -> int:
    result = await db.execute(select(func.count()).select_from(Notification).where(Notification.user_id == user_id))
    return result.scalar_one()


class TestHistory:
    """알림 이력 조회/읽음 처리."""

    async def test_list_and_unread_count(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        for i in range(3):
            await notification_repository.create_notification(db, staff_user.id, f"Title {i}", "Body")
        await db.commit()

        res = await client.get(NOTIFICATIONS_URL, params={"per_page": 2}, headers=auth_header(staff_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["items"][0]["is_read"] is False

        res = await client.get(f"{NOTIFICATIONS_URL}/unread-count", headers=auth_header(staff_token))
        assert res.json() == {"unread_count": 3}

    async def test_mark_read(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        notification = await notification_repository.create_notification(db, staff_user.id, "Hello", "Body")
        await db.commit()

        res = await client.patch(f"{NOTIFICATIONS_URL}/{notification.id}/read", headers=auth_header(staff_token))
        assert res.status_code == 200
        res = await client.get(f"{NOTIFICATIONS_URL}/unread-count", headers=auth_header(staff_token))
        assert res.json()["unread_count"] == 0

    async def test_mark_read_other_users_notification(
        self, client: AsyncClient, db: AsyncSession, colleague, staff_token
    ):
        notification = await notification_repository.create_notification(db, colleague.id, "Private", "Body")
        await db.commit()

        res = await client.patch(f"{NOTIFICATIONS_URL}/{notification.id}/read", headers=auth_header(staff_token))
        assert res.status_code == 404

    async def test_mark_all_read(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        for i in range(2):
            await notification_repository.create_notification(db, staff_user.id, f"Title {i}", "Body")
        await db.commit()

        res = await client.patch(f"{NOTIFICATIONS_URL}/read-all", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["message"] == "2 notifications marked as read"


class TestSendToUser:
    """단일 사용자 발송."""

    async def test_send_records_history(
        self, client: AsyncClient, db: AsyncSession, admin_token, staff_user, push_mock
    ):
        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-user/{staff_user.id}",
            json={"title": "Reminder", "body": "Team meeting at 10"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json() == {"success": True, "error": None}
        sent = push_mock.await_args.args[0]
        assert sent[0]["to"] == staff_user.push_token
        assert await _history_count(db, staff_user.id) == 1

    async def test_send_without_token(self, client: AsyncClient, db: AsyncSession, admin_token, push_mock):
        silent = await create_user(db, "No Token", push_token=None)
        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-user/{silent.id}",
            json={"title": "Reminder", "body": "Body"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json() == {"success": False, "error": "No push token found"}
        push_mock.assert_not_awaited()
        assert await _history_count(db, silent.id) == 0

    async def test_provider_error_is_reported(
        self, client: AsyncClient, db: AsyncSession, admin_token, staff_user, push_mock
    ):
        push_mock.side_effect = httpx.ConnectError("connection refused")
        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-user/{staff_user.id}",
            json={"title": "Reminder", "body": "Body"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["success"] is False
        assert await _history_count(db, staff_user.id) == 0

    async def test_requires_admin(self, client: AsyncClient, manager_token, staff_user):
        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-user/{staff_user.id}",
            json={"title": "Reminder", "body": "Body"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 403


class TestBroadcast:
    """일괄 발송."""

    async def test_send_all_counts(
        self, client: AsyncClient, db: AsyncSession, admin_token, staff_user, colleague, manager_user
    ):
        await create_user(db, "Broken Token", push_token="not-a-token")
        await create_user(db, "Inactive Ina", active=False)

        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-all",
            json={"title": "Notice", "body": "Office closed Friday"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        # admin, manager, staff, colleague 전송 + 잘못된 토큰 1건 실패
        assert res.json() == {"sent_count": 4, "failed_count": 1}

    async def test_send_batch_role_and_region(
        self, client: AsyncClient, db: AsyncSession, admin_token, manager_user, other_manager, staff_user, push_mock
    ):
        res = await client.post(
            f"{NOTIFICATIONS_URL}/send-batch",
            json={"title": "Managers", "body": "Rota due", "role": "manager", "region": "Gjilan"},
            headers=auth_header(admin_token),
        )
        assert res.json() == {"sent_count": 1, "failed_count": 0}
        assert [m["to"] for m in push_mock.await_args.args[0]] == [manager_user.push_token]

    async def test_batch_is_chunked(self, db: AsyncSession, monkeypatch, push_mock):
        monkeypatch.setattr(settings, "PUSH_BATCH_SIZE", 2)
        for name in ("Ana", "Besa", "Dita", "Era", "Fatos"):
            await create_user(db, name)

        result = await notification_service.send_batch_notifications(db, "Notice", "Body")
        assert result.sent_count == 5
        assert push_mock.await_count == 3

    async def test_rejected_ticket_counts_as_failure(self, db: AsyncSession, push_mock):
        await create_user(db, "Ana")
        await create_user(db, "Besa")

        async def _mixed(messages):
            return [{"status": "ok"}, {"status": "error", "message": "DeviceNotRegistered"}]

        push_mock.side_effect = _mixed
        result = await notification_service.send_batch_notifications(db, "Notice", "Body")
        assert (result.sent_count, result.failed_count) == (1, 1)


def test_expo_token_format():
    assert is_expo_push_token("ExponentPushToken[abc123]")
    assert is_expo_push_token("ExpoPushToken[abc123]")
    assert not is_expo_push_token("abc123")
    assert not is_expo_push_token(None)
