"""근무조 변경 신청 API 테스트.

Shift request API tests — creation rules, the one-pending rule, review
scope and the shift rewrite on approval.
"""

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.shift_request import ShiftRequest
from staffhub.models.user import User
from tests.conftest import auth_header, create_user, make_token

SHIFT_URL = "/api/shift-requests"


async def _create(client: AsyncClient, token: str, shift: int = 2):
    return await client.post(SHIFT_URL, json={"requestedShift": shift}, headers=auth_header(token))


class TestCreateShiftRequest:
    """근무조 변경 신청."""

    async def test_create(self, client: AsyncClient, staff_token):
        res = await _create(client, staff_token)
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "pending"
        assert data["current_shift"] == 1
        assert data["requested_shift"] == 2
        assert data["user_name"] == "Arta Krasniqi"

    async def test_invalid_shift(self, client: AsyncClient, staff_token):
        res = await _create(client, staff_token, shift=3)
        assert res.status_code == 400

    async def test_same_shift(self, client: AsyncClient, staff_token):
        res = await _create(client, staff_token, shift=1)
        assert res.status_code == 400
        assert res.json()["message"] == "You are already assigned to this shift"

    async def test_second_pending_request_conflicts(self, client: AsyncClient, db: AsyncSession, staff_token):
        first = await _create(client, staff_token)
        second = await _create(client, staff_token)
        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json()["message"] == "You already have a pending shift change request"

        count = len((await db.execute(select(ShiftRequest))).scalars().all())
        assert count == 1

    async def test_list_mine(self, client: AsyncClient, staff_token, colleague_token):
        await _create(client, staff_token)
        await _create(client, colleague_token)
        res = await client.get(f"{SHIFT_URL}/mine", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert [r["user_name"] for r in res.json()] == ["Arta Krasniqi"]


class TestReviewShiftRequest:
    """근무조 변경 신청 검토."""

    async def test_approval_rewrites_shift(
        self, client: AsyncClient, db: AsyncSession, staff_user, staff_token, manager_token, push_mock
    ):
        request_id = (await _create(client, staff_token)).json()["id"]
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "approved"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["status"] == "approved"
        assert res.json()["current_shift"] == 2
        assert res.json()["reviewed_by"] is not None

        user = (
            await db.execute(select(User).where(User.id == staff_user.id).execution_options(populate_existing=True))
        ).scalar_one()
        assert user.shift == 2
        assert push_mock.await_count == 1

    async def test_rejection_keeps_shift(self, client: AsyncClient, staff_token, admin_token):
        request_id = (await _create(client, staff_token)).json()["id"]
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "rejected"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 200
        assert res.json()["current_shift"] == 1

        # 거절 후 새 신청 가능 — A new request is allowed once the previous one is decided
        res = await _create(client, staff_token)
        assert res.status_code == 201

    async def test_already_processed(self, client: AsyncClient, staff_token, admin_token):
        request_id = (await _create(client, staff_token)).json()["id"]
        await client.patch(f"{SHIFT_URL}/{request_id}", json={"status": "approved"}, headers=auth_header(admin_token))
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "rejected"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 404

    async def test_manager_outside_region(self, client: AsyncClient, staff_token, other_manager_token):
        request_id = (await _create(client, staff_token)).json()["id"]
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "approved"}, headers=auth_header(other_manager_token)
        )
        assert res.status_code == 403

    async def test_invalid_decision(self, client: AsyncClient, staff_token, admin_token):
        request_id = (await _create(client, staff_token)).json()["id"]
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "pending"}, headers=auth_header(admin_token)
        )
        assert res.status_code == 400

    async def test_staff_cannot_review(self, client: AsyncClient, staff_token, colleague_token):
        request_id = (await _create(client, staff_token)).json()["id"]
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "approved"}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 403

    async def test_list_all_scoped_by_region(
        self, client: AsyncClient, staff_token, manager_token, other_manager_token, admin_token
    ):
        await _create(client, staff_token)

        res = await client.get(f"{SHIFT_URL}/all", headers=auth_header(manager_token))
        assert len(res.json()) == 1
        res = await client.get(f"{SHIFT_URL}/all", headers=auth_header(other_manager_token))
        assert res.json() == []
        res = await client.get(f"{SHIFT_URL}/all", params={"status": "pending"}, headers=auth_header(admin_token))
        assert len(res.json()) == 1

    async def test_manager_without_region_has_no_scope(self, client: AsyncClient, db: AsyncSession):
        drifter = await create_user(db, "Drifter Dren", region=None)
        unassigned = await create_user(db, "Unassigned Uran", role="manager", region=None)
        request_id = (await _create(client, make_token(drifter))).json()["id"]

        res = await client.get(f"{SHIFT_URL}/all", headers=auth_header(make_token(unassigned)))
        assert res.json() == []
        res = await client.patch(
            f"{SHIFT_URL}/{request_id}", json={"status": "approved"}, headers=auth_header(make_token(unassigned))
        )
        assert res.status_code == 403
