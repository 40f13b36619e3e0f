"""근태 API 테스트.

Attendance API tests — check-in/check-out rules, today's status and
history listings with region scope.
"""

from datetime import datetime, timedelta, timezone

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.attendance import AttendanceRecord
from staffhub.services.attendance_service import hours_between
from tests.conftest import auth_header, create_user, make_token

ATTENDANCE_URL = "/api/attendance"


async def _add_record(db: AsyncSession, user, days_ago: int, hours: float | None = 8) -> AttendanceRecord:
    check_in = datetime.now(timezone.utc) - timedelta(days=days_ago, hours=10)
    record = AttendanceRecord(
        user_id=user.id,
        check_in_time=check_in,
        check_out_time=check_in + timedelta(hours=hours) if hours is not None else None,
    )
    db.add(record)
    await db.commit()
    return record


class TestCheckInOut:
    """출근/퇴근."""

    async def test_check_in_then_out(self, client: AsyncClient, staff_token):
        res = await client.post(f"{ATTENDANCE_URL}/check-in", headers=auth_header(staff_token))
        assert res.status_code == 201
        assert res.json()["check_out_time"] is None

        res = await client.post(f"{ATTENDANCE_URL}/check-out", headers=auth_header(staff_token))
        assert res.status_code == 200
        assert res.json()["check_out_time"] is not None
        assert res.json()["hours_worked"] is not None

    async def test_double_check_in(self, client: AsyncClient, staff_token):
        await client.post(f"{ATTENDANCE_URL}/check-in", headers=auth_header(staff_token))
        res = await client.post(f"{ATTENDANCE_URL}/check-in", headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["message"] == "Already checked in today"

    async def test_check_out_without_check_in(self, client: AsyncClient, staff_token):
        res = await client.post(f"{ATTENDANCE_URL}/check-out", headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["message"] == "No active check-in found for today"

    async def test_today_status(self, client: AsyncClient, staff_token):
        res = await client.get(f"{ATTENDANCE_URL}/today-status", headers=auth_header(staff_token))
        assert res.json() == {"checked_in": False, "checked_out": False, "record": None}

        await client.post(f"{ATTENDANCE_URL}/check-in", headers=auth_header(staff_token))
        res = await client.get(f"{ATTENDANCE_URL}/today-status", headers=auth_header(staff_token))
        assert res.json()["checked_in"] is True
        assert res.json()["checked_out"] is False


class TestAttendanceHistory:
    """출퇴근 기록 조회."""

    async def test_list_mine_newest_first(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        await _add_record(db, staff_user, days_ago=3)
        await _add_record(db, staff_user, days_ago=1, hours=7.5)

        res = await client.get(f"{ATTENDANCE_URL}/mine", headers=auth_header(staff_token))
        assert res.status_code == 200
        records = res.json()
        assert len(records) == 2
        assert records[0]["hours_worked"] == 7.5
        assert records[0]["check_in_time"] > records[1]["check_in_time"]

    async def test_list_mine_limit(self, client: AsyncClient, db: AsyncSession, staff_user, staff_token):
        for days in range(1, 4):
            await _add_record(db, staff_user, days_ago=days)
        res = await client.get(f"{ATTENDANCE_URL}/mine", params={"limit": 2}, headers=auth_header(staff_token))
        assert len(res.json()) == 2

    async def test_reversed_range(self, client: AsyncClient, staff_token):
        res = await client.get(
            f"{ATTENDANCE_URL}/mine",
            params={"startDate": "2030-06-10", "endDate": "2030-06-01"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_all_scoped_by_region_for_managers(
        self, client: AsyncClient, db: AsyncSession, staff_user, manager_token, admin_token
    ):
        far = await create_user(db, "Far Fatos", region="Prishtina")
        await _add_record(db, staff_user, days_ago=1)
        await _add_record(db, far, days_ago=1)

        res = await client.get(f"{ATTENDANCE_URL}/all", headers=auth_header(manager_token))
        assert [r["user_name"] for r in res.json()] == ["Arta Krasniqi"]

        res = await client.get(f"{ATTENDANCE_URL}/all", headers=auth_header(admin_token))
        assert len(res.json()) == 2

        res = await client.get(
            f"{ATTENDANCE_URL}/all", params={"userId": str(far.id)}, headers=auth_header(admin_token)
        )
        assert [r["user_name"] for r in res.json()] == ["Far Fatos"]

    async def test_manager_without_region_sees_nothing(self, client: AsyncClient, db: AsyncSession):
        drifter = await create_user(db, "Drifter Dren", region=None)
        unassigned = await create_user(db, "Unassigned Uran", role="manager", region=None)
        await _add_record(db, drifter, days_ago=1)

        res = await client.get(f"{ATTENDANCE_URL}/all", headers=auth_header(make_token(unassigned)))
        assert res.status_code == 200
        assert res.json() == []

    async def test_all_forbidden_for_staff(self, client: AsyncClient, staff_user):
        res = await client.get(f"{ATTENDANCE_URL}/all", headers=auth_header(make_token(staff_user)))
        assert res.status_code == 403


def test_hours_between_handles_naive_values():
    check_in = datetime(2030, 1, 15, 8, 0)
    check_out = datetime(2030, 1, 15, 16, 30, tzinfo=timezone.utc)
    assert hours_between(check_in, check_out) == 8.5
    assert hours_between(check_in, None) is None
