"""휴가 워크플로 API 테스트.

Vacation workflow API tests — Creation rules, replacement eligibility,
the three approval stages, region scope, read receipts and
notification isolation.
"""

import asyncio
from datetime import date

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from staffhub.database import Base
from staffhub.models.notification import Notification
from staffhub.models.vacation import Vacation
from staffhub.services.notification_service import notification_service
from staffhub.services.vacation_service import vacation_service
from staffhub.utils.exceptions import AlreadyProcessedError
from tests.conftest import auth_header, create_user, create_vacation, make_token

VACATIONS_URL = "/api/vacations"

JUNE_10 = date(2030, 6, 10)
JUNE_12 = date(2030, 6, 12)
JUNE_15 = date(2030, 6, 15)
JUNE_16 = date(2030, 6, 16)
JUNE_20 = date(2030, 6, 20)


def _payload(replacement_id, start: date = JUNE_10, end: date = JUNE_15) -> dict:
    return {
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "replacementUserId": str(replacement_id),
    }


class TestCreateVacation:
    """휴가 신청 생성."""

    async def test_create_vacation(self, client: AsyncClient, staff_token, colleague):
        res = await client.post(VACATIONS_URL, json=_payload(colleague.id), headers=auth_header(staff_token))
        assert res.status_code == 201
        vacation = res.json()["vacation"]
        assert vacation["status"] == "pending_replacement_acceptance"
        assert vacation["replacement_status"] == "pending"
        assert vacation["replacement_name"] == "Blerim Hoxha"

    async def test_self_replacement_rejected(self, client: AsyncClient, staff_token, staff_user):
        res = await client.post(VACATIONS_URL, json=_payload(staff_user.id), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["message"] == "Cannot select yourself as replacement"

    async def test_missing_replacement(self, client: AsyncClient, staff_token):
        res = await client.post(
            VACATIONS_URL,
            json={"startDate": "2030-06-10", "endDate": "2030-06-15"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_end_before_start(self, client: AsyncClient, staff_token, colleague):
        res = await client.post(
            VACATIONS_URL,
            json=_payload(colleague.id, start=JUNE_15, end=JUNE_10),
            headers=auth_header(staff_token),
        )
        assert res.status_code == 400

    async def test_inactive_replacement_not_found(self, client: AsyncClient, db: AsyncSession, staff_token):
        inactive = await create_user(db, "Inactive Ina", active=False)
        res = await client.post(VACATIONS_URL, json=_payload(inactive.id), headers=auth_header(staff_token))
        assert res.status_code == 404

    async def test_overlapping_request_conflict(
        self, client: AsyncClient, db: AsyncSession, staff_user, staff_token, colleague
    ):
        await create_vacation(db, staff_user, JUNE_15, JUNE_20, replacement=colleague)
        res = await client.post(VACATIONS_URL, json=_payload(colleague.id), headers=auth_header(staff_token))
        assert res.status_code == 400
        assert res.json()["message"] == "Vacation dates overlap with existing request"

    async def test_rejected_request_does_not_block(
        self, client: AsyncClient, db: AsyncSession, staff_user, staff_token, colleague
    ):
        await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague, status="rejected")
        res = await client.post(VACATIONS_URL, json=_payload(colleague.id), headers=auth_header(staff_token))
        assert res.status_code == 201

    async def test_requires_auth(self, client: AsyncClient):
        res = await client.post(VACATIONS_URL, json={})
        assert res.status_code == 401


class TestReplacementEligibility:
    """대체자 후보 조회."""

    async def test_dates_required(self, client: AsyncClient, staff_token):
        res = await client.get(f"{VACATIONS_URL}/replacements", headers=auth_header(staff_token))
        assert res.status_code == 400

    async def test_busy_users_excluded(
        self, client: AsyncClient, db: AsyncSession, staff_token, colleague
    ):
        away = await create_user(db, "Away Agon")
        covering = await create_user(db, "Covering Drita")
        someone = await create_user(db, "Someone Else")
        other_region = await create_user(db, "Far Fatos", region="Prishtina")
        await create_vacation(db, away, JUNE_10, JUNE_15, replacement=colleague, status="approved",
                              replacement_status="accepted")
        await create_vacation(db, someone, JUNE_12, JUNE_12, replacement=covering,
                              status="pending_admin_approval", replacement_status="accepted")

        res = await client.get(
            f"{VACATIONS_URL}/replacements",
            params={"startDate": "2030-06-11", "endDate": "2030-06-13"},
            headers=auth_header(staff_token),
        )
        assert res.status_code == 200
        names = [c["name"] for c in res.json()]
        assert "Away Agon" not in names
        assert "Covering Drita" not in names
        assert other_region.name not in names
        assert "Arta Krasniqi" not in names
        assert "Someone Else" in names
        assert names == sorted(names)

    async def test_adjacent_range_is_free(
        self, client: AsyncClient, db: AsyncSession, staff_token, colleague
    ):
        away = await create_user(db, "Away Agon")
        await create_vacation(db, away, JUNE_10, JUNE_15, replacement=colleague, status="approved",
                              replacement_status="accepted")

        res = await client.get(
            f"{VACATIONS_URL}/replacements",
            params={"startDate": JUNE_16.isoformat(), "endDate": JUNE_20.isoformat()},
            headers=auth_header(staff_token),
        )
        names = [c["name"] for c in res.json()]
        assert "Away Agon" in names
        assert "Blerim Hoxha" in names


    async def test_requester_without_region_has_no_candidates(self, client: AsyncClient, db: AsyncSession):
        drifter = await create_user(db, "Drifter Dren", region=None)
        await create_user(db, "Wanderer Vesa", region=None)

        res = await client.get(
            f"{VACATIONS_URL}/replacements",
            params={"startDate": JUNE_10.isoformat(), "endDate": JUNE_15.isoformat()},
            headers=auth_header(make_token(drifter)),
        )
        assert res.status_code == 200
        assert res.json() == []


class TestWorkflow:
    """3단계 승인 워크플로."""

    async def test_gjilan_end_to_end(
        self,
        client: AsyncClient,
        staff_token,
        colleague_token,
        manager_token,
        admin_token,
        colleague,
        push_mock,
    ):
        res = await client.post(VACATIONS_URL, json=_payload(colleague.id), headers=auth_header(staff_token))
        vacation_id = res.json()["vacation"]["id"]

        res = await client.get(f"{VACATIONS_URL}/replacement-requests", headers=auth_header(colleague_token))
        assert [v["id"] for v in res.json()] == [vacation_id]

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation_id}/respond", json={"accept": True}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 200
        assert res.json()["vacation"]["status"] == "pending_manager_approval"
        assert res.json()["vacation"]["replacement_status"] == "accepted"

        res = await client.get(f"{VACATIONS_URL}/manager", headers=auth_header(manager_token))
        assert vacation_id in [v["id"] for v in res.json()]

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation_id}/manager-respond",
            json={"approve": True},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["vacation"]["status"] == "pending_admin_approval"
        assert res.json()["vacation"]["manager_name"] == "Manager Gjilan"

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation_id}/admin-respond",
            json={"status": "rejected", "admin_comment": "Insufficient coverage"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200

        res = await client.get(f"{VACATIONS_URL}/mine", headers=auth_header(staff_token))
        body = res.json()
        final = body["vacations"][0]
        assert final["status"] == "rejected"
        assert final["replacement_status"] == "accepted"
        assert final["admin_comment"] == "Insufficient coverage"
        assert final["admin_name"] == "Admin One"
        assert body["unseenCount"] == 1
        assert push_mock.await_count >= 4

    async def test_replacement_decline_rejects(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, colleague_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague)
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/respond", json={"accept": False}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 200
        assert res.json()["vacation"]["status"] == "rejected"
        assert res.json()["vacation"]["replacement_status"] == "declined"

    async def test_only_designated_replacement_may_respond(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, manager_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague)
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/respond", json={"accept": True}, headers=auth_header(manager_token)
        )
        assert res.status_code == 404
        assert res.json()["message"] == "Replacement request not found"

    async def test_busy_replacement_cannot_accept(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, colleague_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague)
        other = await create_user(db, "Other Owner")
        await create_vacation(db, colleague, JUNE_12, JUNE_20, replacement=other, status="approved",
                              replacement_status="accepted")

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/respond", json={"accept": True}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 400
        await db.refresh(vacation)
        assert vacation.status == "pending_replacement_acceptance"

    async def test_manager_approve_required(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, manager_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_manager_approval", replacement_status="accepted")
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/manager-respond", json={}, headers=auth_header(manager_token)
        )
        assert res.status_code == 400

    async def test_manager_outside_region_forbidden(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, other_manager_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_manager_approval", replacement_status="accepted")
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/manager-respond",
            json={"approve": True},
            headers=auth_header(other_manager_token),
        )
        assert res.status_code == 403
        await db.refresh(vacation)
        assert vacation.status == "pending_manager_approval"

    async def test_manager_list_is_region_scoped(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, other_manager_token
    ):
        await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                              status="pending_manager_approval", replacement_status="accepted")
        res = await client.get(f"{VACATIONS_URL}/manager", headers=auth_header(other_manager_token))
        assert res.status_code == 200
        assert res.json() == []

    async def test_manager_without_region_cannot_act(self, client: AsyncClient, db: AsyncSession):
        drifter = await create_user(db, "Drifter Dren", region=None)
        wanderer = await create_user(db, "Wanderer Vesa", region=None)
        unassigned = await create_user(db, "Unassigned Uran", role="manager", region=None)
        vacation = await create_vacation(db, drifter, JUNE_10, JUNE_15, replacement=wanderer,
                                         status="pending_manager_approval", replacement_status="accepted")
        vacation_id = vacation.id
        token = make_token(unassigned)

        res = await client.get(f"{VACATIONS_URL}/manager", headers=auth_header(token))
        assert res.json() == []

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation_id}/manager-respond", json={"approve": True}, headers=auth_header(token)
        )
        assert res.status_code == 403

        await db.refresh(vacation)
        assert vacation.status == "pending_manager_approval"
        assert vacation.manager_approver_id is None

    async def test_staff_cannot_use_manager_routes(self, client: AsyncClient, staff_token):
        res = await client.get(f"{VACATIONS_URL}/manager", headers=auth_header(staff_token))
        assert res.status_code == 403

    async def test_rejection_requires_comment(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, admin_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_admin_approval", replacement_status="accepted")
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/admin-respond",
            json={"status": "rejected", "admin_comment": "   "},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 400

    async def test_invalid_admin_status(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, admin_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_admin_approval", replacement_status="accepted")
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/admin-respond",
            json={"status": "maybe"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 400

    async def test_stale_second_admin_decision_refused(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, admin_user, admin_token
    ):
        second_admin = await create_user(db, "Admin Two", role="admin", region=None)
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_admin_approval", replacement_status="accepted")

        first = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/admin-respond",
            json={"status": "approved"},
            headers=auth_header(admin_token),
        )
        second = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/admin-respond",
            json={"status": "rejected", "admin_comment": "Too late"},
            headers=auth_header(make_token(second_admin)),
        )
        assert first.status_code == 200
        assert second.status_code == 404

        await db.refresh(vacation)
        assert vacation.status == "approved"
        assert vacation.admin_approver_id == admin_user.id

    @pytest.mark.parametrize("actor", ["replacement", "manager", "admin"])
    async def test_terminal_request_rejects_every_actor(
        self,
        actor,
        client: AsyncClient,
        db: AsyncSession,
        staff_user,
        colleague,
        colleague_token,
        manager_token,
        admin_token,
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="approved", replacement_status="accepted")
        calls = {
            "replacement": ("respond", {"accept": True}, colleague_token),
            "manager": ("manager-respond", {"approve": True}, manager_token),
            "admin": ("admin-respond", {"status": "approved"}, admin_token),
        }
        path, body, token = calls[actor]
        res = await client.patch(f"{VACATIONS_URL}/{vacation.id}/{path}", json=body, headers=auth_header(token))
        assert res.status_code == 404

    async def test_unknown_vacation(self, client: AsyncClient, admin_token):
        res = await client.patch(
            f"{VACATIONS_URL}/00000000-0000-0000-0000-000000000000/admin-respond",
            json={"status": "approved"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 404
        assert res.json()["message"] == "Vacation request not found"


class TestListings:
    """목록 및 확인 처리."""

    async def test_admin_list_status_filter(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, admin_token
    ):
        await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague, status="approved",
                              replacement_status="accepted")
        await create_vacation(db, colleague, JUNE_16, JUNE_20, replacement=staff_user)

        res = await client.get(VACATIONS_URL, headers=auth_header(admin_token))
        assert len(res.json()) == 2

        res = await client.get(VACATIONS_URL, params={"status": "approved"}, headers=auth_header(admin_token))
        assert [v["status"] for v in res.json()] == ["approved"]

    async def test_invalid_status_filter(self, client: AsyncClient, admin_token):
        res = await client.get(VACATIONS_URL, params={"status": "bogus"}, headers=auth_header(admin_token))
        assert res.status_code == 400

    async def test_admin_list_forbidden_for_manager(self, client: AsyncClient, manager_token):
        res = await client.get(VACATIONS_URL, headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_mark_seen_is_idempotent(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, staff_token
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="rejected", replacement_status="declined")
        for _ in range(2):
            res = await client.patch(f"{VACATIONS_URL}/{vacation.id}/seen", headers=auth_header(staff_token))
            assert res.status_code == 200

        res = await client.get(f"{VACATIONS_URL}/mine", headers=auth_header(staff_token))
        assert res.json()["unseenCount"] == 0
        assert res.json()["vacations"][0]["is_seen"] is True

    async def test_mark_all_seen(
        self, client: AsyncClient, db: AsyncSession, staff_user, colleague, staff_token
    ):
        await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague, status="approved",
                              replacement_status="accepted")
        await create_vacation(db, staff_user, JUNE_16, JUNE_20, replacement=colleague, status="rejected",
                              replacement_status="declined")
        res = await client.get(f"{VACATIONS_URL}/mine", headers=auth_header(staff_token))
        assert res.json()["unseenCount"] == 2

        res = await client.patch(f"{VACATIONS_URL}/seen-all", headers=auth_header(staff_token))
        assert res.status_code == 200

        res = await client.get(f"{VACATIONS_URL}/mine", headers=auth_header(staff_token))
        assert res.json()["unseenCount"] == 0


class TestNotificationIsolation:
    """푸시 실패가 응답에 영향을 주지 않음."""

    async def test_push_failure_does_not_change_result(
        self,
        client: AsyncClient,
        db: AsyncSession,
        monkeypatch,
        staff_user,
        colleague,
        colleague_token,
    ):
        async def _fail(messages):
            raise httpx.ConnectError("push provider down")

        monkeypatch.setattr(notification_service, "_post_messages", _fail)
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague)

        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/respond", json={"accept": True}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 200
        assert res.json()["vacation"]["status"] == "pending_manager_approval"

    async def test_history_commit_failure_keeps_transition(
        self,
        client: AsyncClient,
        db: AsyncSession,
        monkeypatch,
        staff_user,
        colleague,
        colleague_token,
        push_mock,
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague)
        vacation_id, staff_id = vacation.id, staff_user.id

        real_commit = db.commit
        commits: list[int] = []

        async def _commit_then_fail():
            commits.append(1)
            if len(commits) > 1:
                raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
            await real_commit()

        monkeypatch.setattr(db, "commit", _commit_then_fail)
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation_id}/respond", json={"accept": True}, headers=auth_header(colleague_token)
        )
        assert res.status_code == 200
        assert res.json()["vacation"]["status"] == "pending_manager_approval"
        assert push_mock.await_count >= 1

        stored = await db.scalar(select(Vacation.status).where(Vacation.id == vacation_id))
        assert stored == "pending_manager_approval"
        history = await db.scalar(
            select(func.count()).select_from(Notification).where(Notification.user_id == staff_id)
        )
        assert history == 0

    async def test_admin_approval_notifies_requester_and_replacement(
        self,
        client: AsyncClient,
        db: AsyncSession,
        staff_user,
        colleague,
        admin_token,
        push_mock,
    ):
        vacation = await create_vacation(db, staff_user, JUNE_10, JUNE_15, replacement=colleague,
                                         status="pending_admin_approval", replacement_status="accepted")
        res = await client.patch(
            f"{VACATIONS_URL}/{vacation.id}/admin-respond",
            json={"status": "approved"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200

        tokens = [call.args[0][0]["to"] for call in push_mock.await_args_list]
        assert tokens == [staff_user.push_token, colleague.push_token]


class TestConcurrentDecisions:
    """동시 결정 — 파일 기반 DB에서 두 세션이 같은 신청을 처리."""

    async def test_concurrent_admin_decisions_apply_once(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'decisions.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async with factory() as setup:
            owner = await create_user(setup, "Arta Krasniqi")
            cover = await create_user(setup, "Blerim Hoxha")
            first_admin = await create_user(setup, "Admin One", role="admin", region=None)
            second_admin = await create_user(setup, "Admin Two", role="admin", region=None)
            vacation = await create_vacation(setup, owner, JUNE_10, JUNE_15, replacement=cover,
                                             status="pending_admin_approval", replacement_status="accepted")
        vacation_id = vacation.id

        async def decide(admin, status, comment):
            async with factory() as session:
                result = await vacation_service.admin_respond(session, vacation_id, admin, status, comment)
                await session.commit()
                return result

        outcomes = await asyncio.gather(
            decide(first_admin, "approved", None),
            decide(second_admin, "rejected", "Short staffed"),
            return_exceptions=True,
        )
        winners = [o for o in outcomes if isinstance(o, dict)]
        losers = [o for o in outcomes if isinstance(o, AlreadyProcessedError)]
        assert len(winners) == 1
        assert len(losers) == 1

        async with factory() as check:
            stored = await check.get(Vacation, vacation_id)
            assert stored.status == winners[0]["status"]
            assert str(stored.admin_approver_id) == winners[0]["admin_approver_id"]
        await engine.dispose()
