"""휴가 라우터 — 휴가 신청 및 3단계 승인 워크플로.

Vacation Router — Vacation requests and the three-stage approval
workflow (replacement → regional manager → admin).

Every transition is committed before anyone is notified; push failures
never change the HTTP outcome.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user, require_admin, require_manager
from staffhub.database import get_db
from staffhub.models.user import ROLE_ADMIN, ROLE_MANAGER, User
from staffhub.models.vacation import STATUS_APPROVED, Vacation
from staffhub.schemas.common import MessageResponse
from staffhub.schemas.vacation import (
    AdminRespond,
    ManagerRespond,
    MyVacationsResponse,
    ReplacementCandidate,
    ReplacementRespond,
    VacationCreate,
    VacationResponse,
)
from staffhub.services.notification_service import notification_service
from staffhub.services.vacation_service import vacation_service

router: APIRouter = APIRouter()


def _period(vacation: dict) -> str:
    return f"{vacation['start_date'].isoformat()} to {vacation['end_date'].isoformat()}"


# === 대체자 / 신청 (Replacements and creation) ===


@router.get("/replacements", response_model=list[ReplacementCandidate])
async def list_replacements(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
) -> list[dict]:
    """기간 내 대체 가능한 동료 목록.

    Colleagues from the caller's region who are free to cover the range.
    """
    return await vacation_service.list_eligible_replacements(db, current_user, start_date, end_date)


@router.post("", status_code=201)
async def create_vacation(
    data: VacationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """휴가를 신청합니다."""
    vacation: Vacation = await vacation_service.request_vacation(db, current_user, data)
    await db.commit()
    result: dict = await vacation_service.get_vacation_response(db, vacation.id)
    return {"message": "Vacation request submitted successfully", "vacation": VacationResponse(**result)}


@router.get("/mine", response_model=MyVacationsResponse, response_model_by_alias=True)
async def list_my_vacations(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """본인 휴가 신청 목록과 미확인 결정 수."""
    return await vacation_service.list_mine(db, current_user)


@router.get("/replacement-requests", response_model=list[VacationResponse])
async def list_replacement_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """본인이 응답해야 할 대체 요청 목록."""
    return await vacation_service.list_replacement_requests(db, current_user)


# === 확인 처리 (Read receipts, registered before /{vacation_id}) ===


@router.patch("/seen-all", response_model=MessageResponse)
async def mark_all_seen(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    """결정된 본인 신청을 모두 확인 처리합니다."""
    await vacation_service.mark_all_seen(db, current_user)
    await db.commit()
    return {"message": "All vacations marked as seen"}


@router.patch("/{vacation_id}/seen", response_model=MessageResponse)
async def mark_seen(
    vacation_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    """본인 신청을 확인 처리합니다 (멱등)."""
    await vacation_service.mark_seen(db, vacation_id, current_user)
    await db.commit()
    return {"message": "Vacation marked as seen"}


# === 1단계: 대체자 응답 (Stage 1: replacement) ===


@router.patch("/{vacation_id}/respond")
async def respond_to_replacement(
    vacation_id: UUID,
    data: ReplacementRespond,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """대체자가 대체 요청을 수락 또는 거절합니다.

    On acceptance the requester's regional managers are told a request
    awaits them; the requester is told either way.
    """
    responder_name: str = current_user.name
    result: dict = await vacation_service.respond_to_replacement(db, vacation_id, current_user, data.accept)
    await db.commit()

    if data.accept:
        await notification_service.notify_user(
            db,
            UUID(result["user_id"]),
            "Replacement accepted",
            f"{responder_name} accepted to cover your vacation from {_period(result)}.",
            {"type": "vacation", "vacationId": result["id"]},
        )
        await notification_service.notify_role(
            db,
            ROLE_MANAGER,
            "Vacation awaiting approval",
            f"{result['user_name']} requested vacation from {_period(result)}.",
            {"type": "vacation", "vacationId": result["id"]},
            region=result["user_region"],
        )
    else:
        await notification_service.notify_user(
            db,
            UUID(result["user_id"]),
            "Replacement declined",
            f"{responder_name} declined to cover your vacation from {_period(result)}.",
            {"type": "vacation", "vacationId": result["id"]},
        )
    await notification_service.commit_history(db)

    message: str = "Replacement request accepted" if data.accept else "Replacement request declined"
    return {"message": message, "vacation": VacationResponse(**result)}


# === 2단계: 지역 매니저 (Stage 2: regional manager) ===


@router.get("/manager", response_model=list[VacationResponse])
async def list_for_manager(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
    status: Annotated[str | None, Query(description="상태 필터")] = None,
) -> list[dict]:
    """매니저 지역의 휴가 신청 목록."""
    return await vacation_service.list_for_manager(db, current_user, status)


@router.patch("/{vacation_id}/manager-respond")
async def manager_respond(
    vacation_id: UUID,
    data: ManagerRespond,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_manager)],
) -> dict:
    """매니저가 휴가 신청을 승인 또는 거절합니다.

    Approval forwards the request to the admins.
    """
    result: dict = await vacation_service.manager_respond(
        db, vacation_id, current_user, data.approve, data.comment
    )
    await db.commit()

    outcome: str = "approved by your manager" if data.approve else "rejected by your manager"
    await notification_service.notify_user(
        db,
        UUID(result["user_id"]),
        "Vacation request update",
        f"Your vacation from {_period(result)} was {outcome}.",
        {"type": "vacation", "vacationId": result["id"]},
    )
    if data.approve:
        await notification_service.notify_role(
            db,
            ROLE_ADMIN,
            "Vacation awaiting final approval",
            f"{result['user_name']} ({result['user_region']}) requested vacation from {_period(result)}.",
            {"type": "vacation", "vacationId": result["id"]},
        )
    await notification_service.commit_history(db)

    message: str = "Vacation request approved" if data.approve else "Vacation request rejected"
    return {"message": message, "vacation": VacationResponse(**result)}


# === 3단계: 관리자 (Stage 3: admin) ===


@router.get("", response_model=list[VacationResponse])
async def list_all(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    status: Annotated[str | None, Query(description="상태 필터")] = None,
) -> list[dict]:
    """전체 휴가 신청 목록 (관리자)."""
    return await vacation_service.list_all(db, status)


@router.patch("/{vacation_id}/admin-respond")
async def admin_respond(
    vacation_id: UUID,
    data: AdminRespond,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """관리자가 최종 승인 또는 거절합니다.

    Final decision. On approval the replacement is told to cover the period.
    """
    result: dict = await vacation_service.admin_respond(
        db, vacation_id, current_user, data.status, data.admin_comment
    )
    await db.commit()

    approved: bool = result["status"] == STATUS_APPROVED
    body: str = f"Your vacation from {_period(result)} was {'approved' if approved else 'rejected'}."
    if not approved and result["admin_comment"]:
        body = f"{body} Reason: {result['admin_comment']}"
    await notification_service.notify_user(
        db,
        UUID(result["user_id"]),
        "Vacation approved" if approved else "Vacation rejected",
        body,
        {"type": "vacation", "vacationId": result["id"]},
    )
    if approved and result["replacement_user_id"]:
        await notification_service.notify_user(
            db,
            UUID(result["replacement_user_id"]),
            "Replacement confirmed",
            f"You will cover for {result['user_name']} from {_period(result)}.",
            {"type": "vacation", "vacationId": result["id"]},
        )
    await notification_service.commit_history(db)

    message: str = "Vacation request approved" if approved else "Vacation request rejected"
    return {"message": message, "vacation": VacationResponse(**result)}
