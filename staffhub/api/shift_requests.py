"""근무조 변경 라우터 — 근무조 변경 신청 및 검토.

Shift Request Router — Shift change requests and their review by
admins or regional managers.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user, require_staff_lead
from staffhub.database import get_db
from staffhub.models.shift_request import SHIFT_STATUS_APPROVED
from staffhub.models.user import User
from staffhub.schemas.shift_request import (
    ShiftRequestCreate,
    ShiftRequestResponse,
    ShiftRequestReview,
)
from staffhub.services.notification_service import notification_service
from staffhub.services.shift_request_service import shift_request_service

router: APIRouter = APIRouter()


@router.post("", response_model=ShiftRequestResponse, status_code=201)
async def create_shift_request(
    data: ShiftRequestCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """근무조 변경을 신청합니다."""
    result: dict = await shift_request_service.create_request(db, current_user, data.requested_shift)
    await db.commit()
    return result


@router.get("/mine", response_model=list[ShiftRequestResponse])
async def list_my_shift_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """본인 신청 목록 (최신순)."""
    return await shift_request_service.list_mine(db, current_user)


@router.get("/all", response_model=list[ShiftRequestResponse])
async def list_shift_requests(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff_lead)],
    status: Annotated[str | None, Query(description="상태 필터")] = None,
) -> list[dict]:
    """신청 목록 — 관리자는 전체, 매니저는 본인 지역.

    Admins see every request, managers only their region.
    """
    return await shift_request_service.list_requests(db, current_user, status)


@router.patch("/{request_id}", response_model=ShiftRequestResponse)
async def review_shift_request(
    request_id: UUID,
    data: ShiftRequestReview,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff_lead)],
) -> dict:
    """신청을 승인 또는 거절합니다. 승인 시 근무조가 변경됩니다.

    Decide a pending request; the requester is notified either way.
    """
    result: dict = await shift_request_service.review_request(db, request_id, current_user, data.status)
    await db.commit()

    approved: bool = result["status"] == SHIFT_STATUS_APPROVED
    await notification_service.notify_user(
        db,
        UUID(result["user_id"]),
        "Shift change approved" if approved else "Shift change rejected",
        f"Your request to move to shift {result['requested_shift']} was {'approved' if approved else 'rejected'}.",
        {"type": "shift_request", "shiftRequestId": result["id"]},
    )
    await notification_service.commit_history(db)
    return result
