"""알림 라우터 — 알림 이력 및 관리자 푸시 발송 API.

Notification Router — Notification history for every user, plus push
sending endpoints for administrators (single user, everyone, or a
role/region batch).
"""

from dataclasses import asdict
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user, require_admin
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.schemas.common import MessageResponse, PaginatedResponse
from staffhub.schemas.notification import (
    BatchPushMessage,
    BatchSendResponse,
    PushMessage,
    PushSendResponse,
)
from staffhub.services.notification_service import notification_service
from staffhub.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """본인 알림 목록을 조회합니다.

    List the caller's notifications, newest first.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 인증된 사용자 (Authenticated user)
        page: 페이지 번호 (Page number)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        dict: 페이지네이션된 알림 목록 (Paginated notification list)
    """
    notifications, total = await notification_service.list_notifications(
        db,
        user_id=current_user.id,
        page=page,
        per_page=per_page,
    )
    return {
        "items": [notification_service.build_response(n) for n in notifications],
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.get("/unread-count")
async def get_unread_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """읽지 않은 알림 수."""
    count: int = await notification_service.get_unread_count(db, user_id=current_user.id)
    return {"unread_count": count}


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """모든 읽지 않은 알림을 읽음 처리합니다."""
    count: int = await notification_service.mark_all_read(db, user_id=current_user.id)
    await db.commit()
    return {"message": f"{count} notifications marked as read"}


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """단일 알림을 읽음 처리합니다."""
    success: bool = await notification_service.mark_read(
        db,
        notification_id=notification_id,
        user_id=current_user.id,
    )
    await db.commit()
    if not success:
        raise NotFoundError("Notification not found")
    return {"message": "Notification marked as read"}


# === 관리자 발송 (Admin sending) ===


@router.post("/send-user/{user_id}", response_model=PushSendResponse)
async def send_to_user(
    user_id: UUID,
    data: PushMessage,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """특정 사용자에게 푸시를 보냅니다.

    Send a push to one user. Delivery failures are reported in the body.
    """
    result = await notification_service.send_push_notification(db, user_id, data.title, data.body, data.data)
    await notification_service.commit_history(db)
    return asdict(result)


@router.post("/send-all", response_model=BatchSendResponse)
async def send_to_all(
    data: PushMessage,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """모든 활성 사용자에게 푸시를 보냅니다."""
    result = await notification_service.send_batch_notifications(db, data.title, data.body, data.data)
    await notification_service.commit_history(db)
    return asdict(result)


@router.post("/send-batch", response_model=BatchSendResponse)
async def send_batch(
    data: BatchPushMessage,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """역할/지역 대상 일괄 푸시.

    Broadcast to active users, narrowed by role and region when given.
    """
    result = await notification_service.send_batch_notifications(
        db, data.title, data.body, data.data, role=data.role, region=data.region
    )
    await notification_service.commit_history(db)
    return asdict(result)
