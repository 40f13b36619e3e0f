"""사용자 라우터 — 푸시 토큰 등록.

User Router — Push token registration for the signed-in user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.schemas.auth import PushTokenRequest
from staffhub.schemas.common import MessageResponse
from staffhub.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/push-token", response_model=MessageResponse)
async def register_push_token(
    data: PushTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    """Expo 푸시 토큰을 등록합니다.

    Register the caller's Expo push token.
    """
    await auth_service.register_push_token(db, current_user, data.push_token, data.device_type)
    await db.commit()
    return {"message": "Push token registered successfully"}
