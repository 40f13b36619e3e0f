"""관리자 사용자 라우터 — 사용자 CRUD, 가입 승인, 프로필 이미지.

Admin User Router — User management for administrators: listing,
creation, updates, password changes, signup acceptance, profile images
and deletion.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import require_admin
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.schemas.common import MessageResponse
from staffhub.schemas.user import (
    PasswordChange,
    UserAccept,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from staffhub.services.auth_service import auth_service
from staffhub.services.notification_service import notification_service
from staffhub.services.storage_service import IMAGE_CONTENT_TYPES, storage_service
from staffhub.services.user_service import user_service
from staffhub.utils.email import send_account_approved_email
from staffhub.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    role: Annotated[str | None, Query(description="역할 필터")] = None,
    region: Annotated[str | None, Query(description="지역 필터")] = None,
) -> list[dict]:
    """사용자 목록을 조회합니다.

    List users with optional role and region filters.
    """
    return await user_service.list_users(db, role=role, region=region)


@router.get("/pending", response_model=list[UserResponse])
async def list_pending_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[dict]:
    """승인 대기 사용자 목록."""
    return await user_service.list_pending(db)


@router.get("/titles", response_model=list[str])
async def list_titles(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[str]:
    return await user_service.list_titles(db)


@router.get("/regions", response_model=list[str])
async def list_regions(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[str]:
    return await user_service.list_regions(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """사용자 상세 정보를 조회합니다."""
    return await user_service.get_user(db, user_id)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """새 사용자를 생성합니다 (승인 완료 상태).

    Create an already-approved user.
    """
    result: dict = await user_service.create_user(db, data)
    await db.commit()
    return result


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """사용자 정보를 수정합니다."""
    result: dict = await user_service.update_user(db, user_id, data)
    await db.commit()
    return result


@router.put("/{user_id}/password", response_model=MessageResponse)
async def change_password(
    user_id: UUID,
    data: PasswordChange,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict[str, str]:
    """사용자 비밀번호를 변경합니다."""
    await user_service.change_password(db, user_id, data.password)
    await db.commit()
    return {"message": "Password updated successfully"}


@router.patch("/{user_id}/accept", response_model=UserResponse)
async def accept_user(
    user_id: UUID,
    data: UserAccept,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """가입을 승인합니다.

    Approve a pending signup, then notify the user by push and email.
    """
    user: User = await user_service.accept_user(db, user_id, data)
    await db.commit()
    profile: dict = auth_service.build_profile(user)

    await notification_service.notify_user(
        db,
        user_id,
        "Account approved",
        "Your account has been approved. Welcome aboard!",
        {"type": "account_approved"},
    )
    await notification_service.commit_history(db)
    if profile["email"]:
        await send_account_approved_email(profile["email"], profile["name"])
    return profile


@router.post("/{user_id}/image", response_model=UserResponse)
async def upload_profile_image(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    file: UploadFile = File(...),
) -> dict:
    """프로필 이미지를 업로드합니다 (jpg/png/webp/gif)."""
    if file.content_type not in IMAGE_CONTENT_TYPES.values():
        raise ValidationError("Only image files are allowed")
    content: bytes = await file.read()
    result: dict = await user_service.upload_profile_image(
        db, user_id, content, file.filename or "image", file.content_type
    )
    await db.commit()
    return result


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict[str, str]:
    """사용자를 삭제합니다 (연관 휴가/근태/알림 포함).

    Hard-delete a user; the profile image is removed after the commit.
    """
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account")
    image_key: str | None = await user_service.delete_user(db, user_id)
    await db.commit()
    storage_service.delete(image_key)
    return {"message": "User deleted successfully"}
