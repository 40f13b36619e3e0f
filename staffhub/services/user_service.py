"""사용자 관리 서비스 — 관리자용 사용자 CRUD 및 가입 승인.

User Service — Admin user management: listing, creation, updates,
password changes, signup acceptance and hard deletion.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.models.user import User
from staffhub.repositories.user_repository import user_repository
from staffhub.schemas.user import UserAccept, UserCreate, UserUpdate
from staffhub.services.auth_service import auth_service
from staffhub.services.storage_service import storage_service
from staffhub.utils.exceptions import ConflictError, NotFoundError
from staffhub.utils.password import hash_password


class UserService:
    """사용자 관리 서비스."""

    async def _get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(
        self,
        db: AsyncSession,
        role: str | None = None,
        region: str | None = None,
    ) -> list[dict]:
        """사용자 목록 (역할/지역 필터)."""
        users: Sequence[User] = await user_repository.list_users(db, role=role, region=region)
        return [auth_service.build_profile(u) for u in users]

    async def list_pending(self, db: AsyncSession) -> list[dict]:
        """승인 대기 사용자 목록."""
        users: Sequence[User] = await user_repository.list_users(db, status=False)
        return [auth_service.build_profile(u) for u in users]

    async def get_user(self, db: AsyncSession, user_id: UUID) -> dict:
        return auth_service.build_profile(await self._get_user(db, user_id))

    async def create_user(self, db: AsyncSession, data: UserCreate) -> dict:
        """관리자가 사용자를 생성합니다 (즉시 승인 상태).

        Raises:
            ConflictError: 이미 존재하는 이름 (Name already taken)
        """
        if await user_repository.get_by_name(db, data.name) is not None:
            raise ConflictError("User already exists")

        payload: dict = data.model_dump(exclude={"password"})
        payload["password_hash"] = hash_password(data.password)
        payload["status"] = True
        user: User = await user_repository.create(db, payload)
        return auth_service.build_profile(user)

    async def update_user(self, db: AsyncSession, user_id: UUID, data: UserUpdate) -> dict:
        """사용자 정보를 부분 수정합니다.

        Partial update. Replacing the profile image deletes the old object.
        """
        user: User = await self._get_user(db, user_id)
        update_data: dict = data.model_dump(exclude_unset=True)

        if "name" in update_data and update_data["name"] != user.name:
            if await user_repository.get_by_name(db, update_data["name"]) is not None:
                raise ConflictError("User already exists")

        old_image_key: str | None = user.profile_image_key
        updated: User | None = await user_repository.update(db, user_id, update_data)
        if "profile_image_key" in update_data and old_image_key and old_image_key != updated.profile_image_key:
            storage_service.delete(old_image_key)
        return auth_service.build_profile(updated)

    async def upload_profile_image(
        self,
        db: AsyncSession,
        user_id: UUID,
        content: bytes,
        filename: str,
        content_type: str | None,
    ) -> dict:
        """프로필 이미지를 업로드하고 사용자에 연결합니다."""
        user: User = await self._get_user(db, user_id)
        old_image_key: str | None = user.profile_image_key
        key: str = storage_service.upload(content, filename, content_type)
        updated: User | None = await user_repository.update(db, user_id, {"profile_image_key": key})
        if old_image_key:
            storage_service.delete(old_image_key)
        return auth_service.build_profile(updated)

    async def change_password(self, db: AsyncSession, user_id: UUID, password: str) -> None:
        await self._get_user(db, user_id)
        await user_repository.update(db, user_id, {"password_hash": hash_password(password)})

    async def accept_user(self, db: AsyncSession, user_id: UUID, data: UserAccept) -> User:
        """가입을 승인합니다 — 지역, 근무조, 계약 시작일 지정.

        Approve a signup: assign region, shift and contract start date
        and flip status to approved. Notifying the user is left to the router.
        """
        await self._get_user(db, user_id)
        values: dict = {
            "region": data.region,
            "shift": data.shift,
            "contract_start_date": data.contract_start_date,
            "status": True,
        }
        if data.title is not None:
            values["title"] = data.title
        return await user_repository.update(db, user_id, values)

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> str | None:
        """사용자를 삭제합니다 (연관 데이터는 CASCADE).

        Hard-delete a user. Returns the stored image key so the caller
        can remove the object once the deletion is committed.
        """
        user: User = await self._get_user(db, user_id)
        image_key: str | None = user.profile_image_key
        await user_repository.delete(db, user_id)
        return image_key

    async def list_titles(self, db: AsyncSession) -> list[str]:
        return await user_repository.get_distinct_values(db, User.title)

    async def list_regions(self, db: AsyncSession) -> list[str]:
        return await user_repository.get_distinct_values(db, User.region)


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
