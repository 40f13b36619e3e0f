"""공통 레포지토리 — 도메인 레포지토리의 부모 클래스.

Shared repository base — Lookup by id, paging, create, update and delete
for one mapped model. Repositories flush but never commit; routers own
the transaction boundary.

Usage:
    class AttendanceRepository(BaseRepository[AttendanceRecord]):
        def __init__(self) -> None:
            super().__init__(AttendanceRecord)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from staffhub.database import Base

# 매핑된 모델 타입 — Mapped model handled by a repository
ModelType = TypeVar("ModelType", bound=Base)


def in_region(column: Any, region: str | None) -> ColumnElement[bool]:
    """지역 일치 조건. 지역이 없는 사용자는 어떤 지역에도 속하지 않습니다.

    Region match predicate. A null region matches nothing, so users
    without a region never share scope with each other.
    """
    if region is None:
        return false()
    return column == region


class BaseRepository(Generic[ModelType]):
    """모델 하나를 다루는 공통 레포지토리.

    Attributes:
        model: 대상 ORM 모델 (Mapped model class, UUID primary key ``id``)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        """기본 키로 조회합니다. 없으면 None."""
        return await db.scalar(select(self.model).where(self.model.id == record_id))

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """정렬된 쿼리를 페이지 단위로 잘라 조회합니다.

        Slice an ordered query into one page.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 정렬이 지정된 SELECT (Ordered SELECT of the model)
            page: 1부터 시작하는 페이지 번호 (1-based page number)
            per_page: 페이지 크기 (Page size)

        Returns:
            tuple[Sequence[ModelType], int]: (현재 페이지 항목, 전체 개수)
                                             (Items on the page, total matching rows)
        """
        total: int = await db.scalar(select(func.count()).select_from(query.subquery())) or 0
        page_rows = await db.scalars(query.offset((page - 1) * per_page).limit(per_page))
        return page_rows.all(), total

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """행을 추가하고 DB 기본값이 채워진 객체를 반환합니다."""
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """전달된 필드만 덮어씁니다 (None 포함).

        Overwrite exactly the given fields, None included, so callers pass
        ``model_dump(exclude_unset=True)``. Unknown keys are ignored.
        Returns None when the row does not exist.
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        """행을 삭제합니다. 종속 행은 FK CASCADE로 정리됩니다."""
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.flush()
        return True
