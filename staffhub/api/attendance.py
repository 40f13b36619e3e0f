"""근태 라우터 — 출근/퇴근 및 기록 조회.

Attendance Router — Check-in, check-out and attendance history.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import get_current_user, require_staff_lead
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.schemas.attendance import AttendanceResponse, TodayStatusResponse
from staffhub.services.attendance_service import (
    DEFAULT_ALL_LIMIT,
    DEFAULT_MY_LIMIT,
    MAX_LIMIT,
    attendance_service,
)

router: APIRouter = APIRouter()


@router.post("/check-in", response_model=AttendanceResponse, status_code=201)
async def check_in(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """출근을 기록합니다."""
    result: dict = await attendance_service.check_in(db, current_user)
    await db.commit()
    return result


@router.post("/check-out", response_model=AttendanceResponse)
async def check_out(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """퇴근을 기록합니다."""
    result: dict = await attendance_service.check_out(db, current_user)
    await db.commit()
    return result


@router.get("/today-status", response_model=TodayStatusResponse)
async def today_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return await attendance_service.today_status(db, current_user)


@router.get("/mine", response_model=list[AttendanceResponse])
async def list_my_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_MY_LIMIT,
) -> list[dict]:
    """본인 출퇴근 기록 (최신순)."""
    return await attendance_service.list_mine(db, current_user, start_date, end_date, limit)


@router.get("/all", response_model=list[AttendanceResponse])
async def list_all_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff_lead)],
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_ALL_LIMIT,
) -> list[dict]:
    """전체 출퇴근 기록 — 매니저는 본인 지역만.

    Attendance across users; managers are limited to their region.
    """
    return await attendance_service.list_all(db, current_user, user_id, start_date, end_date, limit)
