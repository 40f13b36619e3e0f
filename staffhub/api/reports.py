"""리포트 라우터 — Excel/PDF 보고서 다운로드 (관리자).

Report Router — Excel and PDF report downloads for administrators.
"""

from datetime import date
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from staffhub.api.deps import require_admin
from staffhub.database import get_db
from staffhub.models.user import User
from staffhub.services.report_service import XLSX_MEDIA_TYPE, report_service

router: APIRouter = APIRouter()


def _xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/attendance-excel")
async def attendance_excel(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
    name: Annotated[str | None, Query(description="직원 이름 필터")] = None,
) -> StreamingResponse:
    """출퇴근 기록 Excel 보고서를 다운로드합니다."""
    content: bytes = await report_service.attendance_excel(db, start_date, end_date, name)
    return _xlsx_response(content, f"attendance_report_{date.today().isoformat()}.xlsx")


@router.get("/vacation-excel")
async def vacation_excel(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    status: Annotated[str | None, Query(description="상태 필터")] = None,
    name: Annotated[str | None, Query(description="직원 이름 필터")] = None,
) -> StreamingResponse:
    """휴가 신청 Excel 보고서를 다운로드합니다."""
    content: bytes = await report_service.vacation_excel(db, status, name)
    return _xlsx_response(content, f"vacation_report_{date.today().isoformat()}.xlsx")


@router.get("/summary-excel")
async def summary_excel(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
    name: Annotated[str | None, Query(description="직원 이름 필터")] = None,
) -> StreamingResponse:
    """직원별 근태 요약 Excel 보고서를 다운로드합니다."""
    content: bytes = await report_service.summary_excel(db, start_date, end_date, name)
    return _xlsx_response(content, f"summary_report_{date.today().isoformat()}.xlsx")


@router.get("/employment-certificate-pdf")
async def employment_certificate_pdf(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    user_id: Annotated[UUID, Query(alias="userId")],
) -> StreamingResponse:
    """재직 증명서 PDF를 다운로드합니다."""
    content, filename = await report_service.employment_certificate_pdf(db, user_id)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
