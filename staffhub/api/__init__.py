"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router
mounted under /api by the application.

Included routers:
    - auth: 회원가입/로그인/로그아웃/프로필 (Signup, login, logout, profile)
    - users: 푸시 토큰 등록 (Push token registration)
    - admin_users: 관리자 사용자 관리 (Admin user management)
    - vacations: 휴가 신청 및 승인 워크플로 (Vacation workflow)
    - shift_requests: 근무조 변경 신청 (Shift change requests)
    - attendance: 출퇴근 (Check-in / check-out)
    - notifications: 알림 이력 및 발송 (Notification history and sending)
    - reports: Excel/PDF 보고서 (Reports)
"""

from fastapi import APIRouter

from staffhub.api.admin_users import router as admin_users_router
from staffhub.api.attendance import router as attendance_router
from staffhub.api.auth import router as auth_router
from staffhub.api.notifications import router as notifications_router
from staffhub.api.reports import router as reports_router
from staffhub.api.shift_requests import router as shift_requests_router
from staffhub.api.users import router as users_router
from staffhub.api.vacations import router as vacations_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(admin_users_router, prefix="/admin/users", tags=["Admin Users"])
api_router.include_router(vacations_router, prefix="/vacations", tags=["Vacations"])
api_router.include_router(shift_requests_router, prefix="/shift-requests", tags=["Shift Requests"])
api_router.include_router(attendance_router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(reports_router, prefix="/reports", tags=["Reports"])
