"""리포트 서비스 — Excel/PDF 보고서 생성.

Report Service — Read-only Excel (openpyxl) and PDF (reportlab) reports
over attendance, vacations and users. Times are rendered in the
attendance timezone; a check-in after LATE_AFTER_HOUR local time is late.
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from io import BytesIO
from typing import Any
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from staffhub.config import settings
from staffhub.models.attendance import AttendanceRecord
from staffhub.models.user import User
from staffhub.models.vacation import Vacation
from staffhub.services.attendance_service import hours_between
from staffhub.utils.dates import local_day_bounds, to_local
from staffhub.utils.exceptions import NotFoundError, ValidationError

# 상태 색상 — Status cell colors
GREEN_FILL = PatternFill(start_color="90EE90", end_color="90EE90", fill_type="solid")
RED_FILL = PatternFill(start_color="FFC0CB", end_color="FFC0CB", fill_type="solid")
YELLOW_FILL = PatternFill(start_color="FFFF99", end_color="FFFF99", fill_type="solid")

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _is_late(check_in: datetime) -> bool:
    local = to_local(check_in)
    return local.hour > settings.LATE_AFTER_HOUR


def _format_duration(check_in: datetime, check_out: datetime | None) -> str:
    hours = hours_between(check_in, check_out)
    if hours is None:
        return "Not Checked Out"
    total_minutes = int(round(hours * 60))
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


class ReportService:
    """리포트 서비스."""

    def _new_workbook(self, title: str, headers: list[str], widths: list[int]):
        wb = Workbook()
        ws = wb.active
        ws.title = title
        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
        for col_idx, h in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_idx, value=h)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
        for i, w in enumerate(widths, 1):
            ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w
        return wb, ws

    @staticmethod
    def _save(wb: Workbook) -> bytes:
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    async def _attendance_rows(
        self,
        db: AsyncSession,
        start_date: date | None,
        end_date: date | None,
        name: str | None,
    ) -> list[Any]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must not be before start date")
        query: Select = select(
            AttendanceRecord,
            User.name.label("user_name"),
            User.number.label("user_number"),
        ).join(User, AttendanceRecord.user_id == User.id)
        if name:
            query = query.where(User.name == name)
        if start_date:
            query = query.where(AttendanceRecord.check_in_time >= local_day_bounds(start_date)[0])
        if end_date:
            query = query.where(AttendanceRecord.check_in_time < local_day_bounds(end_date)[1])
        result = await db.execute(query.order_by(User.name, AttendanceRecord.check_in_time))
        return list(result.all())

    async def attendance_excel(
        self,
        db: AsyncSession,
        start_date: date | None = None,
        end_date: date | None = None,
        name: str | None = None,
    ) -> bytes:
        """출퇴근 기록 Excel 보고서.

        Attendance report, one row per record, with late/on-time coloring.

        Raises:
            NotFoundError: 조건에 맞는 기록 없음 (No records match)
        """
        rows = await self._attendance_rows(db, start_date, end_date, name)
        if not rows:
            raise NotFoundError("No attendance records found for the specified criteria")

        wb, ws = self._new_workbook(
            "Attendance Report",
            ["Employee Name", "Employee Number", "Date", "Check In", "Check Out", "Total Hours", "Status"],
            [20, 15, 12, 10, 10, 12, 10],
        )
        for row in rows:
            record: AttendanceRecord = row[0]
            check_in = to_local(record.check_in_time)
            check_out = to_local(record.check_out_time)
            late: bool = _is_late(record.check_in_time)
            ws.append([
                row.user_name,
                row.user_number or "N/A",
                check_in.date().isoformat(),
                check_in.strftime("%H:%M:%S"),
                check_out.strftime("%H:%M:%S") if check_out else "Not Checked Out",
                _format_duration(record.check_in_time, record.check_out_time),
                "Late" if late else "On Time",
            ])
            ws.cell(row=ws.max_row, column=7).fill = RED_FILL if late else GREEN_FILL

        return self._save(wb)

    async def vacation_excel(
        self,
        db: AsyncSession,
        status: str | None = None,
        name: str | None = None,
    ) -> bytes:
        """휴가 신청 Excel 보고서.

        Raises:
            NotFoundError: 조건에 맞는 신청 없음 (No requests match)
        """
        requester = aliased(User, name="requester")
        replacement = aliased(User, name="replacement")
        manager = aliased(User, name="manager")
        admin = aliased(User, name="admin")
        query: Select = (
            select(
                Vacation,
                requester.name.label("user_name"),
                requester.number.label("user_number"),
                replacement.name.label("replacement_name"),
                manager.name.label("manager_name"),
                admin.name.label("admin_name"),
            )
            .join(requester, Vacation.user_id == requester.id)
            .outerjoin(replacement, Vacation.replacement_user_id == replacement.id)
            .outerjoin(manager, Vacation.manager_approver_id == manager.id)
            .outerjoin(admin, Vacation.admin_approver_id == admin.id)
        )
        if status:
            query = query.where(Vacation.status == status)
        if name:
            query = query.where(requester.name == name)
        result = await db.execute(query.order_by(Vacation.requested_at.desc()))
        rows = result.all()
        if not rows:
            raise NotFoundError("No vacation requests found for the specified criteria")

        wb, ws = self._new_workbook(
            "Vacation Report",
            ["Employee Name", "Employee Number", "Start Date", "End Date", "Days Requested",
             "Replacement", "Status", "Requested At", "Manager", "Admin", "Comment"],
            [20, 15, 12, 12, 15, 20, 26, 18, 20, 20, 30],
        )
        for row in rows:
            vacation: Vacation = row[0]
            requested_at = to_local(vacation.requested_at)
            ws.append([
                row.user_name,
                row.user_number or "N/A",
                vacation.start_date.isoformat(),
                vacation.end_date.isoformat(),
                (vacation.end_date - vacation.start_date).days + 1,
                row.replacement_name or "",
                vacation.status.replace("_", " ").capitalize(),
                requested_at.strftime("%Y-%m-%d %H:%M") if requested_at else "",
                row.manager_name or "",
                row.admin_name or "Pending",
                vacation.admin_comment or "",
            ])
            status_cell = ws.cell(row=ws.max_row, column=7)
            if vacation.status == "approved":
                status_cell.fill = GREEN_FILL
            elif vacation.status == "rejected":
                status_cell.fill = RED_FILL
            else:
                status_cell.fill = YELLOW_FILL

        return self._save(wb)

    async def summary_excel(
        self,
        db: AsyncSession,
        start_date: date | None = None,
        end_date: date | None = None,
        name: str | None = None,
    ) -> bytes:
        """직원별 근태 요약 Excel 보고서.

        Per-employee summary: days, on-time/late days, incomplete days,
        average hours and on-time rate. Employees without records in the
        range are listed with zeros.
        """
        rows = await self._attendance_rows(db, start_date, end_date, name)

        stats: dict[UUID, dict[str, Any]] = defaultdict(
            lambda: {"total": 0, "on_time": 0, "late": 0, "incomplete": 0, "hours": []}
        )
        for row in rows:
            record: AttendanceRecord = row[0]
            entry = stats[record.user_id]
            entry["total"] += 1
            if _is_late(record.check_in_time):
                entry["late"] += 1
            else:
                entry["on_time"] += 1
            hours = hours_between(record.check_in_time, record.check_out_time)
            if hours is None:
                entry["incomplete"] += 1
            else:
                entry["hours"].append(hours)

        user_query: Select = select(User).order_by(User.name)
        if name:
            user_query = user_query.where(User.name == name)
        users = (await db.execute(user_query)).scalars().all()

        wb, ws = self._new_workbook(
            "Summary Report",
            ["Employee Name", "Employee Number", "Total Days", "On Time Days", "Late Days",
             "Incomplete Days", "Average Hours", "Attendance Rate"],
            [20, 15, 12, 15, 12, 18, 15, 18],
        )
        for user in users:
            entry = stats.get(user.id) or {"total": 0, "on_time": 0, "late": 0, "incomplete": 0, "hours": []}
            average: float = round(sum(entry["hours"]) / len(entry["hours"]), 2) if entry["hours"] else 0
            rate: int = round(entry["on_time"] / entry["total"] * 100) if entry["total"] else 0
            ws.append([
                user.name,
                user.number or "N/A",
                entry["total"],
                entry["on_time"],
                entry["late"],
                entry["incomplete"],
                average,
                f"{rate}%",
            ])
            rate_cell = ws.cell(row=ws.max_row, column=8)
            if rate >= 90:
                rate_cell.fill = GREEN_FILL
            elif rate >= 70:
                rate_cell.fill = YELLOW_FILL
            else:
                rate_cell.fill = RED_FILL

        return self._save(wb)

    async def employment_certificate_pdf(self, db: AsyncSession, user_id: UUID) -> tuple[bytes, str]:
        """재직 증명서 PDF를 생성합니다.

        Employment certificate for one user.

        Returns:
            tuple[bytes, str]: (PDF 바이트, 파일명) (PDF bytes and filename)

        Raises:
            NotFoundError: 사용자 없음 (User not found)
        """
        user: User | None = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        width, height = A4
        y = height - 80

        pdf.setFont("Helvetica-Bold", 18)
        pdf.drawCentredString(width / 2, y, "EMPLOYMENT CERTIFICATE")
        y -= 50

        pdf.setFont("Helvetica", 12)
        issued: date = datetime.now(timezone.utc).date()
        lines: list[str] = [
            f"This is to certify that {user.name} is employed by {settings.APP_NAME.replace(' API', '')}.",
            "",
            f"Position: {user.title or 'N/A'}",
            f"Region: {user.region or 'N/A'}",
            f"Employee number: {user.number or 'N/A'}",
            f"Employed since: {user.contract_start_date.isoformat() if user.contract_start_date else 'N/A'}",
            f"Employment status: {'Active' if user.active else 'Inactive'}",
            "",
            "This certificate is issued at the request of the employee.",
        ]
        for line in lines:
            pdf.drawString(60, y, line)
            y -= 20

        y -= 40
        pdf.drawString(60, y, f"Date of issue: {issued.isoformat()}")
        pdf.drawString(width - 220, y, "Human Resources")
        pdf.showPage()
        pdf.save()

        filename = f"employment_certificate_{user.name.replace(' ', '_')}.pdf"
        return buffer.getvalue(), filename


# 싱글턴 인스턴스
report_service: ReportService = ReportService()
