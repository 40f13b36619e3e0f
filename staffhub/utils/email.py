"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
발송 실패는 로그만 남기고 호출자에게 전파하지 않습니다.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from staffhub.config import settings

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    """SMTP 설정 여부."""
    return bool(settings.SMTP_HOST and settings.SMTP_FROM_EMAIL)


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> bool:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (선택)

    Returns:
        bool: 발송 성공 여부 (False when SMTP is not configured or sending failed)
    """
    if not is_configured():
        logger.info("SMTP not configured, skipping email to %s", to)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        await aiosmtplib.send(
            msg,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=True,
        )
    except (aiosmtplib.SMTPException, OSError):
        logger.exception("Failed to send email to %s", to)
        return False
    return True


async def send_registration_pending_email(to: str, name: str) -> bool:
    """회원가입 접수 안내 메일 — account awaiting approval."""
    html = (
        f"<p>Hello {name},</p>"
        "<p>Your registration was received and is waiting for approval by an administrator. "
        "You will be notified as soon as your account is approved.</p>"
    )
    return await send_email(to, "Registration received - pending approval", html)


async def send_account_approved_email(to: str, name: str) -> bool:
    """계정 승인 안내 메일 — account approved."""
    html = (
        f"<p>Hello {name},</p>"
        "<p>Your account has been approved. You can now sign in to the mobile app.</p>"
    )
    return await send_email(to, "Your account has been approved", html)
