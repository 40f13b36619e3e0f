"""알림 Pydantic 요청/응답 스키마 정의.

Notification Pydantic request/response schema definitions covering
the notification history and the admin broadcast endpoints.
"""

from datetime import datetime
from typing import Any, Literal
from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    """알림 응답 스키마.

    Notification history item response schema.
    """

    id: str  # 알림 UUID (Notification UUID)
    title: str  # 제목 (Title)
    body: str  # 본문 (Body)
    data: dict[str, Any] | None = None  # 부가 데이터 (Extra payload)
    is_read: bool  # 읽음 여부 (Read flag)
    created_at: datetime  # 생성 일시 (Creation timestamp)


class PushMessage(BaseModel):
    """관리자 푸시 발송 요청 스키마.

    Admin push message request schema for single-user and send-all broadcasts.
    """

    title: str = Field(..., min_length=1, max_length=255)  # 제목 (Title)
    body: str = Field(..., min_length=1, max_length=1000)  # 본문 (Body)
    data: dict[str, Any] | None = None  # 부가 데이터 (Extra payload)


class BatchPushMessage(PushMessage):
    """역할/지역 대상 일괄 푸시 요청 스키마.

    Batch push request; role and region each narrow the audience only when given.
    """

    role: Literal["user", "manager", "admin"] | None = None  # 대상 역할 (Target role)
    region: str | None = None  # 대상 지역 (Target region)


class PushSendResponse(BaseModel):
    """단일 푸시 발송 결과 스키마."""

    success: bool  # 성공 여부 (Delivery accepted by the provider)
    error: str | None = None  # 실패 사유 (Failure reason)


class BatchSendResponse(BaseModel):
    """일괄 푸시 발송 결과 스키마."""

    sent_count: int  # 성공 수 (Successful deliveries)
    failed_count: int  # 실패 수 (Failed deliveries)
