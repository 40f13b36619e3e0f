"""알림 관련 SQLAlchemy ORM 모델 정의.

Notification SQLAlchemy ORM model definitions.
Every push sent through the dispatcher is recorded here so the mobile
app can show a notification history with read state.

Tables:
    - notifications: 사용자 알림 이력 (User notification history)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.database import Base


class Notification(Base):
    """알림 모델 — 사용자에게 전달된 푸시 알림 이력.

    Notification model — history of push notifications delivered to a user.

    Data payload keys (data 필드):
        - "type": 이벤트 유형 (e.g. "vacation_replacement_response", "shift_request_reviewed")
        - "vacation_id" / "shift_request_id": 참조 엔티티 ID (Referenced entity)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 수신자 FK (Recipient)
        title: 제목 (Notification title)
        body: 본문 (Notification body)
        data: 부가 데이터 JSON (Extra payload delivered with the push)
        is_read: 읽음 여부 (Whether the user has read it)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 수신자 FK — Target user who receives this notification
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(String(1000), nullable=False)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    # 읽음 여부 — False=미읽음, True=읽음 (Unread by default)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
