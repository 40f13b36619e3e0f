"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions shared across
API domains: generic messages and pagination envelopes.
"""

from typing import Any
from pydantic import BaseModel


class MessageResponse(BaseModel):
    """단순 메시지 응답 스키마.

    Generic message response schema for operations without a payload.

    Attributes:
        message: 처리 결과 메시지 (Result message)
    """

    message: str  # 처리 결과 메시지 (Result message)


class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마.

    Paginated list response envelope.

    Attributes:
        items: 현재 페이지 항목 (Items on the current page)
        total: 전체 항목 수 (Total item count)
        page: 현재 페이지 (Current page, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[Any]  # 현재 페이지 항목 (Items on the current page)
    total: int  # 전체 항목 수 (Total item count)
    page: int  # 현재 페이지 번호 (Current page number)
    per_page: int  # 페이지당 항목 수 (Items per page)
