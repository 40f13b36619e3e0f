"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
shared by services and routers. The status code travels with the
exception so call sites only describe what went wrong.

Usage:
    from staffhub.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("User not found")
    raise ConflictError("Vacation dates overlap with existing request")
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """400 Bad Request — 잘못되었거나 누락된 입력.

    Malformed or missing input (missing dates, invalid status value,
    self-referential replacement, missing rejection comment).
    Never retried by the client.

    Args:
        detail: 오류 메시지 (Error message)
    """

    def __init__(self, detail: str = "Invalid request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """400 Bad Request — 기존 데이터와 충돌하는 업무 규칙 위반.

    Business-rule violation detected against existing data
    (date overlap, busy replacement, duplicate pending shift request).

    Args:
        detail: 오류 메시지 (Error message)
    """

    def __init__(self, detail: str = "Request conflicts with existing data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    """404 Not Found — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a requested resource does not exist or the caller is not
    the actor it is addressed to.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AlreadyProcessedError(NotFoundError):
    """404 — 대상이 예상한 이전 상태가 아님 (이미 처리됨).

    The target row exists but is no longer in the expected prior state:
    another approver won the race or the client view is stale.
    Clients should refetch instead of retrying.
    """

    def __init__(self, detail: str = "Request not found or already processed") -> None:
        super().__init__(detail=detail)


class AuthorizationError(HTTPException):
    """403 Forbidden — 역할 또는 지역 범위 부족.

    Raised when the authenticated user lacks the required role or
    region scope for the operation.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized — 인증 실패 시 사용.

    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
