"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.

Usage:
    from paginator.utils.exceptions import InvalidPageParamError
    raise InvalidPageParamError("limit", "abc")
"""

from fastapi import HTTPException, status


class InvalidPageParamError(HTTPException):
    """400 Bad Request 예외 — 페이지 파라미터가 정수가 아닐 때 사용.

    400 Bad Request exception.
    Raised by strict query-string parsing when ``page`` or ``limit``
    is present but is not an integer.

    Args:
        param: 파라미터 이름 (Query parameter name, "page" or "limit")
        raw: 전달된 원본 값 (Raw value received from the client)
    """

    def __init__(self, param: str, raw: str) -> None:
        self.param: str = param
        self.raw: str = raw
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query parameter '{param}' must be a 64-bit integer, got {raw[:50]!r}",
        )
