"""페이지 파라미터 추출 유틸리티.

Query-string helpers for reading ``page`` and ``limit`` from a request.

Fallback policy: a missing or empty parameter uses the default, and so does a
value that is not an integer or does not fit in a signed 64-bit integer.
A repeated parameter uses its first value. The malformed value is NOT reported to the
client unless ``strict=True``; the request logging middleware records it under
``page_params_defaulted`` instead. Parsed values, including zero and
negatives, are returned as-is.
"""

import re
from collections.abc import Mapping

from starlette.requests import Request

from paginator.utils.exceptions import InvalidPageParamError

DEFAULT_PAGE: int = 1
DEFAULT_LIMIT: int = 10

PAGE_PARAMS: tuple[str, ...] = ("page", "limit")

# 부호 + ASCII 숫자만 허용 — Optional sign followed by ASCII digits only
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

# 부호 있는 64비트 범위 — Values the database can bind as BIGINT
_INT64_MIN: int = -(2**63)
_INT64_MAX: int = 2**63 - 1
_INT64_MAX_DIGITS: int = 19


def _parse_int(raw: str | None) -> int | None:
    if raw is None or not _INT_PATTERN.fullmatch(raw):
        return None
    if len(raw.lstrip("+-0")) > _INT64_MAX_DIGITS:
        return None
    try:
        value: int = int(raw)
    except ValueError:
        return None
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _first(query_params: Mapping[str, str], name: str) -> str | None:
    """반복된 파라미터는 첫 번째 값 사용 (First value of a repeated parameter)."""
    getlist = getattr(query_params, "getlist", None)
    if getlist is not None:
        values: list[str] = getlist(name)
        return values[0] if values else None
    return query_params.get(name)


def _resolve(
    query_params: Mapping[str, str],
    name: str,
    default: int,
    strict: bool,
) -> int:
    raw: str | None = _first(query_params, name)
    if not raw:
        return default

    value: int | None = _parse_int(raw)
    if value is None:
        if strict:
            raise InvalidPageParamError(name, raw)
        return default
    return value


def parse_page_and_limit(
    query_params: Mapping[str, str],
    *,
    default_page: int = DEFAULT_PAGE,
    default_limit: int = DEFAULT_LIMIT,
    strict: bool = False,
) -> tuple[int, int]:
    """쿼리 파라미터 매핑에서 page/limit 값을 해석합니다.

    Resolve ``page`` and ``limit`` from a query parameter mapping.

    Args:
        query_params: 요청 쿼리 파라미터 (Query parameters, e.g. ``request.query_params``)
        default_page: 기본 페이지 번호 (Page when missing or malformed)
        default_limit: 기본 페이지 크기 (Limit when missing or malformed)
        strict: True이면 잘못된 값에 400 예외 발생 (Raise instead of falling back)

    Returns:
        tuple[int, int]: (page, limit)

    Raises:
        InvalidPageParamError: strict 모드에서 정수가 아닌 값 (Malformed value in strict mode)
    """
    page: int = _resolve(query_params, "page", default_page, strict)
    limit: int = _resolve(query_params, "limit", default_limit, strict)
    return page, limit


def get_page_and_limit_params(request: Request) -> tuple[int, int]:
    """요청 URL에서 page/limit를 읽습니다. 기본값은 (1, 10).

    Read ``page`` and ``limit`` from the request's query string with the
    lenient fallback policy described in the module docstring.
    """
    return parse_page_and_limit(request.query_params)


def invalid_page_params(query_params: Mapping[str, str]) -> list[str]:
    """기본값으로 대체될 잘못된 파라미터 이름 목록 (Names of params that fell back to defaults)."""
    defaulted: list[str] = []
    for name in PAGE_PARAMS:
        raw: str | None = _first(query_params, name)
        if raw and _parse_int(raw) is None:
            defaulted.append(name)
    return defaulted
