"""FastAPI 의존성 주입 모듈 — 페이지 파라미터.

FastAPI dependency for list endpoints that need ``page`` and ``limit``.

Usage:
    @router.get("/users", response_model=Page[UserResponse])
    async def list_users(
        db: Annotated[AsyncSession, Depends(get_db)],
        params: PageParams,
    ) -> Page[UserResponse]:
        page, limit = params
        return await paginate_query(db, USERS_QUERY, [], page, limit, decode_user)
"""

from typing import Annotated

from fastapi import Depends, Request

from paginator.config import settings
from paginator.utils.params import parse_page_and_limit


def page_params(request: Request) -> tuple[int, int]:
    """설정된 기본값과 엄격 모드로 page/limit를 해석합니다.

    Resolve page/limit using the configured defaults and strictness.

    Raises:
        InvalidPageParamError: PAGINATION_STRICT_PARAMS가 켜져 있고 값이 잘못됨
            (Strict mode is on and a value is malformed)
    """
    return parse_page_and_limit(
        request.query_params,
        default_page=settings.PAGINATION_DEFAULT_PAGE,
        default_limit=settings.PAGINATION_DEFAULT_LIMIT,
        strict=settings.PAGINATION_STRICT_PARAMS,
    )


PageParams = Annotated[tuple[int, int], Depends(page_params)]
