"""페이지네이션 유틸리티 모듈.

Pagination utility module for raw SQL queries on async SQLAlchemy sessions.
Appends an OFFSET/LIMIT clause to a caller-supplied query, decodes each row
with a caller-supplied decoder, and wraps the same query in a COUNT(*)
subquery to compute the total number of pages.

Usage:
    def decode_user(row: Row) -> UserResponse:
        return UserResponse(id=row.id, name=row.name)

    page: Page[UserResponse] = await paginate_query(
        db,
        "SELECT id, name FROM users WHERE active = $1 ORDER BY id",
        [True],
        page=2,
        limit=20,
        decode=decode_user,
    )
"""

import asyncio
from collections.abc import Sequence
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

# DBAPI paramstyle별 위치 기반 플레이스홀더 — Positional placeholder per DBAPI paramstyle
_PLACEHOLDERS: dict[str, str] = {
    "numeric_dollar": "${}",  # asyncpg
    "numeric": ":{}",
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
}


class Page(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    One page of decoded rows plus the metadata clients need for paging controls.
    Immutable once built; serialises with snake_case field names.

    Attributes:
        items: 현재 페이지 항목 목록 (Decoded items, in row order)
        page: 요청 페이지 번호 (Requested page, 1-based, echoed unchanged)
        limit: 요청 페이지 크기 (Requested page size, echoed unchanged)
        total: 전체 항목 수 (Rows matched by the base query across all pages)
        total_pages: 전체 페이지 수 (ceil(total / limit))
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    items: list[T]
    page: int
    limit: int
    total: int
    total_pages: int


class RowDecoder(Protocol[T_co]):
    """결과 행 하나를 T로 변환하는 디코더.

    Converts one raw result row into a value. Any exception it raises aborts
    the paged query and propagates to the caller unchanged.
    """

    def __call__(self, row: Row[Any]) -> T_co: ...


def render_placeholder(paramstyle: str, position: int) -> str:
    """paramstyle에 맞는 위치 기반 플레이스홀더를 반환합니다.

    Render the placeholder for the 1-based bind ``position``.

    Raises:
        ValueError: 지원하지 않는 paramstyle (Named paramstyles have no positional form)
    """
    try:
        template: str = _PLACEHOLDERS[paramstyle]
    except KeyError:
        raise ValueError(f"Unsupported positional paramstyle: {paramstyle!r}") from None
    return template.format(position)


def build_paged_query(query: str, arg_count: int, paramstyle: str) -> str:
    """기본 쿼리 뒤에 OFFSET/LIMIT 절을 붙입니다.

    Append ``OFFSET <p> LIMIT <p>`` to ``query``. The two placeholders come
    after the ``arg_count`` placeholders already used by the base query,
    offset first.
    """
    offset_param: str = render_placeholder(paramstyle, arg_count + 1)
    limit_param: str = render_placeholder(paramstyle, arg_count + 2)
    return f"{query} OFFSET {offset_param} LIMIT {limit_param}"


def build_count_query(query: str) -> str:
    """기본 쿼리를 COUNT(*) 서브쿼리로 감쌉니다 (Wrap the base query in a COUNT(*) subquery)."""
    return f"SELECT COUNT(*) FROM ( {query} ) AS subquery"


def count_pages(total: int, limit: int) -> int:
    """전체 페이지 수를 계산합니다.

    Integer ceiling of ``total / limit``. A non-positive limit has no
    meaningful page count and yields 0.
    """
    if limit <= 0:
        return 0
    return (total + limit - 1) // limit


class PagedQueryExecutor:
    """원시 SQL 쿼리에 페이지네이션을 적용하는 실행기.

    Runs a base query twice on the same connection: once with OFFSET/LIMIT
    appended to fetch the page, then wrapped in COUNT(*) for the total.
    Holds no per-call state, so one instance can be shared by concurrent callers.

    Attributes:
        placeholder_style: 플레이스홀더 형식 강제 지정, None이면 드라이버 paramstyle 사용
            (Forced paramstyle; None detects it from the connection's dialect)
    """

    def __init__(self, placeholder_style: str | None = None) -> None:
        self.placeholder_style: str | None = placeholder_style

    async def query_paginated(
        self,
        db: AsyncSession,
        query: str,
        args: Sequence[Any],
        page: int,
        limit: int,
        decode: RowDecoder[T],
        *,
        timeout: float | None = None,
        isolation_level: str | None = None,
    ) -> Page[T]:
        """페이지 항목과 전체 개수를 조회하여 Page를 반환합니다.

        Fetch one page of ``query`` and the total row count.

        The count query only runs once every row of the page has been fetched
        and decoded. Database errors, decoder errors and row iteration errors
        are raised as-is; nothing is retried or wrapped.

        Args:
            db: 비동기 DB 세션 (Async database session)
            query: 기본 SELECT 쿼리, OFFSET/LIMIT 없이 (Base query without row limiting)
            args: 기본 쿼리의 위치 기반 바인드 값 (Positional binds for the base query)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based, not validated)
            limit: 페이지 크기 (Page size, not validated)
            decode: 행 디코더 (Row decoder)
            timeout: 두 쿼리 전체에 대한 제한 시간(초) (Seconds allowed for both queries)
            isolation_level: 두 쿼리에 적용할 격리 수준, 예: "REPEATABLE READ"
                (Isolation level so the page and the count see one snapshot)

        Returns:
            Page[T]: 디코딩된 항목과 페이지 메타데이터 (Decoded items and paging metadata)

        Raises:
            TimeoutError: timeout 초과 (Both queries did not finish in time)
        """
        async with asyncio.timeout(timeout):
            conn: AsyncConnection = await self._connection(db, isolation_level)
            items: list[T] = await self._fetch_page(conn, query, args, page, limit, decode)
            total: int = await self._count(conn, query, args)

        return Page(
            items=items,
            page=page,
            limit=limit,
            total=total,
            total_pages=count_pages(total, limit),
        )

    async def _connection(self, db: AsyncSession, isolation_level: str | None) -> AsyncConnection:
        if isolation_level is None:
            return await db.connection()
        # 세션 트랜잭션 시작 전에만 적용 가능 — Only valid before the session begins its transaction
        return await db.connection(execution_options={"isolation_level": isolation_level})

    async def _fetch_page(
        self,
        conn: AsyncConnection,
        query: str,
        args: Sequence[Any],
        page: int,
        limit: int,
        decode: RowDecoder[T],
    ) -> list[T]:
        paramstyle: str = self.placeholder_style or conn.dialect.paramstyle
        offset: int = (page - 1) * limit
        paged_query: str = build_paged_query(query, len(args), paramstyle)

        result = await conn.exec_driver_sql(paged_query, (*args, offset, limit))
        try:
            return [decode(row) for row in result]
        finally:
            result.close()

    async def _count(self, conn: AsyncConnection, query: str, args: Sequence[Any]) -> int:
        result = await conn.exec_driver_sql(build_count_query(query), tuple(args))
        return result.scalar_one()


# 기본 실행기 인스턴스 — Shared executor using the driver's paramstyle
paged_query_executor: PagedQueryExecutor = PagedQueryExecutor()


async def paginate_query(
    db: AsyncSession,
    query: str,
    args: Sequence[Any],
    page: int,
    limit: int,
    decode: RowDecoder[T],
    *,
    timeout: float | None = None,
    isolation_level: str | None = None,
) -> Page[T]:
    """기본 실행기로 페이지 쿼리를 수행합니다 (Shortcut for the shared executor)."""
    return await paged_query_executor.query_paginated(
        db,
        query,
        args,
        page,
        limit,
        decode,
        timeout=timeout,
        isolation_level=isolation_level,
    )
