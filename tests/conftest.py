"""테스트 인프라 — 가짜 DB 연결, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Recording fake connection/session and httpx client fixtures.
The fake connection plays back expected driver-level queries in order, so tests
can assert the exact SQL text and bind parameters sent by the executor.
"""

import asyncio
from collections import deque, namedtuple
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Annotated, Any

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from paginator.api.deps import PageParams
from paginator.database import get_db
from paginator.main import create_app
from paginator.utils.pagination import Page, paginate_query

UserRow = namedtuple("UserRow", ["id", "name"])

USERS_QUERY = "SELECT id, name FROM users WHERE active = true"


class UserResponse(BaseModel):
    id: int
    name: str


def decode_user(row: Any) -> UserResponse:
    """행을 UserResponse로 변환 — 정수가 아닌 id는 ValueError."""
    return UserResponse(id=int(row.id), name=row.name)


# ---------------------------------------------------------------------------
# 가짜 드라이버 결과/연결/세션
# ---------------------------------------------------------------------------
class FakeResult:
    """CursorResult 대역 — 반복, scalar_one, close만 지원."""

    def __init__(self, rows: list[Any], iteration_error: Exception | None = None) -> None:
        self._rows = list(rows)
        self._iteration_error = iteration_error
        self.closed = False

    def __iter__(self):
        for row in self._rows:
            yield row
        if self._iteration_error is not None:
            raise self._iteration_error

    def scalar_one(self) -> Any:
        (row,) = self._rows
        return row[0]

    def close(self) -> None:
        self.closed = True


@dataclass
class ExpectedQuery:
    statement: str
    parameters: tuple | None = None  # None이면 검사하지 않음
    rows: list[Any] = field(default_factory=list)
    error: Exception | None = None
    iteration_error: Exception | None = None
    delay: float = 0.0
    result: FakeResult | None = None


class FakeConnection:
    """AsyncConnection 대역 — 예상 쿼리를 순서대로 검증하고 재생합니다."""

    def __init__(self, paramstyle: str = "numeric_dollar") -> None:
        self.dialect = SimpleNamespace(paramstyle=paramstyle)
        self.executed: list[tuple[str, Any]] = []
        self._expected: deque[ExpectedQuery] = deque()

    def expect_query(self, statement: str, **kwargs: Any) -> ExpectedQuery:
        expected = ExpectedQuery(statement, **kwargs)
        self._expected.append(expected)
        return expected

    async def exec_driver_sql(self, statement: str, parameters: Any = None) -> FakeResult:
        self.executed.append((statement, parameters))
        if not self._expected:
            raise AssertionError(f"unexpected query: {statement}")

        expected = self._expected.popleft()
        assert statement == expected.statement
        if expected.parameters is not None:
            assert parameters == expected.parameters
        if expected.delay:
            await asyncio.sleep(expected.delay)
        if expected.error is not None:
            raise expected.error

        expected.result = FakeResult(expected.rows, expected.iteration_error)
        return expected.result

    def expectations_were_met(self) -> bool:
        return not self._expected


class FakeSession:
    """AsyncSession 대역 — connection()만 지원하고 실행 옵션을 기록합니다."""

    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.execution_options: list[dict[str, Any] | None] = []

    async def connection(self, execution_options: dict[str, Any] | None = None) -> FakeConnection:
        self.execution_options.append(execution_options)
        return self.conn


@pytest.fixture
def conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def db(conn: FakeConnection) -> FakeSession:
    return FakeSession(conn)


# ---------------------------------------------------------------------------
# HTTP 클라이언트 — 테스트용 목록 엔드포인트 포함
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def client(db: FakeSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — get_db를 가짜 세션으로 오버라이드합니다."""
    app = create_app()

    @app.get("/users")
    async def list_users(
        session: Annotated[Any, Depends(get_db)],
        params: PageParams,
    ) -> Page[UserResponse]:
        page, limit = params
        return await paginate_query(session, USERS_QUERY, [], page, limit, decode_user)

    async def _override_get_db() -> AsyncGenerator[FakeSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
