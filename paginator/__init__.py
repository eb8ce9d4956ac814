"""페이지네이터 패키지 — 원시 SQL 쿼리용 페이지네이션.

Paginator package — Paged raw SQL queries for async SQLAlchemy services.
"""

from paginator.utils.pagination import Page, PagedQueryExecutor, RowDecoder, paginate_query
from paginator.utils.params import get_page_and_limit_params, parse_page_and_limit

__all__ = [
    "Page",
    "PagedQueryExecutor",
    "RowDecoder",
    "get_page_and_limit_params",
    "paginate_query",
    "parse_page_and_limit",
]
