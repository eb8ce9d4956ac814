"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per request: method, path, masked query params,
status code, duration, the resolved page/limit, and which of them fell back
to defaults because the client sent a malformed value.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from paginator.config import settings
from paginator.utils.params import PAGE_PARAMS, invalid_page_params, parse_page_and_limit

# 마스킹 대상 필드 패턴 — Query params to mask
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|access_token|refresh_token|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def _mask_params(params: dict[str, str]) -> dict[str, str]:
    """민감 파라미터 마스킹 — Mask sensitive query parameter values."""
    return {k: "***" if _SENSITIVE_KEYS.search(k) else v[:200] for k, v in params.items()}


def _page_fields(request: Request) -> dict[str, Any]:
    """페이지 파라미터가 있는 요청의 로그 필드 — Paging fields for requests that send page/limit."""
    if not any(name in request.query_params for name in PAGE_PARAMS):
        return {}

    page, limit = parse_page_and_limit(
        request.query_params,
        default_page=settings.PAGINATION_DEFAULT_PAGE,
        default_limit=settings.PAGINATION_DEFAULT_LIMIT,
    )
    fields: dict[str, Any] = {"page": page, "limit": limit}
    defaulted: list[str] = invalid_page_params(request.query_params)
    if defaulted:
        fields["page_params_defaulted"] = defaulted
    return fields


async def _error_detail(response: Response) -> tuple[Response, str]:
    """에러 응답 body에서 사유 추출 — Read the error detail and rebuild the consumed response."""
    resp_body = b""
    async for chunk in response.body_iterator:
        resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        error_data = json.loads(resp_body)
        detail = str(error_data.get("detail", error_data))[:500]
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        detail = resp_body.decode("utf-8", errors="replace")[:500]

    rebuilt = Response(
        content=resp_body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return rebuilt, detail


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청을 Axiom에 로깅하는 미들웨어.

    Middleware that logs every API request to Axiom.
    Pass-through when AXIOM_API_TOKEN or AXIOM_DATASET is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS or not self._client:
            return await call_next(request)

        start_time = time.time()
        log_event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            log_event["query_params"] = _mask_params(dict(request.query_params))
        log_event.update(_page_fields(request))

        try:
            response = await call_next(request)
            log_event["status_code"] = response.status_code
            if response.status_code >= 400:
                response, log_event["error"] = await _error_detail(response)
        except Exception as exc:
            log_event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            log_event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [log_event])
            except Exception:
                pass  # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure

        return response
