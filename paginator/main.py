"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 등록.

FastAPI application entry point — middleware registration and health check.
Services built on the paginator include their own routers on ``app`` or
call ``create_app()`` for a fresh instance.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paginator.config import settings
from paginator.middleware.axiom_logging import AxiomLoggingMiddleware


def create_app() -> FastAPI:
    """애플리케이션을 생성합니다 (Build the FastAPI application)."""
    application: FastAPI = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
    application.add_middleware(AxiomLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """서버 상태 확인 엔드포인트 (Health check for load balancers)."""
        return {"status": "ok"}

    return application


app: FastAPI = create_app()
