"""API 패키지 — 목록 엔드포인트용 FastAPI 의존성.

API package — FastAPI dependencies for list endpoints.
"""
