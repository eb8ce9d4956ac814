"""미들웨어 패키지 — 요청 로깅.

Middleware package — Request logging.
"""
