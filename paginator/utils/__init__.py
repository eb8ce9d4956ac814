"""유틸리티 패키지 — 페이지네이션 실행기, 파라미터 파싱, 예외.

Utility package — Paged query executor, query-string parsing, and HTTP errors.
"""
