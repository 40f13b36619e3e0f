"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Services validate input, enforce workflow rules and call repositories.
They never commit; routers own the transaction boundary.
"""
