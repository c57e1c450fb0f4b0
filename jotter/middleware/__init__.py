# Middleware package init
"""
Jotter — Middleware Package
============================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Session] → [GZip] → Route Handler

    - Request ID runs first so the access log line carries the ID
    - Session (Starlette SessionMiddleware) loads/saves flash messages
"""
