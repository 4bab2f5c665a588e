# Middleware package init
"""
Employees API — Middleware Package
=====================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any processing
    2. Request ID: correlation id for logs and the X-Request-ID header
    3. Logging: access line with status and duration
"""
