# Middleware package init
"""
Customer API — Middleware Package
==================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: sets the correlation ID used by every later log line
    2. Logging: records method, path, status and duration
    3. GZip / CORS: FastAPI's bundled middleware

Authentication is not middleware here: the optional API-key check is a
FastAPI security dependency on the resource routers (see security.py), which
lets it appear in the generated OpenAPI document.
"""
