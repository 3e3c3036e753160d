# Middleware package init
"""
CodeVault Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to requests.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route
                                                           └─ [Auth Gate] → Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. GZip: Compresses larger responses
    4. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)

    The auth gate (auth.py) is not an ASGI middleware: it is a route
    dependency, because only some routes are protected and it must run
    before the storage dependency of the route it guards.
"""
