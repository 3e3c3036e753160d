# Routes package init
"""
CodeVault Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - users.py:   GET/POST /users, GET/PATCH/DELETE /users/{id}
    - codes.py:   GET/POST /codes, GET/PATCH/DELETE /codes/{id}   (all protected)
    - auth.py:    POST /auth/token, GET /auth/me
    - health.py:  GET /health

Design Principle:
    Routes are THIN. They pull data out of the request, call a service and
    return its result. They never build error responses: services raise,
    error_handlers.py renders.
"""
