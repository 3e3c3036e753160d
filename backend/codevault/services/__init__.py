# Services package init
"""
CodeVault Backend — Services Layer
===================================

What:  Business logic between routes (HTTP) and storage (persistence).

Service Inventory:
    - TokenCodec (token_service.py): issue/verify signed bearer tokens
    - access_policy.py: can_access / ensure_access ownership rules
    - UserService: User CRUD, required fields, optional cascade delete
    - CodeService: Code CRUD with ownership checks

Why services are separate from routes:
    1. Testability: services run against a fake DocumentStore, no HTTP needed
    2. Single responsibility: routes handle HTTP; services handle rules
"""
