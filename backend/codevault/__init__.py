"""
CodeVault Backend — Application Package Initializer
====================================================

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes + Auth Gate (API Layer)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services + Access Policy (Logic)   │  ← validation, ownership rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Storage (DocumentStore over SQL)  │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Failures from any layer are raised and rendered by error_handlers.py.
"""

__version__ = "1.0.0"
