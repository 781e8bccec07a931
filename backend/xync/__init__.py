"""
Xync Backend — Application Package Initializer
==============================================

What:  Marks the `xync` directory as a Python package.
Who:   Imported by uvicorn (`uvicorn xync.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered, and the owner id travels explicitly through
    every layer below the middleware:

    ┌─────────────────────────────────────┐
    │     Middleware (request id, auth)   │  ← resolves the caller's user id
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Ownership Data Layer)   │  ← every query scoped by owner
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
