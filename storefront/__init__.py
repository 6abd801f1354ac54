"""
Storefront API — Application Package Initializer
=================================================

What: Marks the `storefront` directory as a Python package.
Why:  Enables module imports like `from storefront.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps the usual layered shape:

    ┌─────────────────────────────────────┐
    │     Routes (dispatch table)         │  ← path + validation + role gate
    ├─────────────────────────────────────┤
    │     Services (controllers)          │  ← CRUD, reference checks
    ├─────────────────────────────────────┤
    │     Models & Schemas                │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (persistence)          │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
