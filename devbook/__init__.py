"""
Devbook API — Application Package Initializer
==============================================

What: Marks the `devbook` directory as a Python package.
Who:  Imported by uvicorn (`devbook.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is layered; each layer only talks to the one below it.

    ┌─────────────────────────────────────┐
    │     Routes + Middleware (HTTP)      │  ← route table, auth, logging
    ├─────────────────────────────────────┤
    │      Controllers (Authorization)    │  ← ownership checks, orchestration
    ├─────────────────────────────────────┤
    │   Schemas (Validation) + Security   │  ← validate/format, bcrypt, JWT
    ├─────────────────────────────────────┤
    │  Repositories (Persistence contract)│  ← ABCs + SQLAlchemy implementations
    └─────────────────────────────────────┘

    Controllers receive repository instances through their constructors,
    so a test can swap the SQL store for an in-memory one.
"""

__version__ = "1.0.0"
