"""
DevCamper Backend — Application Package Initializer
====================================================

What: Marks the `devcamper` directory as a Python package.
Who:  Used by uvicorn (`devcamper.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │    Routes + Auth (API Layer)        │  ← HTTP concerns, bearer tokens, roles
    ├─────────────────────────────────────┤
    │    Services (Resource Handlers)     │  ← CRUD, ownership policy, geo search
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data)          │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │    Database (Persistence)           │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never catch errors; services raise DevCamperError subclasses and
    the handlers registered in main.py turn them into the error envelope.
"""

__version__ = "1.0.0"
