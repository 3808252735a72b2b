"""
Hebrew Study Backend - Application Package Initializer
=======================================================

What: Marks the `hebrewstudy` directory as a Python package.
Why:  Enables module imports like `from hebrewstudy.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps a layered structure:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  <- HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  <- sessions, vocab sets, Bible books
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  <- SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  <- Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Identity is resolved by an external provider (Supabase Auth) through the
    client in `services/identity_service.py`; nothing in this package stores
    credentials.
"""

__version__ = "1.0.0"
