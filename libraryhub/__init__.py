"""
LibraryHub Backend — Application Package
=========================================

What: REST backend for the library catalogue, circulation and home feeds.
Who:  Imported by uvicorn (`libraryhub.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth cookie
    ├─────────────────────────────────────┤
    │   Services (aggregation / ranking)  │  ← search, trees, recommendations
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

The services keep their reshaping logic in pure functions (tree building,
author aggregation, hit building, loan formatting) so they can be tested on
plain rows; the service classes only issue the queries.
"""

__version__ = "1.0.0"
