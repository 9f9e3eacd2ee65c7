"""
Blog API — Application Package
==============================

What: REST API over a single collection of blog posts.
Who:  Imported by uvicorn (`blog_api.main:app`), Alembic, pytest and
      `python -m blog_api`.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← status codes, bodies
    ├─────────────────────────────────────┤
    │         Services (Storage calls)    │  ← one storage call per operation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
