"""
Customer API — Application Package Initializer
===============================================

What: Marks the `customer_api` directory as a Python package.
Who:  Imported by uvicorn (`customer_api.main:app`), Alembic, and pytest.

Architecture Note:
    The service is layered the same way for every registered resource type:

    ┌─────────────────────────────────────┐
    │     Routes (generated handlers)     │  ← HTTP concerns, id decoding
    ├─────────────────────────────────────┤
    │     Services (ResourceRepository)   │  ← CRUD against the store
    ├─────────────────────────────────────┤
    │  Resources, Models & Schemas (Data) │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The OpenAPI document is derived from the same route declarations, so the
    published API description always matches the handlers that are mounted.
"""

__version__ = "1.3.1"
