"""
IdeaFlow Backend — Application Package Initializer
==================================================

What: Marks the `ideaflow` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn ideaflow.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Business Logic, SQL)    │  ← validation, lifecycle transitions
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database handle (Persistence)     │  ← engine + session factory on app.state
    └─────────────────────────────────────┘

    Marketplace flow:
        User posts a Case (open)
          → an executor accepts it: Case becomes "accepted", a ProcessedCase is created
          → the executor completes it: ProcessedCase is replaced by a closed Project
        Users review each other at any point.
"""

__version__ = "1.0.0"
