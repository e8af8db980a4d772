"""
Accounting Notes Backend: Application Package
=============================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, admin guard
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← CRUD rules, narration pipeline
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Object storage / TTS   │  ← Async sessions, R2 bucket, gTTS
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
