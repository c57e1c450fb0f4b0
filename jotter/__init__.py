"""
Jotter — Note-Taking Web Application
=====================================

Server-rendered CRUD for text notes.

    ┌─────────────────────────────────────┐
    │      Routes + Templates (HTTP)      │  ← forms, redirects, flash messages
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← validation
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← SQLAlchemy statements
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
