"""
NoteBox: Application Package
===============================

A small HTTP service for short text notes.

Layers:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← validation, HTTP shapes
    ├─────────────────────────────────────┤
    │        NoteStore (services)         │  ← one statement per operation
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence)          │  ← async engine and sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
