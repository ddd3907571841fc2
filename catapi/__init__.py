"""
Cat Registry API — Application Package Initializer
===================================================

What: Marks the `catapi` directory as a Python package.
Why:  Enables module imports like `from catapi.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, caller resolution
    ├─────────────────────────────────────┤
    │     Services (Resource Handlers)    │  ← validate → authorize → store → envelope
    ├─────────────────────────────────────┤
    │  Authorization Gate (pure rules)    │  ← ALLOW / DENY decisions
    ├─────────────────────────────────────┤
    │     Stores (Entity persistence)     │  ← find / create / update / delete
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never talk to stores directly, and the gate never performs I/O.
"""

__version__ = "1.0.0"
