"""
Memorial Backend - Application Package Initializer
===================================================

What:  Marks the `memorial` directory as a Python package.
Who:   Imported by uvicorn (`memorial.main:app`), pytest, and every module
       that does `from memorial.config import settings`.

Architecture Note:
    The backend follows the same thin-route / service layering throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Orchestration)      │  ← tiles, compositor, pinning
    ├─────────────────────────────────────┤
    │         Schemas (Contracts)         │  ← Pydantic request/response models
    └─────────────────────────────────────┘

    There is no persistence layer: every request is stateless and the only
    durable output lives on the pinning service.
"""

__version__ = "1.0.0"
