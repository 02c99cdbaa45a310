from __future__ import annotations

# Short import path for route modules.
# The actual SQLAlchemy engine/session setup lives in core/database.py.
from core.database import (  # noqa: F401
    DatabaseUnavailableError,
    ENGINE,
    SessionLocal,
    get_db,
    init_db,
    is_transient_db_connectivity_error,
)

__all__ = [
    "DatabaseUnavailableError",
    "ENGINE",
    "SessionLocal",
    "get_db",
    "init_db",
    "is_transient_db_connectivity_error",
]
