"""
Database ORM Models
SQLAlchemy ORM models and session management.
"""

from .models import Base, Result, Value, UTCDateTime
from .session import get_engine, get_session_factory, init_db, reset_engine

__all__ = [
    "Base",
    "Result",
    "Value",
    "UTCDateTime",
    "get_engine",
    "get_session_factory",
    "init_db",
    "reset_engine",
]
