"""Database module for the SQL blob backend."""

from dashstore.db.models import Base, StoredBlob
from dashstore.db.session import make_engine, make_session_factory

__all__ = [
    "Base",
    "StoredBlob",
    "make_engine",
    "make_session_factory",
]
