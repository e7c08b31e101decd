"""Core module with logging, exceptions and persistence backends."""

from dashstore.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    PersistenceReadError,
    StoreError,
    ValidationError,
    error_payload,
)
from dashstore.core.logging import get_logger, operation_scope, setup_logging

__all__ = [
    "get_logger",
    "operation_scope",
    "setup_logging",
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "PersistenceReadError",
    "ConfigurationError",
    "error_payload",
]
