"""Exception hierarchy for the entity store."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from dashstore.core.error_contract import build_error_envelope
from dashstore.core.logging import get_logger

logger = get_logger(__name__)


class StoreError(Exception):
    """Base exception for dashstore."""

    def __init__(
        self,
        message: str,
        code: str = "E5000",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ValidationError(StoreError):
    """Caller supplied invalid input."""

    def __init__(self, message: str = "Validation error", details: dict | None = None):
        super().__init__(message, code="E4220", details=details)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, collection: str) -> "ValidationError":
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in errors) or "payload"
        return cls(f"Invalid {collection} payload: {fields}", details={"collection": collection, "errors": errors})


class NotFoundError(StoreError):
    """Mutation target does not exist."""

    def __init__(self, message: str = "Record not found", *, collection: str | None = None, id: str | None = None):
        details = {}
        if collection is not None:
            details["collection"] = collection
        if id is not None:
            details["id"] = id
        super().__init__(message, code="E4040", details=details)


class PersistenceReadError(StoreError):
    """Stored blob could not be decoded. Recovered inside the persistence layer."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Unreadable blob for {key}: {reason}", code="E5010", details={"key": key})


class ConfigurationError(StoreError):
    """Backend cannot be built from the given settings."""

    def __init__(self, message: str):
        super().__init__(message, code="E5000")


def error_payload(exc: Exception) -> dict[str, Any]:
    """Build the canonical error envelope for an exception raised by the store."""
    if isinstance(exc, StoreError):
        logger.debug(f"Store error {exc.code}: {exc.message}", data=exc.details)
        return build_error_envelope(
            code=exc.code,
            message=exc.message,
            extra={"details": exc.details} if exc.details else None,
        )
    logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}", exc_info=exc)
    return build_error_envelope(code="E5000", message="Internal store error")
