"""Canonical store error envelope helpers."""

from __future__ import annotations

from typing import Any

from dashstore.core.logging import operation_context


def build_error_envelope(
    *,
    code: str,
    message: str,
    detail: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the error payload handed to whatever surfaces store errors."""
    ctx = operation_context.get()
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "collection": ctx.get("collection") if ctx else None,
            "operation": ctx.get("operation") if ctx else None,
        }
    }
    if detail is not None:
        payload["error"]["detail"] = detail
    if extra:
        payload.update(extra)
    return payload
