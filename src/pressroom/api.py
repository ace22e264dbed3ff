"""
Framework-neutral handlers for the admin write endpoints.

Each handler takes the submitted form (and optional upload) plus the raw
``Authorization`` header, runs the auth gate, calls the entry manager and
returns an ApiResponse for the web layer to send. Errors from the
PressroomError hierarchy become JSON bodies with their own status; anything
else becomes a 500 whose body never includes the exception text.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pressroom.auth import BasicAuthGate
from pressroom.content.store import StoreResult, Upload
from pressroom.core.errors import PressroomError, ValidationError
from pressroom.entries.base import EntryManager

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
REMOTE_ERROR_MESSAGE = "Remote store error"

ADMIN_PAGES = {
    "events": "/admin",
    "scholarships": "/admin/scholarships",
}


@dataclass
class ApiResponse:
    """Status, JSON-able body and headers of a handler response."""

    status: int
    body: dict[str, Any] | str = ""
    headers: dict[str, str] = field(default_factory=dict)
    result: StoreResult | None = None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_response(error: Exception) -> ApiResponse:
    """Map an exception to a JSON error response.

    Remote failures (5xx) are logged; their body carries only a generic
    message, never the repository path or GitHub's error text.
    """
    if isinstance(error, PressroomError) and error.status_code >= 500:
        logger.error("%s: %s", error.__class__.__name__, error.message)
        return ApiResponse(
            status=error.status_code,
            body={"error": REMOTE_ERROR_MESSAGE, "timestamp": _timestamp()},
            headers={"Content-Type": "application/json"},
        )
    if isinstance(error, PressroomError):
        return ApiResponse(
            status=error.status_code,
            body={"error": error.message, "timestamp": _timestamp()},
            headers={"Content-Type": "application/json"},
        )
    logger.exception("Unhandled error: %s", error.__class__.__name__)
    return ApiResponse(
        status=500,
        body={"error": INTERNAL_ERROR_MESSAGE, "timestamp": _timestamp()},
        headers={"Content-Type": "application/json"},
    )


def redirect(location: str, result: StoreResult | None = None) -> ApiResponse:
    """303 See Other, so the browser follows up with a GET."""
    return ApiResponse(status=303, headers={"Location": location}, result=result)


def admin_page(manager: EntryManager) -> str:
    return ADMIN_PAGES.get(manager.content_type.name, "/admin")


def unauthorized(gate: BasicAuthGate) -> ApiResponse:
    status, headers, body = gate.challenge()
    return ApiResponse(status=status, body=body, headers=headers)


def _handle(
    gate: BasicAuthGate,
    authorization: str | None,
    manager: EntryManager,
    operation: Callable[[], StoreResult],
) -> ApiResponse:
    if not gate.check(authorization):
        return unauthorized(gate)
    try:
        result = operation()
    except Exception as e:
        return error_response(e)
    for warning in result.warnings:
        logger.warning("%s: %s", result.slug, warning)
    return redirect(admin_page(manager), result)


def create_entry(
    manager: EntryManager,
    form: Mapping[str, Any],
    gate: BasicAuthGate,
    authorization: str | None = None,
    upload: Upload | None = None,
) -> ApiResponse:
    """Handle the create form of a content type."""
    return _handle(gate, authorization, manager, lambda: manager.create(form, upload))


def update_entry(
    manager: EntryManager,
    form: Mapping[str, Any],
    gate: BasicAuthGate,
    authorization: str | None = None,
    upload: Upload | None = None,
) -> ApiResponse:
    """Handle the edit form; the stored slug comes from the ``slug`` field.

    A title change that derives a new slug renames the entry.
    """

    def operation() -> StoreResult:
        slug = str(form.get("slug") or "").strip()
        if not slug:
            raise ValidationError("Slug is required")
        return manager.update(slug, form, upload)

    return _handle(gate, authorization, manager, operation)


def delete_entry(
    manager: EntryManager,
    form: Mapping[str, Any],
    gate: BasicAuthGate,
    authorization: str | None = None,
) -> ApiResponse:
    """Handle the delete form; the slug comes from the ``slug`` field."""

    def operation() -> StoreResult:
        slug = str(form.get("slug") or "").strip()
        if not slug:
            raise ValidationError("Slug is required")
        return manager.delete(slug)

    return _handle(gate, authorization, manager, operation)
