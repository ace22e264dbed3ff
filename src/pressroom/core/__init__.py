"""Core utilities for pressroom."""

from pressroom.core.config import (
    AdminCredentials,
    RemoteSettings,
    Settings,
    SiteLayout,
    get_settings,
    load_settings,
)
from pressroom.core.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    PressroomError,
    RemoteError,
    RemoteUnavailableError,
    ValidationError,
)
from pressroom.core.slugs import base_slug, is_valid_slug, slugify, unique_slug

__all__ = [
    # Config
    "AdminCredentials",
    "RemoteSettings",
    "Settings",
    "SiteLayout",
    "get_settings",
    "load_settings",
    # Errors
    "PressroomError",
    "ValidationError",
    "NotFoundError",
    "AlreadyExistsError",
    "ConflictError",
    "RemoteError",
    "RemoteUnavailableError",
    # Slugs
    "slugify",
    "is_valid_slug",
    "unique_slug",
    "base_slug",
]
