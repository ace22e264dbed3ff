"""
Shared lifecycle logic for entries.

A manager turns submitted form values into a validated Document, derives the
slug from the title field, and decides whether an edit is an in-place update
or a rename (the derived slug changed). Field-level business rules live here;
the ContentStore only sees an opaque document plus one asset reference.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any
from urllib.parse import urlparse

from pressroom.content.frontmatter import Document
from pressroom.content.store import ContentStore, StoredEntry, StoreResult, Upload
from pressroom.content.types import ContentType
from pressroom.core.errors import NotFoundError, ValidationError
from pressroom.core.slugs import base_slug, is_valid_slug, slugify, unique_slug

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 200
MAX_IMAGE_SIZE = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")

TRUE_VALUES = ("on", "true", "yes", "1")


# ---------------------------------------------------------------------------
# Form value helpers
# ---------------------------------------------------------------------------


def get_text(form: Mapping[str, Any], key: str) -> str:
    """Trimmed string value of *key*, ``""`` when absent."""
    value = form.get(key)
    if value is None:
        return ""
    return str(value).strip()


def get_bool(form: Mapping[str, Any], key: str) -> bool:
    """Checkbox semantics: ``on``/``true``/``yes``/``1`` are true."""
    value = form.get(key)
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in TRUE_VALUES


def collapse_whitespace(text: str) -> str:
    """Fold line breaks and runs of whitespace into single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def split_list(value: Any, separator: str) -> list[str]:
    """Split a delimited string (or pass through a list), dropping blanks."""
    if value is None:
        return []
    items: Iterable[Any] = value if isinstance(value, (list, tuple)) else str(value).split(separator)
    return [str(item).strip() for item in items if str(item).strip()]


def require(value: str, label: str) -> str:
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def check_length(value: str, label: str, minimum: int, maximum: int) -> str:
    if len(value) < minimum:
        raise ValidationError(f"{label} must be at least {minimum} characters")
    if len(value) > maximum:
        raise ValidationError(f"{label} must not exceed {maximum} characters")
    return value


def check_single_line(value: str, label: str) -> str:
    if "\n" in value or "\r" in value:
        raise ValidationError(f"{label} must be a single line")
    return value


def parse_date(value: str, label: str) -> date:
    """Parse ``YYYY-MM-DD`` (a trailing time part is ignored)."""
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationError(f"{label} must be a date in YYYY-MM-DD format") from None


def check_url(value: str, label: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"{label} must be a valid http(s) URL")
    return value


def validate_upload(upload: Upload | None) -> Upload | None:
    """Check an image upload; returns None when nothing was uploaded."""
    if upload is None or upload.is_empty:
        return None
    extension = upload.filename.rsplit(".", 1)[-1].lower() if "." in upload.filename else ""
    if upload.content_type:
        type_ok = upload.content_type.lower() in ALLOWED_IMAGE_TYPES
    else:
        type_ok = extension in ALLOWED_IMAGE_EXTENSIONS
    if not type_ok:
        raise ValidationError(f"Image must be one of: {', '.join(ALLOWED_IMAGE_TYPES)}")
    if upload.size > MAX_IMAGE_SIZE:
        raise ValidationError(f"Image must be smaller than {MAX_IMAGE_SIZE // (1024 * 1024)}MB")
    return upload


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class EntryManager:
    """Lifecycle of one content type's entries.

    Subclasses set ``content_type`` and implement ``build_document``.
    """

    content_type: ContentType

    def __init__(self, store: ContentStore):
        if store.content_type is not self.content_type:
            raise ValueError(
                f"{type(self).__name__} needs a store for '{self.content_type.name}', "
                f"got '{store.content_type.name}'"
            )
        self.store = store

    def build_document(self, form: Mapping[str, Any]) -> Document:
        """Validate *form* and build the document to commit.

        Raises:
            ValidationError: A field is missing or violates a business rule
        """
        raise NotImplementedError

    def derive_slug(self, document: Document) -> str:
        """Slug of the document's title field.

        Raises:
            ValidationError: The title has no characters a slug can keep
        """
        title = str(document.fields.get(self.content_type.title_field, ""))
        slug = slugify(title)
        if not is_valid_slug(slug):
            raise ValidationError(
                f"{self.content_type.label} {self.content_type.title_field} "
                "must contain letters or digits to generate a slug"
            )
        return slug

    def create(
        self,
        form: Mapping[str, Any],
        upload: Upload | None = None,
        unique: bool = False,
    ) -> StoreResult:
        """Validate and commit a new entry.

        Args:
            form: Submitted form values
            upload: Optional image upload
            unique: If the derived slug is taken, append a millisecond
                timestamp instead of failing

        Raises:
            ValidationError: Invalid input
            AlreadyExistsError: An entry with the same slug exists
        """
        document = self.build_document(form)
        upload = validate_upload(upload)
        slug = self.derive_slug(document)
        if unique and self.store.exists(slug):
            slug = unique_slug(str(document.fields[self.content_type.title_field]), [slug])
        if upload is None and self.content_type.default_asset_url:
            document.fields.setdefault(self.content_type.asset_field, self.content_type.default_asset_url)
        return self.store.create(slug, document, upload)

    def update(self, slug: str, form: Mapping[str, Any], upload: Upload | None = None) -> StoreResult:
        """Validate and commit an edit of the entry stored at *slug*.

        If the edited title derives a different slug, the entry is renamed.
        A slug made unique by create() keeps its suffix while the title still
        derives the same base slug.

        Raises:
            ValidationError: Invalid input
            NotFoundError: No entry at *slug*
            AlreadyExistsError: Renaming onto a slug that is taken
            ConflictError: Someone else changed the entry meanwhile
        """
        if not is_valid_slug(slug):
            raise ValidationError(f"Invalid slug: {slug!r}")
        document = self.build_document(form)
        upload = validate_upload(upload)
        new_slug = self.derive_slug(document)
        if new_slug != slug and new_slug != base_slug(slug):
            return self.store.rename(slug, new_slug, document, upload)
        return self.store.update(slug, document, upload)

    def delete(self, slug: str) -> StoreResult:
        """Delete the entry at *slug*; deleting a missing entry succeeds."""
        if not is_valid_slug(slug):
            raise ValidationError(f"Invalid slug: {slug!r}")
        return self.store.delete(slug)

    def get(self, slug: str) -> StoredEntry:
        """Read the entry at *slug* from the remote.

        Raises:
            NotFoundError: No entry at *slug*
        """
        entry = self.store.read(slug)
        if entry is None:
            raise NotFoundError(f"{self.content_type.label} '{slug}' not found")
        return entry

    def list_slugs(self) -> list[str]:
        return self.store.list_slugs()
