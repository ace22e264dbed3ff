"""
Slug derivation.

A slug is the storage key of an entry: lowercase ASCII letters, digits and
hyphens, derived once from the entry's title or name.
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterable

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
# Millisecond timestamp appended by unique_slug
UNIQUE_SUFFIX = re.compile(r"-\d{13}$")


def slugify(title: str) -> str:
    """Convert a title to a URL-friendly slug.

    Lowercase, drop everything except word characters, spaces and hyphens,
    collapse runs of spaces/underscores/hyphens into one hyphen, and strip
    leading/trailing hyphens.

    Returns ``""`` when nothing survives (e.g. a title of only punctuation);
    callers must treat that as invalid input.
    """
    if not title or not isinstance(title, str):
        return ""

    slug = title.lower().strip()
    # ASCII word characters only, so the result is always URL-safe
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug, flags=re.ASCII)
    return slug.strip("-")


def is_valid_slug(slug: str) -> bool:
    """True if *slug* is non-empty and only contains ``[a-z0-9-]``."""
    return bool(slug) and SLUG_PATTERN.match(slug) is not None


def unique_slug(title: str, existing: Iterable[str] = ()) -> str:
    """Slugify *title*, appending a millisecond timestamp if already taken."""
    slug = slugify(title)
    if slug not in set(existing):
        return slug
    return f"{slug}-{int(time.time() * 1000)}"


def base_slug(slug: str) -> str:
    """*slug* without the timestamp suffix added by unique_slug()."""
    return UNIQUE_SUFFIX.sub("", slug)
