"""
Repository path conventions.

    markdown:  <content_root>/<type>/<slug>.md
    assets:    <asset_root>/<type>/<slug>/<prefix>-<unixMillis>.<ext>
    asset URL: <asset_url_prefix>/<type>/<slug>/<file>
"""

from __future__ import annotations

import time
from collections.abc import Callable

from pressroom.core.config import SiteLayout


def join_path(*segments: str) -> str:
    """Join path segments with single slashes, skipping empty ones."""
    return "/".join(s.strip("/") for s in segments if s and s.strip("/"))


def extract_filename(path: str) -> str:
    """``/uploads/events/slug/photo.jpg`` -> ``photo.jpg``"""
    return path.rstrip("/").split("/")[-1]


def extract_extension(filename: str, default: str = "png") -> str:
    """Lowercased extension without the dot, or *default* when absent."""
    name = extract_filename(filename)
    if "." not in name:
        return default
    ext = name.rsplit(".", 1)[-1].lower()
    return ext or default


def generate_asset_filename(
    prefix: str,
    extension: str,
    clock: Callable[[], float] = time.time,
) -> str:
    """``event-1718000000000.jpg``

    The millisecond timestamp keeps a new upload from reusing the name of a
    previously deleted asset in the same folder.
    """
    return f"{prefix}-{int(clock() * 1000)}.{extension}"


class ContentPaths:
    """Path builder for one content type."""

    def __init__(self, layout: SiteLayout, content_type: str):
        self.layout = layout
        self.content_type = content_type

    @property
    def content_dir(self) -> str:
        return join_path(self.layout.content_root, self.content_type)

    @property
    def asset_type_dir(self) -> str:
        return join_path(self.layout.asset_root, self.content_type)

    def document_path(self, slug: str) -> str:
        return f"{self.content_dir}/{slug}.md"

    def asset_dir(self, slug: str) -> str:
        return f"{self.asset_type_dir}/{slug}"

    def asset_path(self, slug: str, filename: str) -> str:
        return f"{self.asset_dir(slug)}/{filename}"

    def asset_url(self, slug: str, filename: str) -> str:
        return "/" + join_path(self.layout.asset_url_prefix, self.content_type, slug, filename)

    def slug_from_document_name(self, name: str) -> str | None:
        """``fall-welcome.md`` -> ``fall-welcome``; None for non-markdown names."""
        if not name.endswith(".md"):
            return None
        return name[: -len(".md")]

    def owned_asset_path(self, url: str | None) -> str | None:
        """Map an asset URL back to its repository path.

        Only URLs inside a slug folder of this content type are mapped, so a
        shared default image (``/uploads/events/badge.png``) or an external
        URL is never treated as deletable.
        """
        if not url:
            return None
        prefix = "/" + join_path(self.layout.asset_url_prefix, self.content_type) + "/"
        if not url.startswith(prefix):
            return None
        relative = url[len(prefix):]
        parts = relative.split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return f"{self.asset_type_dir}/{relative}"

    def owned_asset_dir(self, url: str | None) -> str | None:
        """Repository folder holding the asset at *url*, if it is one of ours."""
        path = self.owned_asset_path(url)
        if path is None:
            return None
        return path.rsplit("/", 1)[0]
