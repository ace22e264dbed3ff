"""
Entry-level operations over the remote file store.

An entry is one markdown document plus an optional folder of uploaded assets.
The remote store commits each file independently, so multi-file operations are
ordered to fail safe:

- assets are committed before the document that references them, so an
  interrupted create leaves an unreferenced asset rather than a document
  pointing at nothing
- a renamed document is committed at its new path before the old path is
  deleted, so an interrupted rename leaves a stale duplicate rather than
  losing the entry

Failures of the cleanup half of an operation (old asset, old document) are
logged and returned as warnings; the operation still succeeds because the new
state is already committed. Concurrency is guarded only by the blob SHA each
write carries: a stale SHA raises ConflictError and is never retried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pressroom.content.frontmatter import Document, FrontMatterError, decode, encode
from pressroom.content.types import ContentType
from pressroom.core.config import SiteLayout
from pressroom.core.errors import (
    AlreadyExistsError,
    NotFoundError,
    PressroomError,
    ValidationError,
)
from pressroom.core.paths import ContentPaths, extract_extension, generate_asset_filename
from pressroom.core.slugs import is_valid_slug
from pressroom.remote.client import CommitResult, ContentsClient

logger = logging.getLogger(__name__)


@dataclass
class Upload:
    """An uploaded file. Empty ``data`` means nothing was uploaded."""

    filename: str
    data: bytes
    content_type: str | None = None

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class StoredEntry:
    """A document as currently committed on the remote branch."""

    slug: str
    path: str
    sha: str
    fields: dict[str, Any]
    body: str


@dataclass
class StoreResult:
    """What an entry operation did."""

    slug: str
    document_path: str
    action: str  # "create", "update", "rename", "delete"
    asset_url: str | None = None
    previous_slug: str | None = None
    commits: list[CommitResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def committed(self) -> bool:
        """True if at least one write reached the remote."""
        return any(c.committed for c in self.commits)


class ContentStore:
    """Create, update, rename and delete entries of one content type."""

    def __init__(
        self,
        client: ContentsClient,
        content_type: ContentType,
        layout: SiteLayout | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize store.

        Args:
            client: Remote file client
            content_type: The content type this store manages
            layout: Repository layout (defaults to SiteLayout())
            clock: Time source for asset filenames
        """
        self.client = client
        self.content_type = content_type
        self.paths = ContentPaths(layout or SiteLayout(), content_type.name)
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, slug: str) -> StoredEntry | None:
        """Fetch and parse the document for *slug*, or None if absent."""
        if not is_valid_slug(slug):
            return None
        path = self.paths.document_path(slug)
        remote = self.client.get_file(path)
        if remote is None:
            return None
        doc = decode(remote.text, self.content_type.schema)
        return StoredEntry(slug=slug, path=path, sha=remote.sha, fields=doc.fields, body=doc.body)

    def exists(self, slug: str) -> bool:
        """Check the remote (never a rendered index) for a document at *slug*."""
        return self.client.get_file(self.paths.document_path(slug)) is not None

    def list_slugs(self) -> list[str]:
        """Slugs of all documents in the content folder."""
        slugs = []
        for entry in self.client.list_directory(self.paths.content_dir):
            if entry.type != "file":
                continue
            slug = self.paths.slug_from_document_name(entry.name)
            if slug:
                slugs.append(slug)
        return sorted(slugs)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _message(self, action: str, path: str) -> str:
        return self.content_type.commit_message(action, path)

    def _check_slug(self, slug: str) -> None:
        if not is_valid_slug(slug):
            raise ValidationError(f"Invalid slug: {slug!r}")

    def _render(self, document: Document, asset_url: str | None) -> str:
        fields = dict(document.fields)
        fields[self.content_type.asset_field] = asset_url
        try:
            return encode(fields, document.body, self.content_type.schema)
        except FrontMatterError as e:
            raise ValidationError(str(e)) from e

    def _plan_asset(self, slug: str, upload: Upload) -> tuple[str, str]:
        """Pick the repository path and public URL for a new upload."""
        filename = generate_asset_filename(
            self.content_type.asset_prefix,
            extract_extension(upload.filename),
            clock=self.clock,
        )
        return self.paths.asset_path(slug, filename), self.paths.asset_url(slug, filename)

    def _warn(self, result: StoreResult, message: str) -> None:
        logger.warning(message)
        result.warnings.append(message)

    def _discard_asset(self, url: str | None, result: StoreResult) -> None:
        """Best-effort delete of a replaced asset."""
        path = self.paths.owned_asset_path(url)
        if path is None:
            return
        try:
            result.commits.append(self.client.delete_file(path, message=self._message("delete", path)))
        except PressroomError as e:
            self._warn(result, f"Could not delete old asset {path}: {e.message}")

    def _write_asset(self, path: str, upload: Upload, result: StoreResult) -> bool:
        """Commit an upload. Returns False if the write did not reach the remote."""
        commit = self.client.put_file(path, upload.data, message=self._message("create", path))
        result.commits.append(commit)
        if not commit.committed and self.client.writable:
            self._warn(result, f"Asset {path} was not committed ({commit.skipped_reason}); document left unchanged")
            result.skipped = True
            return False
        return True

    def _skip(self, result: StoreResult, reason: str) -> StoreResult:
        self._warn(result, reason)
        result.skipped = True
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, slug: str, document: Document, upload: Upload | None = None) -> StoreResult:
        """Commit a new entry: asset first, then the document.

        Raises:
            ValidationError: Invalid slug or unrepresentable fields
            AlreadyExistsError: A document already exists at *slug*
            ConflictError: The document appeared between the check and the write
        """
        self._check_slug(slug)
        path = self.paths.document_path(slug)
        result = StoreResult(slug=slug, document_path=path, action="create")

        if self.client.get_file(path) is not None:
            raise AlreadyExistsError(f"{self.content_type.label} '{slug}' already exists")

        asset_path = None
        if upload is not None and not upload.is_empty:
            asset_path, result.asset_url = self._plan_asset(slug, upload)
        else:
            result.asset_url = (
                document.fields.get(self.content_type.asset_field) or self.content_type.default_asset_url
            )

        text = self._render(document, result.asset_url)

        if asset_path is not None and not self._write_asset(asset_path, upload, result):
            return result

        result.commits.append(self.client.put_file(path, text, message=self._message("create", path)))
        logger.info("Created %s %s", self.content_type.name, slug)
        return result

    def update(self, slug: str, document: Document, upload: Upload | None = None) -> StoreResult:
        """Rewrite an entry in place, replacing its asset if one is uploaded.

        The document is written with the SHA read at the start, so a
        concurrent edit makes this fail with ConflictError.

        The old asset is deleted before the document write. If that write
        fails with ConflictError, the live document still references the
        deleted image and the newly uploaded asset is left unreferenced.

        Raises:
            ValidationError: Invalid slug or unrepresentable fields
            NotFoundError: No document at *slug*
            ConflictError: The document changed since it was read
        """
        self._check_slug(slug)
        path = self.paths.document_path(slug)
        result = StoreResult(slug=slug, document_path=path, action="update")

        current = self.client.get_file(path)
        if current is None:
            if not self.client.writable:
                return self._skip(result, f"Skipping update of {path}: remote store unavailable")
            raise NotFoundError(f"{self.content_type.label} '{slug}' not found")

        stored = decode(current.text, self.content_type.schema)
        old_url = stored.fields.get(self.content_type.asset_field)

        asset_path = None
        if upload is not None and not upload.is_empty:
            asset_path, result.asset_url = self._plan_asset(slug, upload)
        else:
            result.asset_url = old_url or self.content_type.default_asset_url

        text = self._render(document, result.asset_url)

        if asset_path is not None:
            self._discard_asset(old_url, result)
            if not self._write_asset(asset_path, upload, result):
                return result

        result.commits.append(
            self.client.put_file(path, text, sha=current.sha, message=self._message("update", path))
        )
        logger.info("Updated %s %s", self.content_type.name, slug)
        return result

    def rename(
        self,
        old_slug: str,
        new_slug: str,
        document: Document,
        upload: Upload | None = None,
    ) -> StoreResult:
        """Move an entry to a new slug.

        The new document is committed first; the old one is deleted only after
        that succeeds. A failed delete of the old document leaves an orphan and
        a warning, not an error. The old asset folder is left in place because
        the new document may still reference an image inside it.

        When an image is uploaded, the old asset is deleted before the new
        document is written. If that write fails with ConflictError, the old
        document still references the deleted image and the new asset is
        left unreferenced.

        Raises:
            ValidationError: Invalid slug or unrepresentable fields
            NotFoundError: No document at *old_slug*
            AlreadyExistsError: A document already exists at *new_slug*
            ConflictError: The new path appeared between the check and the write
        """
        self._check_slug(old_slug)
        self._check_slug(new_slug)
        old_path = self.paths.document_path(old_slug)
        new_path = self.paths.document_path(new_slug)
        result = StoreResult(slug=new_slug, document_path=new_path, action="rename", previous_slug=old_slug)

        current = self.client.get_file(old_path)
        if current is None:
            if not self.client.writable:
                return self._skip(result, f"Skipping rename of {old_path}: remote store unavailable")
            raise NotFoundError(f"{self.content_type.label} '{old_slug}' not found")

        if self.client.get_file(new_path) is not None:
            raise AlreadyExistsError(f"{self.content_type.label} '{new_slug}' already exists")

        stored = decode(current.text, self.content_type.schema)
        old_url = stored.fields.get(self.content_type.asset_field)

        asset_path = None
        if upload is not None and not upload.is_empty:
            asset_path, result.asset_url = self._plan_asset(new_slug, upload)
        else:
            result.asset_url = old_url or self.content_type.default_asset_url

        text = self._render(document, result.asset_url)

        if asset_path is not None:
            self._discard_asset(old_url, result)
            if not self._write_asset(asset_path, upload, result):
                return result

        commit = self.client.put_file(new_path, text, message=self._message("create", new_path))
        result.commits.append(commit)
        if not commit.committed:
            if self.client.writable:
                self._warn(result, f"{new_path} was not committed ({commit.skipped_reason}); kept {old_path}")
                result.skipped = True
            return result

        try:
            result.commits.append(
                self.client.delete_file(old_path, sha=current.sha, message=self._message("delete", old_path))
            )
        except PressroomError as e:
            self._warn(result, f"Renamed to {new_path} but could not delete {old_path}: {e.message}")

        logger.info("Renamed %s %s -> %s", self.content_type.name, old_slug, new_slug)
        return result

    def delete(self, slug: str) -> StoreResult:
        """Delete an entry's assets, then its document.

        Deleting a slug with no document is a successful no-op and touches
        nothing else.

        Raises:
            ValidationError: Invalid slug
            ConflictError: The document changed since it was read
        """
        self._check_slug(slug)
        path = self.paths.document_path(slug)
        result = StoreResult(slug=slug, document_path=path, action="delete")

        current = self.client.get_file(path)
        if current is None:
            logger.info("Nothing to delete for %s %s", self.content_type.name, slug)
            return result

        stored = decode(current.text, self.content_type.schema)
        result.asset_url = stored.fields.get(self.content_type.asset_field)

        folders = [self.paths.asset_dir(slug)]
        # an entry renamed earlier still references an image in its old folder
        referenced = self.paths.owned_asset_dir(result.asset_url)
        if referenced and referenced not in folders:
            folders.append(referenced)

        for folder in folders:
            self._delete_folder(folder, result)

        result.commits.append(
            self.client.delete_file(path, sha=current.sha, message=self._message("delete", path))
        )
        logger.info("Deleted %s %s", self.content_type.name, slug)
        return result

    def _delete_folder(self, folder: str, result: StoreResult) -> None:
        for entry in self.client.list_directory(folder):
            if entry.type != "file":
                continue
            try:
                result.commits.append(
                    self.client.delete_file(entry.path, sha=entry.sha, message=self._message("delete", entry.path))
                )
            except PressroomError as e:
                self._warn(result, f"Could not delete asset {entry.path}: {e.message}")

        # directories are implicit on GitHub; this is normally a no-op
        try:
            self.client.delete_file(folder, message=self._message("delete", folder))
        except PressroomError as e:
            logger.debug("Folder %s not removed: %s", folder, e.message)
