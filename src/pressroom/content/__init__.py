"""
Content storage for the site.

Provides:
- Front matter encoding/decoding for markdown documents
- Content type definitions (events, scholarships)
- ContentStore: create/update/rename/delete of entries on the remote branch
"""

from pressroom.content.frontmatter import Document, FieldDef, FieldKind, FrontMatterError, decode, encode
from pressroom.content.store import ContentStore, StoredEntry, StoreResult, Upload
from pressroom.content.types import CONTENT_TYPES, EVENTS, SCHOLARSHIPS, ContentType, get_content_type

__all__ = [
    "ContentStore",
    "StoredEntry",
    "StoreResult",
    "Upload",
    "Document",
    "FieldDef",
    "FieldKind",
    "FrontMatterError",
    "encode",
    "decode",
    "ContentType",
    "CONTENT_TYPES",
    "EVENTS",
    "SCHOLARSHIPS",
    "get_content_type",
]
