"""
Content type definitions.

Each content type names its repository folder, the header schema of its
documents, which field its slug is derived from, and where its primary image
is referenced.
"""

from __future__ import annotations

from dataclasses import dataclass

from pressroom.content.frontmatter import FieldDef, FieldKind


@dataclass(frozen=True)
class ContentType:
    """Storage description of one kind of entry."""

    name: str  # folder name: "events", "scholarships"
    label: str  # singular, for messages: "Event"
    title_field: str
    asset_field: str
    asset_prefix: str  # asset filename prefix: "event" -> event-<millis>.png
    schema: tuple[FieldDef, ...]
    default_asset_url: str | None = None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.schema]

    def commit_message(self, action: str, path: str) -> str:
        return f"chore({self.name}): {action} {path}"


EVENTS = ContentType(
    name="events",
    label="Event",
    title_field="title",
    asset_field="image",
    asset_prefix="event",
    default_asset_url="/uploads/events/ANS-badge-red.png",
    schema=(
        FieldDef("title", FieldKind.STRING, required=True),
        FieldDef("date", FieldKind.DATE, required=True),
        FieldDef("endDate", FieldKind.DATE),
        FieldDef("time", FieldKind.STRING),
        FieldDef("location", FieldKind.STRING, required=True),
        FieldDef("image", FieldKind.STRING),
        FieldDef("summary", FieldKind.STRING, required=True),
        FieldDef("tags", FieldKind.BARE_LIST),
        FieldDef("registrationLink", FieldKind.STRING),
        FieldDef("registrationRequired", FieldKind.BOOL, required=True),
        FieldDef("draft", FieldKind.BOOL, required=True),
    ),
)

SCHOLARSHIPS = ContentType(
    name="scholarships",
    label="Scholarship",
    title_field="name",
    asset_field="image",
    asset_prefix="scholarship",
    schema=(
        FieldDef("name", FieldKind.STRING, required=True),
        FieldDef("type", FieldKind.STRING, required=True),
        FieldDef("amount", FieldKind.NUMBER, required=True),
        FieldDef("frequency", FieldKind.STRING, required=True),
        FieldDef("deadline", FieldKind.DATE, required=True),
        FieldDef("description", FieldKind.STRING, required=True),
        FieldDef("eligibility", FieldKind.STRING_LIST, required=True),
        FieldDef("image", FieldKind.STRING),
        FieldDef("order", FieldKind.NUMBER),
        FieldDef("draft", FieldKind.BOOL),
    ),
)

CONTENT_TYPES: dict[str, ContentType] = {ct.name: ct for ct in (EVENTS, SCHOLARSHIPS)}


def get_content_type(name: str) -> ContentType:
    """Look up a content type by folder name.

    Raises:
        KeyError: Unknown content type
    """
    try:
        return CONTENT_TYPES[name]
    except KeyError:
        raise KeyError(f"Unknown content type: {name}. Known: {', '.join(CONTENT_TYPES)}") from None
