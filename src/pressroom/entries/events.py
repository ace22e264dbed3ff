"""Event entries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pressroom.content.frontmatter import Document
from pressroom.content.types import EVENTS
from pressroom.core.errors import ValidationError
from pressroom.entries.base import (
    MAX_TITLE_LENGTH,
    MIN_TITLE_LENGTH,
    EntryManager,
    check_length,
    check_single_line,
    check_url,
    collapse_whitespace,
    get_bool,
    get_text,
    parse_date,
    require,
    split_list,
)

MIN_SUMMARY_LENGTH = 10
MAX_SUMMARY_LENGTH = 500


class EventManager(EntryManager):
    """Create, edit and delete events."""

    content_type = EVENTS

    def build_document(self, form: Mapping[str, Any]) -> Document:
        title = require(get_text(form, "title"), "Title")
        check_single_line(title, "Title")
        check_length(title, "Title", MIN_TITLE_LENGTH, MAX_TITLE_LENGTH)

        start = parse_date(require(get_text(form, "date"), "Date"), "Date")

        end_raw = get_text(form, "endDate")
        end = parse_date(end_raw, "End date") if end_raw else None
        if end is not None and end < start:
            raise ValidationError("End date must be after start date")

        location = require(get_text(form, "location"), "Location")
        check_single_line(location, "Location")

        summary = collapse_whitespace(require(get_text(form, "summary"), "Summary"))
        check_length(summary, "Summary", MIN_SUMMARY_LENGTH, MAX_SUMMARY_LENGTH)

        time_text = check_single_line(get_text(form, "time"), "Time")

        link = get_text(form, "registrationLink")
        if link:
            check_single_line(link, "Registration link")
            check_url(link, "Registration link")

        tags = [check_single_line(t, "Tag") for t in split_list(form.get("tags"), ",")]

        fields: dict[str, Any] = {
            "title": title,
            "date": start.isoformat(),
            "endDate": end.isoformat() if end else None,
            "time": time_text or None,
            "location": location,
            "summary": summary,
            "tags": tags,
            "registrationLink": link or None,
            "registrationRequired": get_bool(form, "registrationRequired"),
            "draft": get_bool(form, "draft"),
        }
        body = str(form.get("body") or "").replace("\r\n", "\n").strip()
        return Document(fields=fields, body=body)
