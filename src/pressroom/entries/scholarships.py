"""Scholarship entries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pressroom.content.frontmatter import Document
from pressroom.content.types import SCHOLARSHIPS
from pressroom.core.errors import ValidationError
from pressroom.entries.base import (
    MAX_TITLE_LENGTH,
    MIN_TITLE_LENGTH,
    EntryManager,
    check_length,
    check_single_line,
    collapse_whitespace,
    get_bool,
    get_text,
    parse_date,
    require,
    split_list,
)

SCHOLARSHIP_TYPES = ("scholarship", "fellowship", "internship")
FREQUENCIES = ("One-time", "Annual", "Semester", "Monthly")
MAX_AMOUNT = 1_000_000
MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 5000


def parse_amount(raw: str) -> int | float:
    """Parse a currency amount; whole numbers come back as int."""
    cleaned = raw.replace(",", "").replace("$", "").strip()
    try:
        amount = float(cleaned)
    except ValueError:
        raise ValidationError("Amount must be a number") from None
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValidationError("Amount must be a number")
    if amount <= 0:
        raise ValidationError("Amount must be a positive number")
    if amount > MAX_AMOUNT:
        raise ValidationError("Amount seems unrealistically high")
    return int(amount) if amount.is_integer() else amount


class ScholarshipManager(EntryManager):
    """Create, edit and delete scholarships."""

    content_type = SCHOLARSHIPS

    def build_document(self, form: Mapping[str, Any]) -> Document:
        name = require(get_text(form, "name"), "Name")
        check_single_line(name, "Name")
        check_length(name, "Name", MIN_TITLE_LENGTH, MAX_TITLE_LENGTH)

        kind = (get_text(form, "type") or "scholarship").lower()
        if kind not in SCHOLARSHIP_TYPES:
            raise ValidationError(f"Type must be one of: {', '.join(SCHOLARSHIP_TYPES)}")

        amount = parse_amount(require(get_text(form, "amount"), "Amount"))

        frequency = require(get_text(form, "frequency"), "Frequency")
        matches = [f for f in FREQUENCIES if f.lower() == frequency.lower()]
        if not matches:
            raise ValidationError(f"Frequency must be one of: {', '.join(FREQUENCIES)}")

        deadline = parse_date(require(get_text(form, "deadline"), "Deadline"), "Deadline")

        description = collapse_whitespace(require(get_text(form, "description"), "Description"))
        check_length(description, "Description", MIN_DESCRIPTION_LENGTH, MAX_DESCRIPTION_LENGTH)

        eligibility = split_list(form.get("eligibility"), "\n")
        if not eligibility:
            raise ValidationError("At least one eligibility criterion is required")

        order_raw = get_text(form, "order")
        try:
            order = int(order_raw) if order_raw else None
        except ValueError:
            raise ValidationError("Order must be a whole number") from None

        fields: dict[str, Any] = {
            "name": name,
            "type": kind,
            "amount": amount,
            "frequency": matches[0],
            "deadline": deadline.isoformat(),
            "description": description,
            "eligibility": eligibility,
            "order": order,
            "draft": get_bool(form, "draft") if "draft" in form else None,
        }
        body = str(form.get("body") or "").replace("\r\n", "\n").strip()
        return Document(fields=fields, body=body)
