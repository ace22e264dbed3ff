"""
Front matter encoding and decoding.

A narrow textual codec for the flat field shapes events and scholarships use:
quoted strings, bare dates/numbers/booleans, and flat lists. It is not a YAML
implementation. Known limitations:

- scalars containing raw newlines are rejected on encode
- nested mappings are not supported in either direction
- unquoted scalars are read up to the end of the line, so a value written by
  hand with an unescaped ``: `` or trailing ``# comment`` is taken literally
- keys outside the schema are dropped when encoding with a schema
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DELIMITER = "---"

_DOCUMENT_RE = re.compile(r"^---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n(.*))?$", re.DOTALL)
_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*):(?:[ \t]+(.*))?$")
_ITEM_RE = re.compile(r"^[ \t]+-[ \t]+(.*)$")
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")


class FrontMatterError(ValueError):
    """A field value cannot be represented by the codec."""


class FieldKind(Enum):
    """How a field is written in the header."""

    STRING = "string"
    DATE = "date"
    NUMBER = "number"
    BOOL = "bool"
    STRING_LIST = "string_list"
    BARE_LIST = "bare_list"


_TEXT_KINDS = (FieldKind.STRING, FieldKind.DATE, FieldKind.STRING_LIST, FieldKind.BARE_LIST)
_LIST_KINDS = (FieldKind.STRING_LIST, FieldKind.BARE_LIST)


@dataclass(frozen=True)
class FieldDef:
    """Schema entry for a single header field."""

    name: str
    kind: FieldKind
    required: bool = False


@dataclass
class Document:
    """Parsed front matter plus body."""

    fields: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def escape_string(value: str) -> str:
    """Escape backslashes and double quotes for a double-quoted scalar."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def unescape_string(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _check_single_line(name: str, value: str) -> None:
    if "\n" in value or "\r" in value:
        raise FrontMatterError(f"Field '{name}' contains a newline, which front matter cannot hold")


def _quoted(name: str, value: Any) -> str:
    text = str(value)
    _check_single_line(name, text)
    return f'"{escape_string(text)}"'


def _bare(name: str, value: Any) -> str:
    text = str(value)
    _check_single_line(name, text)
    return text


def _render_scalar(name: str, kind: FieldKind, value: Any) -> str:
    if kind is FieldKind.BOOL:
        return "true" if value else "false"
    if kind is FieldKind.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FrontMatterError(f"Field '{name}' must be a number, got {value!r}")
        if isinstance(value, float) and not math.isfinite(value):
            raise FrontMatterError(f"Field '{name}' must be a finite number, got {value!r}")
        return repr(value) if isinstance(value, float) else str(value)
    if kind is FieldKind.DATE:
        # date/datetime objects render as their ISO date
        iso = getattr(value, "isoformat", None)
        return _bare(name, iso()[:10] if callable(iso) else value)
    return _quoted(name, value)


def _render_field(name: str, kind: FieldKind, value: Any) -> list[str]:
    if kind in (FieldKind.STRING_LIST, FieldKind.BARE_LIST):
        if isinstance(value, str) or not isinstance(value, Sequence):
            raise FrontMatterError(f"Field '{name}' must be a list, got {value!r}")
        render = _quoted if kind is FieldKind.STRING_LIST else _bare
        return [f"{name}:"] + [f"  - {render(name, item)}" for item in value]
    return [f"{name}: {_render_scalar(name, kind, value)}"]


def _infer_kind(value: Any) -> FieldKind:
    if isinstance(value, bool):
        return FieldKind.BOOL
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, (list, tuple)):
        return FieldKind.STRING_LIST
    if hasattr(value, "isoformat"):
        return FieldKind.DATE
    if isinstance(value, Mapping):
        raise FrontMatterError("Nested mappings are not supported in front matter")
    return FieldKind.STRING


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def encode(
    fields: Mapping[str, Any],
    body: str = "",
    schema: Sequence[FieldDef] | None = None,
) -> str:
    """Render *fields* and *body* as a markdown document.

    Args:
        fields: Header values
        body: Free-text body placed after the header
        schema: Field order and kinds. Without one, fields are written in
            insertion order with kinds inferred from their Python types, and
            only None values are omitted (``""`` and ``[]`` are kept).

    Returns:
        Document text

    Raises:
        FrontMatterError: A required field is missing or a value cannot be
            written (newline in a scalar, nested mapping, wrong type)
    """
    lines = [DELIMITER]

    if schema is None:
        for name, value in fields.items():
            if value is None:
                continue
            lines.extend(_render_field(name, _infer_kind(value), value))
    else:
        for fdef in schema:
            value = fields.get(fdef.name)
            if _is_empty(value):
                if fdef.required:
                    raise FrontMatterError(f"Missing required field '{fdef.name}'")
                continue
            lines.extend(_render_field(fdef.name, fdef.kind, value))

    lines.append(DELIMITER)
    header = "\n".join(lines)
    return f"{header}\n\n{body}" if body else f"{header}\n"


def parse_scalar(raw: str, typed: bool = True) -> Any:
    """Convert a header value to str, bool, int or float.

    With *typed* False the value is only unquoted and always stays a string.
    """
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return unescape_string(value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    if not typed:
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value


def decode(text: str, schema: Sequence[FieldDef] | None = None) -> Document:
    """Split *text* into header fields and body.

    Text without a ``---`` header decodes to no fields and the whole text as
    body. Lines that are neither ``key: value`` nor list items are ignored.
    With a *schema*, string-kind fields are kept as strings even when they
    look numeric (a bare tag ``2024`` stays ``"2024"``).
    """
    text = text.replace("\r\n", "\n")
    match = _DOCUMENT_RE.match(text)
    if not match:
        return Document(fields={}, body=text.strip())

    header, body = match.group(1) or "", match.group(2) or ""
    textual = {f.name for f in schema or () if f.kind in _TEXT_KINDS}
    fields: dict[str, Any] = {}
    current_list: str | None = None

    for line in header.split("\n"):
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        item = _ITEM_RE.match(line)
        if item and current_list is not None:
            fields[current_list].append(parse_scalar(item.group(1), typed=current_list not in textual))
            continue

        key = _KEY_RE.match(line)
        if not key:
            current_list = None
            continue

        name, raw = key.group(1), key.group(2)
        if raw is None or raw.strip() == "":
            fields[name] = []
            current_list = name
        else:
            fields[name] = parse_scalar(raw, typed=name not in textual)
            current_list = None

    for fdef in schema or ():
        if fdef.kind in _LIST_KINDS and fdef.name in fields and not isinstance(fields[fdef.name], list):
            fields[fdef.name] = [fields[fdef.name]]
    return Document(fields=fields, body=body.strip())

