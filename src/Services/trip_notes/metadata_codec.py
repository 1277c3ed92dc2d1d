# src/Services/trip_notes/metadata_codec.py
"""
Metadata Codec
==============
Encodes trip lifecycle fields into a single bracketed line at the head of
the notes field, and reads them back.

Format:
    [TRIPMETA:status=in_progress,startedAt=2024-01-01T08:00:00.000Z]

- Fields are joined by ',' and each pair by '='; insertion order is kept.
- Values must not contain ',' '=' or ']'. Only identifiers and ISO-8601
  timestamps are stored, so this is a documented constraint and is not
  checked at runtime.
- Only the very first line of the notes counts as a prefix.

decode() and strip() never raise: a missing, truncated or malformed prefix
reads as "no metadata".
"""

from typing import Mapping, Optional

from src.Services.trip_notes.tokenizer import META_PREFIX, LineKind, classify_line


def encode(fields: Mapping[str, str]) -> str:
    """
    Build the metadata line for `fields` (no trailing line break).

    Example:
        >>> encode({"status": "in_progress", "startedAt": "2024-01-01T08:00:00.000Z"})
        '[TRIPMETA:status=in_progress,startedAt=2024-01-01T08:00:00.000Z]'
    """
    body = ",".join(f"{key}={value}" for key, value in fields.items())
    return f"{META_PREFIX}{body}]"


def _parse_body(body: str) -> Optional[dict[str, str]]:
    if body == "":
        return {}

    fields: dict[str, str] = {}
    for entry in body.split(","):
        key, sep, value = entry.partition("=")
        if not sep or not key:
            return None
        fields[key] = value
    return fields


def decode(notes: Optional[str]) -> dict[str, str]:
    """
    Read the metadata prefix from the first line of `notes`.

    Returns:
        dict: decoded fields, or {} when the prefix is absent or malformed
    """
    if not notes or not notes.startswith(META_PREFIX):
        return {}

    first_line = notes.split("\n", 1)[0]
    token = classify_line(first_line)
    fields = _parse_body(token.meta_body) if token.kind is LineKind.META else None

    if fields is None:
        print(f"[TRIP_META] ⚠️  Ignoring malformed metadata prefix: {first_line[:80]!r}")
        return {}

    return fields


def strip(notes: Optional[str]) -> str:
    """
    Remove the metadata prefix line (and its line break) from `notes`.

    Consecutive metadata lines at the head are all removed, so
    strip(strip(x)) == strip(x). Anything else is returned unchanged.
    """
    if not notes:
        return notes or ""

    rest = notes
    while rest.startswith(META_PREFIX):
        first_line, sep, remainder = rest.partition("\n")
        if classify_line(first_line).kind is not LineKind.META:
            break
        rest = remainder
    return rest


def replace(notes: Optional[str], fields: Mapping[str, str]) -> str:
    """
    Put `encode(fields)` at the head of `notes`, dropping any previous prefix.
    """
    body = strip(notes)
    prefix = encode(fields)
    return f"{prefix}\n{body}" if body else prefix
