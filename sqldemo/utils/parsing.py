"""Parsing helpers for text typed into forms."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional


def parse_identity(text: Optional[str]) -> Optional[int]:
    """
    Parse a row identity typed by a user.

    Surrounding whitespace is ignored. Returns None when the text is not an
    integer.
    """
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def trim_fields(fields: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Strip every field value, turning missing values into empty strings."""
    return {name: (value or "").strip() for name, value in fields.items()}


def parse_assignments(pairs: Iterable[str]) -> Dict[str, str]:
    """
    Turn ``["title=A", "url=C"]`` into ``{"title": "A", "url": "C"}``.

    Only the first ``=`` splits, so values may contain ``=`` themselves.
    """
    fields: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected column=value, got {pair!r}")
        fields[name] = value
    return fields


__all__ = ["parse_identity", "parse_assignments", "trim_fields"]
