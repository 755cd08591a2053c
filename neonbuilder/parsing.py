"""Shared parsing helpers for runtime and config value normalization."""

from __future__ import annotations

import re


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
_INVALID_FOLDER_CHARACTERS = re.compile(r'[<>:"/\\|?*]')


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def is_hex_color(value: object) -> bool:
    """Return whether a value is a `#RRGGBB` hex color string."""

    return isinstance(value, str) and _HEX_COLOR_PATTERN.match(value) is not None


def has_invalid_folder_characters(value: str) -> bool:
    """Return whether a folder name contains path-hostile characters."""

    return _INVALID_FOLDER_CHARACTERS.search(value) is not None


def parse_chunk_override(token: str) -> tuple[str, int]:
    """Parse one `section_id=count` chunk override token.

    Raises:
        ValueError: If the token is not `<id>=<positive integer>`.
    """

    if "=" not in token:
        raise ValueError(f"Chunk override `{token}` must use the form `section_id=count`.")
    raw_id, raw_count = token.split("=", 1)
    section_id = normalize_optional_string(raw_id)
    if section_id is None:
        raise ValueError(f"Chunk override `{token}` has a blank section id.")
    try:
        count = int(raw_count.strip())
    except ValueError as exc:
        raise ValueError(f"Chunk override `{token}` must use an integer count.") from exc
    return section_id, count
