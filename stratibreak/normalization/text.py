"""String and mapping normalization helpers."""

import re
from typing import Any

_CASE_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_SEPARATOR_RUN = re.compile(r"[\s_]+")
_WORD_BREAK = re.compile(r"[-_\s]+(.)?")
_UNSAFE_CHARS = re.compile(r"[^\w\s-]", re.ASCII)


def _upper_next(match: re.Match) -> str:
    char = match.group(1)
    return char.upper() if char else ""


def to_kebab_case(value: str) -> str:
    value = _CASE_BOUNDARY.sub(r"\1-\2", value)
    return _SEPARATOR_RUN.sub("-", value).lower()


def to_camel_case(value: str) -> str:
    value = _WORD_BREAK.sub(_upper_next, value)
    if value[:1].isascii() and value[:1].isupper():
        value = value[0].lower() + value[1:]
    return value


def to_pascal_case(value: str) -> str:
    value = _WORD_BREAK.sub(_upper_next, value)
    if value[:1].isascii() and value[:1].islower():
        value = value[0].upper() + value[1:]
    return value


def sanitize_string(value: str) -> str:
    """Drop everything except ASCII word characters, whitespace and hyphens."""
    return _UNSAFE_CHARS.sub("", value).strip()


def truncate_string(value: str, max_length: int) -> str:
    """Cut to max_length characters, the last three replaced by an ellipsis."""
    if len(value) <= max_length:
        return value
    return value[: max(0, max_length - 3)] + "..."


def keys_to_camel_case(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively rename mapping keys to camelCase, including dicts inside lists."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        camel_key = to_camel_case(key)
        if isinstance(value, dict):
            result[camel_key] = keys_to_camel_case(value)
        elif isinstance(value, list):
            result[camel_key] = [
                keys_to_camel_case(item) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[camel_key] = value
    return result


def remove_none_values(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively drop None values. Nested dicts left empty are dropped too."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            cleaned = remove_none_values(value)
            if cleaned:
                result[key] = cleaned
        else:
            result[key] = value
    return result
