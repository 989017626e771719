"""Utility helpers shared by the book configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import BookConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_mapping(value: object | None, key: str) -> dict[str, typ.Any]:
    """Return ``value`` as a dict, treating ``None`` as empty."""
    match value:
        case None:
            return {}
        case dict():
            return dict(value)
        case _:
            msg = f"'{key}' must be a mapping."
            raise BookConfigError(msg)


def _as_bool(value: object, key: str, default: bool) -> bool:  # noqa: FBT001
    """Validate a YAML boolean, falling back to ``default`` when unset."""
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"'{key}' must be true or false."
        raise BookConfigError(msg)
    return value


def _as_str_list(value: object | None, key: str) -> list[str]:
    """Normalize a string or list of strings into a list of non-empty strings."""
    match value:
        case None:
            return []
        case str():
            return [value] if value.strip() else []
        case list():
            normalized: list[str] = []
            for segment in value:
                text = _optional_str(segment)
                if text:
                    normalized.append(text)
            return normalized
        case _:
            msg = f"'{key}' must be a string or a list of strings."
            raise BookConfigError(msg)


def _as_relative_path(value: object | None, key: str, default: Path) -> Path:
    """Return a path relative to the book root, rejecting absolute paths."""
    text = _optional_str(value)
    if text is None:
        return default
    path = Path(text)
    if path.is_absolute():
        msg = f"'{key}' must be relative to the book root, got '{text}'."
        raise BookConfigError(msg)
    return path


def _as_translations(value: object | None) -> dict[str, str]:
    """Map language codes to display labels.

    Accepts either a mapping (``{fr: Français}``) or a list of codes, in which
    case each code doubles as its label.
    """
    match value:
        case None:
            return {}
        case dict():
            return {
                str(code).strip().lower(): _optional_str(label) or str(code).strip()
                for code, label in value.items()
                if str(code).strip()
            }
        case list():
            return {code.lower(): code for code in _as_str_list(value, "book.translations")}
        case _:
            msg = "'book.translations' must be a mapping or a list."
            raise BookConfigError(msg)


__all__ = [
    "_as_bool",
    "_as_mapping",
    "_as_relative_path",
    "_as_str_list",
    "_as_translations",
    "_optional_str",
]
