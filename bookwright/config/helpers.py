"""Utility helpers shared by the book metadata loader."""

from __future__ import annotations

import datetime as dt
import typing as typ

from ..errors import BookConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _format_date(value: dt.date | str | None) -> str | None:
    """Return an ISO date string for YAML dates or free-text values."""
    match value:
        case dt.datetime():
            return value.date().isoformat()
        case dt.date():
            return value.isoformat()
        case str() as text:
            return text.strip() or None
        case _:
            return None


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    """Return ``raw[key]`` when it is a mapping and an empty mapping otherwise."""
    value = raw.get(key)
    match value:
        case None:
            return {}
        case dict():
            return value
        case _:
            msg = f"Metadata field '{key}' must be a mapping."
            raise BookConfigError(msg)


def _positive_int(value: object | None, *, field: str, default: int) -> int:
    """Coerce ``value`` into a positive integer or raise ``BookConfigError``."""
    if value is None:
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"Metadata field '{field}' must be an integer."
        raise BookConfigError(msg) from exc
    if number < 1:
        msg = f"Metadata field '{field}' must be at least 1."
        raise BookConfigError(msg)
    return number


__all__ = ["_format_date", "_optional_str", "_positive_int", "_section"]
