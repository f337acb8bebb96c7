from __future__ import annotations

import math
import re
from html import unescape
from typing import Any, Iterable

_SLUG_SAFE_PATTERN = re.compile(r"[^a-z0-9]+")
_TAG_PATTERN = re.compile(r"<[^>]+>")
_WS_PATTERN = re.compile(r"\s+")


def sanitize_text(value: Any, max_length: int | None = None) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if max_length and len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


def strip_html(value: Any) -> str:
    text = sanitize_text(value)
    if not text:
        return ""
    without_tags = _TAG_PATTERN.sub(" ", text)
    return _WS_PATTERN.sub(" ", unescape(without_tags)).strip()


def generate_slug(text: Any, fallback_id: Any) -> str:
    """Lowercase, hyphen-joined slug; falls back to `fallback_id` untouched."""

    lowered = sanitize_text(text).lower()
    slug = _SLUG_SAFE_PATTERN.sub("-", lowered).strip("-")
    return slug or str(fallback_id)


def first_text(raw: dict[str, Any], *keys: str) -> str:
    for key in keys:
        text = sanitize_text(raw.get(key))
        if text:
            return text
    return ""


def optional_text(value: Any) -> str | None:
    return sanitize_text(value) or None


def names(values: Any) -> tuple[str, ...]:
    """Collect display names from strings or `{name: ...}` objects, deduplicated."""

    if values is None:
        return ()
    if isinstance(values, (str, dict)):
        values = [values]
    if not isinstance(values, Iterable):
        return ()

    collected: list[str] = []
    seen: set[str] = set()
    for item in values:
        raw_name = item.get("name") if isinstance(item, dict) else item
        text = sanitize_text(raw_name)
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        collected.append(text)
    return tuple(collected)


def optional_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = sanitize_text(value).replace(",", "").replace("$", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def optional_int(value: Any) -> int | None:
    number = optional_number(value)
    return int(number) if number is not None else None
