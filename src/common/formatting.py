"""Small text helpers shared by the web layer: slugs and relative times."""

import math
import re
import unicodedata
from datetime import datetime, timezone
from typing import Optional, Union

_STRIP_RE = re.compile(r"[^\w\s-]", re.UNICODE)
_MULTI_DASH_RE = re.compile(r"[-\s_]+")


def slugify(text: str) -> str:
    """Convert a post title to a URL-friendly slug.

    Examples:
        "Hello, World!"       → "hello-world"
        "  Rust  &  Python "  → "rust-python"
    """
    text = unicodedata.normalize("NFC", (text or "").strip().lower())
    text = _STRIP_RE.sub("", text)
    text = _MULTI_DASH_RE.sub("-", text)
    return text.strip("-")


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from the CMS into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _describe(seconds: float) -> str:
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    if minutes < 45:
        return f"{_round_half_up(minutes)} minutes"
    if minutes < 90:
        return "an hour"
    if hours < 22:
        return f"{_round_half_up(hours)} hours"
    if hours < 36:
        return "a day"
    if days < 26:
        return f"{_round_half_up(days)} days"
    if days < 45:
        return "a month"
    if days < 320:
        return f"{_round_half_up(days / 30.4)} months"
    if days < 548:
        return "a year"
    return f"{_round_half_up(days / 365)} years"


def from_now(value: Union[str, datetime, None], now: Optional[datetime] = None) -> str:
    """
    Describe a timestamp relative to now, e.g. "5 minutes ago" or "a year ago".

    :param value: ISO 8601 string or datetime
    :param now: Reference time, defaults to the current UTC time
    :return: Relative description, or empty string for a missing or bad timestamp
    """
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)

    delta = (now - moment).total_seconds()
    if delta >= 0:
        return f"{_describe(delta)} ago"
    return f"in {_describe(-delta)}"
