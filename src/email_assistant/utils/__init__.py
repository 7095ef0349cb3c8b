"""Utility functions for Email Assistant."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone

import structlog
from markdownify import markdownify as md

logger = structlog.get_logger()

_SECONDS_PER_MINUTE = 60
_MINUTES_PER_HOUR = 60
_MINUTES_PER_DAY = 24 * 60
_MINUTES_PER_MONTH = 30 * _MINUTES_PER_DAY
_MINUTES_PER_YEAR = 365 * _MINUTES_PER_DAY


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Render ``moment`` relative to ``now`` ("3 hours ago", "in 2 days").

    The largest unit that keeps the value meaningful is used and the value is
    rounded half-up, without qualifiers such as "about" or "almost".

    Args:
        moment: The instant to describe. Naive datetimes are taken as UTC.
        now: Reference instant. Defaults to the current time.

    Returns:
        A short English phrase.
    """

    if now is None:
        now = datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    delta_seconds = (now - moment).total_seconds()
    in_future = delta_seconds < 0
    seconds = abs(delta_seconds)
    minutes = seconds / _SECONDS_PER_MINUTE

    if minutes < 1:
        value, unit = _round_half_up(seconds), "second"
    elif minutes < _MINUTES_PER_HOUR:
        value, unit = _round_half_up(minutes), "minute"
    elif minutes < _MINUTES_PER_DAY:
        value, unit = _round_half_up(minutes / _MINUTES_PER_HOUR), "hour"
    elif minutes < _MINUTES_PER_MONTH:
        value, unit = _round_half_up(minutes / _MINUTES_PER_DAY), "day"
    elif minutes < _MINUTES_PER_YEAR:
        value, unit = _round_half_up(minutes / _MINUTES_PER_MONTH), "month"
        if value == 12:
            value, unit = 1, "year"
    else:
        value, unit = _round_half_up(minutes / _MINUTES_PER_YEAR), "year"

    phrase = f"{value} {unit}" if value == 1 else f"{value} {unit}s"
    return f"in {phrase}" if in_future else f"{phrase} ago"


_COMMENTS = re.compile(r"<!--[\s\S]*?-->")
_NON_CONTENT_BLOCKS = re.compile(r"<(head|script|style|title)\b[^>]*>[\s\S]*?</\1\s*>", re.IGNORECASE)
_SPACE_RUNS = re.compile(r"[ \t]{2,}")
_BLANK_RUNS = re.compile(r"\n{3,}")

# Emphasis and links are reduced to their text; markdown markers would be noise.
_STRIPPED_TAGS = ["a", "b", "strong", "i", "em", "u", "img", "table"]


def html_to_text(html: str) -> str:
    """Reduce an HTML document to readable plain text.

    Paragraphs, line breaks and list items survive as line structure; the
    rest of the markup is dropped. Best-effort: if the markup cannot be
    converted, the HTML is returned as is.
    """

    cleaned = _COMMENTS.sub("", html)
    cleaned = _NON_CONTENT_BLOCKS.sub("", cleaned)

    try:
        text = md(
            cleaned,
            heading_style="atx",
            bullets="-",
            strip=_STRIPPED_TAGS,
            escape_asterisks=False,
            escape_underscores=False,
            escape_misc=False,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("html_to_text_failed", error=str(exc))
        return html

    text = _SPACE_RUNS.sub(" ", text)
    lines = (line.strip() for line in text.split("\n"))
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


__all__ = ["format_relative_time", "html_to_text"]
