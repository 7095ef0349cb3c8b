"""Helpers for parsing Gmail messages into :class:`~email_assistant.models.Email`.

Decoding never raises on odd input. Missing headers, bodies that cannot be
decoded and absent timestamps all resolve to fixed fallback values.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from typing import Any

import structlog

from email_assistant.gmail.identity import parse_identity
from email_assistant.gmail.payload import GmailMessage, MessagePart, parse_message
from email_assistant.models import Email
from email_assistant.utils import format_relative_time, html_to_text

logger = structlog.get_logger()

NO_SUBJECT = "(No Subject)"
UNKNOWN_TIME = "Unknown time"
INVALID_TIME = "Invalid date"
UNREAD_LABEL = "UNREAD"

DEFAULT_MAX_PART_DEPTH = 32

_TEXT_PLAIN = "text/plain"
_TEXT_HTML = "text/html"


def base64url_to_text(data: str) -> str:
    """Decode Gmail's unpadded base64url body data to text.

    Raises:
        binascii.Error: If ``data`` is not valid base64.
    """

    standard = data.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    raw = base64.b64decode(standard, validate=True)
    return raw.decode("utf-8", errors="replace")


def _render_part(part: MessagePart) -> str:
    data = part.inline_data
    if data is None:
        return ""

    try:
        text = base64url_to_text(data)
    except (binascii.Error, ValueError) as exc:
        logger.warning("gmail_body_decode_failed", part_id=part.part_id, error=str(exc))
        return ""

    if part.content_type == _TEXT_HTML:
        text = html_to_text(text)

    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def _first_child(parts: tuple[MessagePart, ...], content_type: str) -> MessagePart | None:
    for child in parts:
        if child.content_type == content_type and child.inline_data is not None:
            return child
    return None


def extract_body_text(part: MessagePart | None, max_depth: int = DEFAULT_MAX_PART_DEPTH) -> str:
    """Pick and decode the most readable body from a MIME tree.

    Among direct children, ``text/plain`` wins over ``text/html``. Otherwise each
    child is searched recursively in order and the first non-empty text is
    used, falling back to the node's own inline data.

    Args:
        part: Root of the tree, usually ``message.payload``.
        max_depth: Nesting levels below ``part`` that are still inspected.

    Returns:
        Decoded, trimmed text, or an empty string if nothing is readable.
    """

    return _walk(part, 0, max_depth) if part is not None else ""


def _walk(part: MessagePart, depth: int, max_depth: int) -> str:
    if depth > max_depth:
        logger.warning("gmail_part_depth_exceeded", max_depth=max_depth)
        return ""

    if part.parts:
        chosen = _first_child(part.parts, _TEXT_PLAIN) or _first_child(part.parts, _TEXT_HTML)
        if chosen is not None:
            return _render_part(chosen)

        for child in part.parts:
            text = _walk(child, depth + 1, max_depth)
            if text:
                return text

    return _render_part(part)


def _received_time(internal_date: str | None, now: datetime | None) -> str:
    if internal_date is None:
        return UNKNOWN_TIME
    try:
        moment = datetime.fromtimestamp(int(internal_date) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning("gmail_internal_date_invalid", internal_date=internal_date)
        return INVALID_TIME
    return format_relative_time(moment, now)


def _is_read(label_ids: tuple[str, ...] | None) -> bool:
    # No label information at all is treated as unread.
    if label_ids is None:
        return False
    return UNREAD_LABEL not in label_ids


def decode_message(
    raw: dict[str, Any] | GmailMessage,
    full_decode: bool,
    *,
    now: datetime | None = None,
    max_part_depth: int = DEFAULT_MAX_PART_DEPTH,
) -> Email:
    """Convert a Gmail API message into an :class:`Email`.

    Args:
        raw: Gmail API message dict (``format=metadata`` or ``full``) or an
            already validated :class:`GmailMessage`.
        full_decode: When False, ``body`` is the snippet and the MIME tree is
            not inspected. When True, the body is extracted from the tree.
        now: Reference instant for ``received_time``. Defaults to now.
        max_part_depth: Nesting limit for the body walk.

    Returns:
        Email: The decoded record.
    """

    message = parse_message(raw)
    if not message.id:
        logger.warning("gmail_message_missing_id", thread_id=message.thread_id)

    identity = parse_identity(message.header("From"))
    subject = message.header("Subject") or NO_SUBJECT

    if full_decode:
        body = extract_body_text(message.payload, max_part_depth)
    else:
        body = message.snippet

    return Email(
        id=message.id,
        sender=identity.name,
        sender_email=identity.address,
        subject=subject,
        snippet=message.snippet,
        body=body,
        received_time=_received_time(message.internal_date, now),
        read=_is_read(message.label_ids),
    )
