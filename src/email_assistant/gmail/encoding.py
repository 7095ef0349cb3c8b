"""Build raw RFC 2822 replies for ``users.messages.send``."""

from __future__ import annotations

import base64
import re

from email_assistant.models import ReplyRequest

# Gmail replaces "me" with the authenticated account's address.
SELF_SENDER = "me"
CONTENT_TYPE = 'text/plain; charset="UTF-8"'

_LINE_BREAKS = re.compile(r"[\r\n]+")


def _header_value(value: str) -> str:
    # A CR or LF would end the header and let the value inject new ones.
    return _LINE_BREAKS.sub(" ", value)


def _message_id(value: str) -> str:
    return value if value.startswith("<") else f"<{value}>"


def build_raw_message(reply: ReplyRequest) -> str:
    """Assemble the RFC 2822 text of a plain-text reply.

    Headers are emitted in a fixed order. ``In-Reply-To`` and ``References`` are
    only present when the reply carries them. The body is copied verbatim.
    """

    lines = [
        f"From: {SELF_SENDER}",
        f"To: {_header_value(reply.to)}",
        f"Subject: {_header_value(reply.subject)}",
    ]
    if reply.in_reply_to:
        lines.append(f"In-Reply-To: {_message_id(_header_value(reply.in_reply_to).strip())}")
    if reply.references:
        chain = " ".join(_message_id(ref) for ref in _header_value(reply.references).split())
        if chain:
            lines.append(f"References: {chain}")
    lines.append(f"Content-Type: {CONTENT_TYPE}")
    lines.append("")
    lines.append(reply.body)
    return "\r\n".join(lines)


def base64url_encode(raw: bytes) -> bytes:
    """Base64-encode ``raw`` with the URL-safe alphabet and no padding."""
    return base64.b64encode(raw).replace(b"+", b"-").replace(b"/", b"_").rstrip(b"=")


def encode_reply(reply: ReplyRequest) -> bytes:
    """Encode a reply as the base64url payload expected in the ``raw`` field."""
    return base64url_encode(build_raw_message(reply).encode("utf-8"))
