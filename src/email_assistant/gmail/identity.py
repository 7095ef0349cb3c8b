"""Sender identity parsing for free-form ``From`` header values."""

from __future__ import annotations

import re
from typing import NamedTuple

UNKNOWN_SENDER_NAME = "Unknown Sender"
UNKNOWN_SENDER_ADDRESS = "unknown@example.com"

_ANGLE_ADDRESS = re.compile(r"<([^>]+)>")
_QUOTED = re.compile(r"""^(["'])(.*)\1$""", re.DOTALL)


class Identity(NamedTuple):
    """Display name and address of a mail participant."""

    name: str
    address: str


def _local_part(address: str) -> str:
    return address.split("@", 1)[0]


def parse_identity(header_value: str | None) -> Identity:
    """Split a ``From`` header value into display name and address.

    Handles ``Name <addr>``, a bare ``addr@host`` and a bare display name.
    Missing pieces fall back to the local-part of the address or to fixed
    placeholders, so the result is always usable.

    Args:
        header_value: Raw header value, or None when the header is absent.

    Returns:
        Identity: Non-empty name and address.
    """

    value = (header_value or "").strip()
    if not value:
        return Identity(UNKNOWN_SENDER_NAME, UNKNOWN_SENDER_ADDRESS)

    match = _ANGLE_ADDRESS.search(value)
    if match and match.group(1).strip():
        address = match.group(1).strip()
        name = value[: match.start()].strip()
        quoted = _QUOTED.match(name)
        if quoted:
            name = quoted.group(2).strip()
        return Identity(name or _local_part(address) or UNKNOWN_SENDER_NAME, address)

    if "@" in value:
        return Identity(_local_part(value) or UNKNOWN_SENDER_NAME, value)

    return Identity(value, UNKNOWN_SENDER_ADDRESS)
