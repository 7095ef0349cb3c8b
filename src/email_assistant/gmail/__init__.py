"""Gmail transport and message transcoding.

This package converts Gmail API message resources into `Email` records and
builds raw RFC 2822 replies for sending.
"""

from .client import GmailClient
from .encoding import build_raw_message, encode_reply
from .identity import Identity, parse_identity
from .parsing import decode_message, extract_body_text

__all__ = [
    "GmailClient",
    "Identity",
    "build_raw_message",
    "decode_message",
    "encode_reply",
    "extract_body_text",
    "parse_identity",
]
