"""Typed models for Gmail API message resources.

Gmail returns loosely shaped JSON: most fields are optional, a part body is
either inline data or a size-only placeholder for attachments, and multipart
nodes nest arbitrarily. These models make that shape explicit. Validation is
lenient on purpose: malformed entries are dropped rather than failing, since
inbound mail must never break the read path.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = structlog.get_logger()

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class Header(BaseModel):
    """A single ``name: value`` header from a message part."""

    model_config = _MODEL_CONFIG

    name: str
    value: str


class MessagePartBody(BaseModel):
    """Body of a message part.

    ``data`` holds base64url content for inline bodies. Attachments only carry
    ``size`` and ``attachment_id``.
    """

    model_config = _MODEL_CONFIG

    size: int = 0
    data: str | None = None
    attachment_id: str | None = None

    @field_validator("size", mode="before")
    @classmethod
    def _coerce_size(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    @field_validator("data", "attachment_id", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return _optional_str(value)


class MessagePart(BaseModel):
    """A node in the MIME tree of a message."""

    model_config = _MODEL_CONFIG

    part_id: str | None = None
    mime_type: str = ""
    filename: str | None = None
    headers: tuple[Header, ...] = ()
    body: MessagePartBody | None = None
    parts: tuple[MessagePart, ...] = ()

    @field_validator("part_id", "filename", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("mime_type", mode="before")
    @classmethod
    def _coerce_mime_type(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("headers", mode="before")
    @classmethod
    def _drop_malformed_headers(cls, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [
            h
            for h in value
            if isinstance(h, Header)
            or (isinstance(h, dict) and isinstance(h.get("name"), str) and isinstance(h.get("value"), str))
        ]

    @field_validator("body", mode="before")
    @classmethod
    def _drop_malformed_body(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, MessagePartBody)) else None

    @field_validator("parts", mode="before")
    @classmethod
    def _drop_malformed_parts(cls, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [p for p in value if isinstance(p, (dict, MessagePart))]

    @property
    def content_type(self) -> str:
        """MIME type lowercased, without parameters."""
        return self.mime_type.split(";", 1)[0].strip().lower()

    @property
    def inline_data(self) -> str | None:
        """Inline base64url body data, or None for empty or external bodies."""
        if self.body is None or not self.body.data:
            return None
        return self.body.data

    def header(self, name: str) -> str | None:
        """Return the first header matching ``name`` case-insensitively."""
        wanted = name.lower()
        for h in self.headers:
            if h.name.lower() == wanted:
                return h.value
        return None


class GmailMessage(BaseModel):
    """A Gmail ``users.messages`` resource (``format=metadata`` or ``full``)."""

    model_config = _MODEL_CONFIG

    id: str = ""
    thread_id: str | None = None
    label_ids: tuple[str, ...] | None = Field(
        default=None,
        description="None when Gmail sent no label information at all",
    )
    snippet: str = ""
    internal_date: str | None = None
    payload: MessagePart | None = None

    @field_validator("id", "snippet", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("thread_id", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return _optional_str(value)

    @field_validator("label_ids", mode="before")
    @classmethod
    def _coerce_label_ids(cls, value: Any) -> list[str] | None:
        if not isinstance(value, (list, tuple)):
            return None
        return [x for x in value if isinstance(x, str)]

    @field_validator("internal_date", mode="before")
    @classmethod
    def _coerce_internal_date(cls, value: Any) -> str | None:
        # Gmail sends an int64 as a JSON string; accept plain ints too.
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return str(value)
        return _optional_str(value)

    @field_validator("payload", mode="before")
    @classmethod
    def _drop_malformed_payload(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, MessagePart)) else None

    def header(self, name: str) -> str | None:
        """Return the first top-level header matching ``name``, if any."""
        if self.payload is None:
            return None
        return self.payload.header(name)


MessagePart.model_rebuild()


def parse_message(raw: dict[str, Any] | GmailMessage) -> GmailMessage:
    """Validate a Gmail API message dict into a :class:`GmailMessage`.

    Never raises. If the payload tree cannot be validated at all (for example a
    pathologically deep tree), the message is kept without its payload.
    """

    if isinstance(raw, GmailMessage):
        return raw
    if not isinstance(raw, dict):
        logger.warning("gmail_message_not_a_mapping", type=type(raw).__name__)
        return GmailMessage()

    try:
        return GmailMessage.model_validate(raw)
    except (ValidationError, RecursionError) as exc:
        logger.warning("gmail_message_payload_dropped", message_id=raw.get("id"), error=str(exc))
        stripped = {k: v for k, v in raw.items() if k != "payload"}
        return GmailMessage.model_validate(stripped)
