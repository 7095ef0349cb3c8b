"""Data models for Email Assistant.

This module contains the Pydantic models exchanged with UI and API-route
callers. Attribute names are snake_case; ``model_dump(by_alias=True)`` yields
the camelCase shape the front end consumes.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MailboxView(str, Enum):
    """Logical mailbox views offered by the assistant."""

    INBOX = "inbox"
    UNREAD = "unread"
    SENT = "sent"
    DRAFTS = "drafts"


class Email(BaseModel):
    """Canonical email record produced by the message decoder.

    ``body`` only holds the full message text when the message was fetched
    individually; listings carry the provider snippet there instead.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Gmail message ID")
    sender: str = Field(description="Sender display name")
    sender_email: str = Field(description="Sender email address")
    subject: str = Field(description="Email subject")
    snippet: str = Field(default="", description="Preview text supplied by Gmail")
    body: str = Field(default="", description="Decoded body text, or the snippet for listings")
    received_time: str = Field(description="Relative receive time, e.g. '3 hours ago'")
    read: bool = Field(description="Whether the message has been read")


class ReplyRequest(BaseModel):
    """An outgoing plain-text reply."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    to: str = Field(description="Recipient address")
    subject: str = Field(description="Subject line")
    body: str = Field(default="", description="Plain-text body, sent verbatim")
    in_reply_to: Optional[str] = Field(
        default=None,
        description="Message-ID of the message being answered",
    )
    references: Optional[str] = Field(
        default=None,
        description="Space-separated Message-ID chain of the conversation",
    )


class SendResult(BaseModel):
    """Identifiers Gmail assigns to a sent message."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Gmail message ID")
    thread_id: str = Field(description="Gmail thread ID")


__all__ = ["Email", "MailboxView", "ReplyRequest", "SendResult"]
