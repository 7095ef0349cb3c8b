"""Mailbox views on top of the Gmail transport.

This module maps logical views (inbox, unread, sent, drafts) to Gmail label
filters, fetches a single page of messages and decodes them into `Email`
records. It also marks messages as read and sends replies.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import structlog

from email_assistant.config import Settings
from email_assistant.exceptions import GmailAPIError
from email_assistant.gmail.encoding import encode_reply
from email_assistant.gmail.parsing import UNREAD_LABEL, decode_message
from email_assistant.models import Email, MailboxView, ReplyRequest, SendResult

logger = structlog.get_logger()

LISTING_HEADERS: tuple[str, ...] = ("From", "Subject", "Date")

VIEW_LABELS: dict[MailboxView, tuple[str, ...]] = {
    MailboxView.INBOX: ("INBOX",),
    MailboxView.UNREAD: ("INBOX", "UNREAD"),
    MailboxView.SENT: ("SENT",),
    MailboxView.DRAFTS: ("DRAFT",),
}


class MailTransport(Protocol):
    """The subset of `GmailClient` the mailbox relies on."""

    async def list_message_ids(self, label_ids: list[str], max_results: int) -> list[dict[str, Any]]: ...

    async def get_message(
        self,
        message_id: str,
        *,
        format: str = "metadata",
        metadata_headers: list[str] | None = None,
    ) -> dict[str, Any]: ...

    async def modify_message(
        self,
        message_id: str,
        *,
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> dict[str, Any]: ...

    async def send_message(self, raw: str) -> dict[str, Any]: ...


def labels_for_view(view: MailboxView | str) -> list[str]:
    """Return the Gmail label filter for a view; unknown views map to the inbox."""
    try:
        resolved = MailboxView(view)
    except ValueError:
        logger.warning("unknown_mailbox_view", view=view)
        resolved = MailboxView.INBOX
    return list(VIEW_LABELS[resolved])


class Mailbox:
    """Read and reply to mail through an explicitly provided transport.

    The mailbox holds no state besides its transport and settings; every call
    is an independent request/response exchange.
    """

    def __init__(self, transport: MailTransport, settings: Settings | None = None) -> None:
        """Initialize the mailbox.

        Args:
            transport: Gmail transport, usually an authenticated `GmailClient`.
            settings: Application settings. If None, uses default settings.
        """
        from email_assistant.config import get_settings

        self.transport = transport
        self.settings = settings or get_settings()

    async def list_messages(
        self,
        view: MailboxView | str = MailboxView.INBOX,
        max_results: int | None = None,
    ) -> list[Email]:
        """List one page of a mailbox view, shallow-decoded.

        Args:
            view: Mailbox view name.
            max_results: Page size. If None, uses `settings.gmail_max_results`.

        Returns:
            Emails in Gmail's listing order. `body` holds the snippet.

        Raises:
            GmailAPIError: If the listing request fails. Messages whose metadata
                cannot be fetched are skipped instead.
        """

        label_ids = labels_for_view(view)
        view_name = view.value if isinstance(view, MailboxView) else view
        page_size = max_results if max_results is not None else self.settings.gmail_max_results

        refs = await self.transport.list_message_ids(label_ids, page_size)
        message_ids = [r.get("id") for r in refs if isinstance(r, dict)]
        message_ids = [m for m in message_ids if isinstance(m, str) and m]

        logger.info("mailbox_list_ids_received", view=view_name, message_count=len(message_ids))

        results = await asyncio.gather(*(self._fetch_metadata(m) for m in message_ids))
        emails = [e for e in results if e is not None]

        logger.info("mailbox_list_complete", view=view_name, decoded=len(emails), requested=len(message_ids))
        return emails

    async def get_message(self, message_id: str) -> Email | None:
        """Fetch and fully decode a single message.

        Returns:
            The decoded email, or None if Gmail could not return it.
        """

        try:
            raw = await self.transport.get_message(message_id, format="full")
        except GmailAPIError as exc:
            logger.warning("mailbox_get_message_failed", message_id=message_id, error=str(exc))
            return None

        return decode_message(raw, full_decode=True, max_part_depth=self.settings.max_part_depth)

    async def mark_read(self, message_id: str) -> None:
        """Remove the unread marker from a message.

        Raises:
            GmailAPIError: If the request fails.
        """

        await self.transport.modify_message(message_id, remove_label_ids=[UNREAD_LABEL])
        logger.info("mailbox_message_marked_read", message_id=message_id)

    async def send_reply(self, reply: ReplyRequest) -> SendResult:
        """Encode and send a plain-text reply.

        Raises:
            GmailAPIError: If the request fails.
        """

        raw = encode_reply(reply).decode("ascii")
        response = await self.transport.send_message(raw)
        result = SendResult(id=str(response.get("id") or ""), thread_id=str(response.get("threadId") or ""))
        logger.info("mailbox_reply_sent", message_id=result.id, thread_id=result.thread_id)
        return result

    async def _fetch_metadata(self, message_id: str) -> Email | None:
        try:
            raw = await self.transport.get_message(
                message_id,
                format="metadata",
                metadata_headers=list(LISTING_HEADERS),
            )
        except GmailAPIError as exc:
            logger.warning("mailbox_metadata_fetch_failed", message_id=message_id, error=str(exc))
            return None

        return decode_message(raw, full_decode=False, max_part_depth=self.settings.max_part_depth)
