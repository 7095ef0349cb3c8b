"""Mailbox listing, fetching and replying.

This package exposes the logical mailbox views the assistant renders and the
operations performed on single messages.
"""

from .service import Mailbox, MailTransport, labels_for_view

__all__ = ["MailTransport", "Mailbox", "labels_for_view"]
