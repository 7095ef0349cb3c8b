"""Command-line interface for Email Assistant.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

from email_assistant.config import get_settings
from email_assistant.exceptions import EmailAssistantError, GmailAPIError
from email_assistant.gmail.client import GmailClient
from email_assistant.mailbox import Mailbox
from email_assistant.models import MailboxView, ReplyRequest

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="email-assistant", description="Email Assistant")
    parser.add_argument(
        "--access-token",
        default=None,
        help="Gmail OAuth bearer token (default: settings gmail_access_token)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List messages in a mailbox view")
    list_parser.add_argument(
        "--view",
        choices=[v.value for v in MailboxView],
        default=MailboxView.INBOX.value,
        help="Mailbox view to list (default: inbox)",
    )
    list_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of messages (default: settings gmail_max_results)",
    )

    show_parser = subparsers.add_parser("show", help="Show a single message with its full body")
    show_parser.add_argument("message_id", help="Gmail message ID")

    mark_parser = subparsers.add_parser("mark-read", help="Mark a message as read")
    mark_parser.add_argument("message_id", help="Gmail message ID")

    reply_parser = subparsers.add_parser("reply", help="Send a plain-text reply")
    reply_parser.add_argument("--to", required=True, help="Recipient address")
    reply_parser.add_argument("--subject", required=True, help="Subject line")
    body_group = reply_parser.add_mutually_exclusive_group(required=True)
    body_group.add_argument("--body", help="Reply text")
    body_group.add_argument("--body-file", type=Path, help="File containing the reply text")
    reply_parser.add_argument("--in-reply-to", default=None, help="Message-ID being answered")
    reply_parser.add_argument(
        "--references",
        default=None,
        help="Space-separated Message-ID chain of the conversation",
    )

    return parser


async def _open_mailbox(args: argparse.Namespace) -> Mailbox:
    settings = get_settings()
    gmail = GmailClient(settings, access_token=args.access_token)
    await gmail.authenticate()
    return Mailbox(gmail, settings)


async def _cmd_list(args: argparse.Namespace) -> int:
    mailbox = await _open_mailbox(args)
    emails = await mailbox.list_messages(args.view, args.limit)

    for e in emails:
        marker = "READ" if e.read else "UNREAD"
        print(f"{marker}\t{e.received_time}\t{e.sender} <{e.sender_email}>\t{e.subject}\t{e.id}")

    logger.info("list_command_complete", view=args.view, message_count=len(emails))
    return 0


async def _cmd_show(args: argparse.Namespace) -> int:
    mailbox = await _open_mailbox(args)
    email = await mailbox.get_message(args.message_id)
    if email is None:
        print(f"Message not found: {args.message_id}", file=sys.stderr)
        return 1

    print(f"From: {email.sender} <{email.sender_email}>")
    print(f"Subject: {email.subject}")
    print(f"Received: {email.received_time}")
    print()
    print(email.body)
    return 0


async def _cmd_mark_read(args: argparse.Namespace) -> int:
    mailbox = await _open_mailbox(args)
    await mailbox.mark_read(args.message_id)
    print(f"Marked {args.message_id} as read")
    return 0


async def _cmd_reply(args: argparse.Namespace) -> int:
    if args.body is not None:
        body = args.body
    else:
        try:
            body = args.body_file.read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error: could not read {args.body_file}: {exc}", file=sys.stderr)
            return 1

    reply = ReplyRequest(
        to=args.to,
        subject=args.subject,
        body=body,
        in_reply_to=args.in_reply_to,
        references=args.references,
    )

    mailbox = await _open_mailbox(args)
    result = await mailbox.send_reply(reply)
    print(f"Sent message {result.id} in thread {result.thread_id}")
    return 0


_COMMANDS = {
    "list": _cmd_list,
    "show": _cmd_show,
    "mark-read": _cmd_mark_read,
    "reply": _cmd_reply,
}

# Verb used in "Could not <verb> mail" for transport failures.
_FAILED_ACTIONS = {"reply": "send", "mark-read": "update"}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Email Assistant CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
    )

    logger.info("email_assistant_started", version="0.1.0", debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    command = _COMMANDS.get(parsed.command)
    if command is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        return asyncio.run(command(parsed))
    except GmailAPIError as exc:
        action = _FAILED_ACTIONS.get(parsed.command, "fetch")
        print(f"Could not {action} mail: {exc}", file=sys.stderr)
        return 1
    except EmailAssistantError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
