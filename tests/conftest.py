"""Pytest configuration and shared fixtures."""

import base64
from typing import Any, Callable

import pytest

from email_assistant.exceptions import GmailAPIError


def _b64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from email_assistant.config import Settings

    return Settings(
        gmail_access_token="test-token",
        gmail_max_results=20,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def b64url() -> Callable[[str], str]:
    """Encode text the way Gmail encodes body data."""
    return _b64url


@pytest.fixture
def sample_metadata_message() -> dict:
    """Provide a Gmail message as returned with format=metadata."""
    return {
        "id": "msg123456",
        "threadId": "thread789",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": "Welcome to this week's Python tips!",
        "internalDate": "1700000000000",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [
                {"name": "From", "value": '"Python Weekly" <newsletter@python.org>'},
                {"name": "Subject", "value": "Weekly Newsletter - Python Tips"},
                {"name": "Date", "value": "Tue, 14 Nov 2023 22:13:20 +0000"},
            ],
        },
    }


@pytest.fixture
def sample_full_message() -> dict:
    """Provide a Gmail message as returned with format=full."""
    return {
        "id": "msg123456",
        "threadId": "thread789",
        "labelIds": ["INBOX"],
        "snippet": "Welcome to this week's Python tips!",
        "internalDate": "1700000000000",
        "payload": {
            "partId": "",
            "mimeType": "multipart/alternative",
            "filename": "",
            "headers": [
                {"name": "From", "value": '"Python Weekly" <newsletter@python.org>'},
                {"name": "To", "value": "user@example.com"},
                {"name": "Subject", "value": "Weekly Newsletter - Python Tips"},
            ],
            "body": {"size": 0},
            "parts": [
                {
                    "partId": "0",
                    "mimeType": "text/plain",
                    "filename": "",
                    "headers": [{"name": "Content-Type", "value": 'text/plain; charset="UTF-8"'}],
                    "body": {"size": 37, "data": _b64url("Welcome to this week's Python tips!\r\n")},
                },
                {
                    "partId": "1",
                    "mimeType": "text/html",
                    "filename": "",
                    "headers": [{"name": "Content-Type", "value": 'text/html; charset="UTF-8"'}],
                    "body": {"size": 50, "data": _b64url("<p>Welcome to <b>this week's</b> Python tips!</p>")},
                },
            ],
        },
    }


class FakeGmailTransport:
    """In-memory stand-in for `GmailClient` recording every call."""

    def __init__(
        self,
        messages: dict[str, dict[str, Any]] | None = None,
        listing: list[str] | None = None,
    ) -> None:
        self.messages = messages or {}
        self.listing = listing if listing is not None else list(self.messages)
        self.failing_ids: set[str] = set()
        self.fail_listing = False
        self.fail_sending = False
        self.list_calls: list[tuple[list[str], int]] = []
        self.get_calls: list[tuple[str, str, list[str] | None]] = []
        self.modify_calls: list[tuple[str, list[str] | None, list[str] | None]] = []
        self.sent: list[str] = []

    async def list_message_ids(self, label_ids: list[str], max_results: int) -> list[dict[str, Any]]:
        self.list_calls.append((label_ids, max_results))
        if self.fail_listing:
            raise GmailAPIError("Invalid Credentials", status_code=401)
        return [{"id": m} for m in self.listing[:max_results]]

    async def get_message(
        self,
        message_id: str,
        *,
        format: str = "metadata",
        metadata_headers: list[str] | None = None,
    ) -> dict[str, Any]:
        self.get_calls.append((message_id, format, metadata_headers))
        if message_id in self.failing_ids or message_id not in self.messages:
            raise GmailAPIError("Requested entity was not found.", status_code=404)
        return self.messages[message_id]

    async def modify_message(
        self,
        message_id: str,
        *,
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        self.modify_calls.append((message_id, add_label_ids, remove_label_ids))
        if message_id in self.failing_ids:
            raise GmailAPIError("Gmail API request failed: 500", status_code=500)
        return {"id": message_id}

    async def send_message(self, raw: str) -> dict[str, Any]:
        if self.fail_sending:
            raise GmailAPIError("Quota exceeded", status_code=429)
        self.sent.append(raw)
        return {"id": "sent-1", "threadId": "thread789", "labelIds": ["SENT"]}


@pytest.fixture
def fake_transport_factory() -> Callable[..., FakeGmailTransport]:
    """Build fake Gmail transports."""
    return FakeGmailTransport
