"""Unit tests for mailbox listing, fetching and replying."""

import base64

import pytest

from email_assistant.exceptions import GmailAPIError
from email_assistant.mailbox import Mailbox, labels_for_view
from email_assistant.models import MailboxView, ReplyRequest


def _metadata(message_id: str, subject: str, labels: list[str] | None = None) -> dict:
    message = {
        "id": message_id,
        "threadId": f"t-{message_id}",
        "snippet": f"snippet {message_id}",
        "internalDate": "1700000000000",
        "payload": {
            "mimeType": "text/plain",
            "headers": [
                {"name": "From", "value": f"Sender {message_id} <{message_id}@example.com>"},
                {"name": "Subject", "value": subject},
            ],
        },
    }
    if labels is not None:
        message["labelIds"] = labels
    return message


class TestLabelsForView:
    """View to label filter mapping."""

    @pytest.mark.parametrize(
        ("view", "labels"),
        [
            ("inbox", ["INBOX"]),
            ("unread", ["INBOX", "UNREAD"]),
            ("sent", ["SENT"]),
            ("drafts", ["DRAFT"]),
            (MailboxView.UNREAD, ["INBOX", "UNREAD"]),
        ],
    )
    def test_known_views(self, view, labels) -> None:
        assert labels_for_view(view) == labels

    @pytest.mark.parametrize("view", ["spam", "", "INBOX"])
    def test_unknown_views_fall_back_to_inbox(self, view) -> None:
        assert labels_for_view(view) == ["INBOX"]


class TestListMessages:
    """Test suite for Mailbox.list_messages."""

    @pytest.mark.asyncio
    async def test_unread_view_returns_all_messages_shallow(self, fake_transport_factory, mock_settings) -> None:
        messages = {
            "a": _metadata("a", "First", ["INBOX", "UNREAD"]),
            "b": _metadata("b", "Second", ["INBOX", "UNREAD"]),
            "c": _metadata("c", "Third", ["INBOX", "UNREAD"]),
        }
        transport = fake_transport_factory(messages)
        mailbox = Mailbox(transport, mock_settings)

        emails = await mailbox.list_messages("unread", 10)

        assert len(emails) == 3
        assert [e.id for e in emails] == ["a", "b", "c"]
        assert [e.body for e in emails] == ["snippet a", "snippet b", "snippet c"]
        assert all(e.read is False for e in emails)
        assert transport.list_calls == [(["INBOX", "UNREAD"], 10)]
        assert {(call[1], tuple(call[2])) for call in transport.get_calls} == {
            ("metadata", ("From", "Subject", "Date"))
        }

    @pytest.mark.asyncio
    async def test_preserves_listing_order(self, fake_transport_factory, mock_settings) -> None:
        messages = {m: _metadata(m, m.upper(), ["INBOX"]) for m in ("x", "y", "z")}
        transport = fake_transport_factory(messages, listing=["z", "x", "y"])

        emails = await Mailbox(transport, mock_settings).list_messages("inbox", 5)

        assert [e.subject for e in emails] == ["Z", "X", "Y"]

    @pytest.mark.asyncio
    async def test_default_page_size_from_settings(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})

        emails = await Mailbox(transport, mock_settings).list_messages()

        assert emails == []
        assert transport.list_calls == [(["INBOX"], mock_settings.gmail_max_results)]

    @pytest.mark.asyncio
    async def test_unknown_view_lists_inbox(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})

        await Mailbox(transport, mock_settings).list_messages("archive", 3)

        assert transport.list_calls == [(["INBOX"], 3)]

    @pytest.mark.asyncio
    async def test_failed_metadata_fetch_is_skipped(self, fake_transport_factory, mock_settings) -> None:
        messages = {m: _metadata(m, m, ["INBOX"]) for m in ("a", "b", "c")}
        transport = fake_transport_factory(messages)
        transport.failing_ids.add("b")

        emails = await Mailbox(transport, mock_settings).list_messages("inbox", 10)

        assert [e.id for e in emails] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})
        transport.fail_listing = True

        with pytest.raises(GmailAPIError, match="Invalid Credentials"):
            await Mailbox(transport, mock_settings).list_messages("inbox", 10)


class TestGetMessage:
    """Test suite for Mailbox.get_message."""

    @pytest.mark.asyncio
    async def test_full_decode(self, fake_transport_factory, mock_settings, sample_full_message) -> None:
        transport = fake_transport_factory({"msg123456": sample_full_message})

        email = await Mailbox(transport, mock_settings).get_message("msg123456")

        assert email is not None
        assert email.body == "Welcome to this week's Python tips!"
        assert email.read is True
        assert transport.get_calls == [("msg123456", "full", None)]

    @pytest.mark.asyncio
    async def test_transport_failure_returns_none(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})

        assert await Mailbox(transport, mock_settings).get_message("missing") is None


class TestMarkRead:
    """Test suite for Mailbox.mark_read."""

    @pytest.mark.asyncio
    async def test_removes_unread_label(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})

        await Mailbox(transport, mock_settings).mark_read("m1")

        assert transport.modify_calls == [("m1", None, ["UNREAD"])]

    @pytest.mark.asyncio
    async def test_failure_propagates(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})
        transport.failing_ids.add("m1")

        with pytest.raises(GmailAPIError):
            await Mailbox(transport, mock_settings).mark_read("m1")


class TestSendReply:
    """Test suite for Mailbox.send_reply."""

    @pytest.mark.asyncio
    async def test_sends_encoded_reply(self, fake_transport_factory, mock_settings) -> None:
        transport = fake_transport_factory({})
        reply = ReplyRequest(to="a@b.com", subject="Re: X", body="hi", in_reply_to="abc@example.com")

        result = await Mailbox(transport, mock_settings).send_reply(reply)

        assert result.id == "sent-1"
        assert result.thread_id == "thread789"
        assert len(transport.sent) == 1
        raw = transport.sent[0]
        decoded = base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)).decode("utf-8")
        assert decoded.startswith("From: me\r\nTo: a@b.com\r\nSubject: Re: X\r\nIn-Reply-To: <abc@example.com>\r\n")
        assert decoded.endswith("\r\n\r\nhi")
