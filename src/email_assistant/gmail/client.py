"""Gmail API client implementation.

This module provides the transport used to talk to the Gmail REST API.

Notes:
    The Google API client is synchronous. This project wraps those calls using
    `asyncio.to_thread` so the rest of the codebase can remain async-friendly.
    Requests are never retried here; every failure surfaces as `GmailAPIError`.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog

from email_assistant.config import Settings
from email_assistant.exceptions import AuthenticationError, ConfigurationError, GmailAPIError

logger = structlog.get_logger()

USER_ID = "me"
LIST_FIELDS = "nextPageToken,messages/id"


def _provider_message(content: bytes | str | None) -> str | None:
    if not content:
        return None
    try:
        data = json.loads(content)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    return None


def to_gmail_api_error(exc: Exception) -> GmailAPIError:
    """Translate a transport exception into `GmailAPIError`.

    HTTP errors keep Gmail's own error message when the response carries one,
    otherwise a status-based message is used. Network errors and timeouts keep
    their description.
    """

    from googleapiclient.errors import HttpError

    if isinstance(exc, HttpError):
        status = exc.resp.status if exc.resp is not None else None
        message = _provider_message(exc.content) or f"Gmail API request failed: {status}"
        return GmailAPIError(message, status_code=status)

    return GmailAPIError(str(exc) or f"Gmail API request failed: {type(exc).__name__}")


class GmailClient:
    """Gmail API client for mailbox operations.

    This client owns the authorized HTTP session and exposes the handful of
    Gmail calls the assistant needs: listing, fetching, modifying labels and
    sending.
    """

    def __init__(self, settings: Settings | None = None, access_token: str | None = None) -> None:
        """Initialize Gmail client.

        Args:
            settings: Application settings. If None, uses default settings.
            access_token: OAuth bearer token. Overrides `settings.gmail_access_token`.
        """
        from email_assistant.config import get_settings

        self.settings = settings or get_settings()
        self._access_token = access_token or self.settings.gmail_access_token
        self._service: Any | None = None
        self._credentials: Any | None = None
        logger.info("gmail_client_initialized", has_access_token=self._access_token is not None)

    async def authenticate(self) -> None:
        """Build an authorized Gmail API service.

        Raises:
            AuthenticationError: If no usable credential is available.
            ConfigurationError: If the token file cannot be read.
        """

        if self._service is not None:
            return

        logger.info("gmail_authentication_started", token_source="access_token" if self._access_token else "file")

        try:
            self._service = await asyncio.to_thread(self._build_service)
        except (AuthenticationError, ConfigurationError):
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_authentication_failed", error=str(exc))
            raise AuthenticationError(str(exc)) from exc

        logger.info("gmail_authentication_completed")

    async def list_message_ids(self, label_ids: list[str], max_results: int) -> list[dict[str, Any]]:
        """List a single page of message ids carrying all of `label_ids`.

        Args:
            label_ids: Gmail label ids the messages must carry.
            max_results: Page size.

        Returns:
            List of ``{"id": ...}`` dictionaries.

        Raises:
            GmailAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        logger.info("listing_messages", label_ids=label_ids, max_results=max_results)

        try:
            return await asyncio.to_thread(self._list_message_ids_sync, label_ids, max_results)
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_list_messages_failed", error=str(exc))
            raise to_gmail_api_error(exc) from exc

    async def get_message(
        self,
        message_id: str,
        *,
        format: str = "metadata",
        metadata_headers: list[str] | None = None,
    ) -> dict[str, Any]:
        """Get a specific message by ID.

        Args:
            message_id: The Gmail message ID.
            format: ``metadata`` or ``full``.
            metadata_headers: Headers to include with ``format=metadata``.

        Returns:
            Message data dictionary.

        Raises:
            GmailAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        logger.info("getting_message", message_id=message_id, format=format)

        try:
            return await asyncio.to_thread(
                self._get_message_sync,
                message_id,
                format,
                metadata_headers,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_get_message_failed", message_id=message_id, error=str(exc))
            raise to_gmail_api_error(exc) from exc

    async def modify_message(
        self,
        message_id: str,
        *,
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """Add or remove labels on a message.

        Raises:
            GmailAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        logger.info(
            "modifying_message",
            message_id=message_id,
            add_label_ids=add_label_ids,
            remove_label_ids=remove_label_ids,
        )

        body: dict[str, list[str]] = {}
        if add_label_ids:
            body["addLabelIds"] = add_label_ids
        if remove_label_ids:
            body["removeLabelIds"] = remove_label_ids

        try:
            return await asyncio.to_thread(self._modify_message_sync, message_id, body)
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_modify_message_failed", message_id=message_id, error=str(exc))
            raise to_gmail_api_error(exc) from exc

    async def send_message(self, raw: str) -> dict[str, Any]:
        """Send a raw RFC 2822 message.

        Args:
            raw: The base64url-encoded message.

        Returns:
            The created message resource (``id``, ``threadId``, ``labelIds``).

        Raises:
            GmailAPIError: If the API request fails.
        """

        await self._ensure_authenticated()

        logger.info("sending_message", raw_length=len(raw))

        try:
            return await asyncio.to_thread(self._send_message_sync, raw)
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_send_message_failed", error=str(exc))
            raise to_gmail_api_error(exc) from exc

    async def _ensure_authenticated(self) -> None:
        if self._service is None:
            raise AuthenticationError(
                "Gmail client is not authenticated. Call await GmailClient.authenticate() first."
            )

    def _load_credentials(self) -> Any:
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if self._access_token:
            return Credentials(token=self._access_token)

        token_path = Path(self.settings.gmail_token_path)
        if not token_path.exists():
            raise AuthenticationError(
                "No Gmail access token configured and token file not found: "
                f"{token_path}. Set EMAIL_ASSISTANT_GMAIL_ACCESS_TOKEN."
            )

        try:
            creds = Credentials.from_authorized_user_file(str(token_path), scopes=[self.settings.gmail_scope])
        except ValueError as exc:
            raise ConfigurationError(f"Invalid Gmail token file {token_path}: {exc}") from exc

        if creds.expired and creds.refresh_token:
            creds.refresh(Request())

        if not creds.valid:
            raise AuthenticationError(f"Gmail token in {token_path} is expired and cannot be refreshed.")

        return creds

    def _build_service(self) -> Any:
        # Imported lazily to keep import-time cost low and tests fast.
        from googleapiclient.discovery import build

        self._credentials = self._load_credentials()
        endpoint = self.settings.gmail_api_endpoint
        client_options = {"api_endpoint": endpoint} if endpoint else None

        # cache_discovery=False prevents writing discovery docs to disk.
        return build(
            "gmail",
            "v1",
            http=self._new_http(),
            cache_discovery=False,
            client_options=client_options,
        )

    def _new_http(self) -> Any:
        # httplib2.Http is not thread-safe; every request gets its own connection.
        import httplib2
        from google_auth_httplib2 import AuthorizedHttp

        return AuthorizedHttp(self._credentials, http=httplib2.Http(timeout=self.settings.gmail_timeout))

    def _list_message_ids_sync(self, label_ids: list[str], max_results: int) -> list[dict[str, Any]]:
        assert self._service is not None
        request = (
            self._service.users()
            .messages()
            .list(userId=USER_ID, labelIds=label_ids, maxResults=max_results, fields=LIST_FIELDS)
        )
        response = request.execute(http=self._new_http())
        return list(response.get("messages", []) or [])

    def _get_message_sync(
        self,
        message_id: str,
        format: str,
        metadata_headers: list[str] | None,
    ) -> dict[str, Any]:
        assert self._service is not None
        request = (
            self._service.users()
            .messages()
            .get(userId=USER_ID, id=message_id, format=format, metadataHeaders=metadata_headers)
        )
        return request.execute(http=self._new_http())

    def _modify_message_sync(self, message_id: str, body: dict[str, list[str]]) -> dict[str, Any]:
        assert self._service is not None
        request = self._service.users().messages().modify(userId=USER_ID, id=message_id, body=body)
        return request.execute(http=self._new_http())

    def _send_message_sync(self, raw: str) -> dict[str, Any]:
        assert self._service is not None
        request = self._service.users().messages().send(userId=USER_ID, body={"raw": raw})
        return request.execute(http=self._new_http())
