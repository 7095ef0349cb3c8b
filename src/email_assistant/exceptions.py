"""Custom exceptions for Email Assistant."""


class EmailAssistantError(Exception):
    """Base exception for all Email Assistant errors."""


class GmailAPIError(EmailAssistantError):
    """Exception raised when a Gmail API request fails.

    Attributes:
        status_code: HTTP status returned by Gmail, or None for network errors.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(EmailAssistantError):
    """Exception raised for configuration related errors."""


class AuthenticationError(EmailAssistantError):
    """Exception raised for authentication failures."""
