"""Email Assistant - Gmail message transcoding for an AI reply assistant.

This package turns Gmail API messages into stable `Email` records for display
and drafting, and turns replies back into raw RFC 2822 messages for sending.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from email_assistant.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
