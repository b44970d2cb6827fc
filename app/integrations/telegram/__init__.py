"""Telegram Bot API client."""

from .client import escape_markdown, send_message

__all__ = ["escape_markdown", "send_message"]
