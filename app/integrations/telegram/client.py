"""Telegram Bot API client.

Only the ``sendMessage`` method is used: the bot pushes notifications to
chats that have already started a conversation with it.
"""

from typing import Optional

import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_requests_error
from infrastructure.services.providers import get_settings

logger = get_module_logger()

# Characters the legacy Markdown parser treats as entity delimiters
MARKDOWN_SPECIAL_CHARS = ("_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    """Escape ``text`` so Telegram's Markdown mode renders it literally."""
    for char in MARKDOWN_SPECIAL_CHARS:
        text = text.replace(char, f"\\{char}")
    return text


def send_message(
    chat_id: str,
    text: str,
    parse_mode: Optional[str] = "Markdown",
    timeout: int = 30,
) -> OperationResult:
    """Send a text message to ``chat_id``.

    Args:
        chat_id: Target chat identifier.
        text: Message text.
        parse_mode: Telegram formatting mode, None for plain text.
        timeout: Request timeout in seconds.

    Returns:
        OperationResult whose data holds the sent Message object.
    """
    telegram = get_settings().telegram
    if not telegram.TELEGRAM_BOT_TOKEN:
        logger.error("telegram_send_failed", error="TELEGRAM_BOT_TOKEN is missing")
        return OperationResult.permanent_error(
            "TELEGRAM_BOT_TOKEN is missing", error_code="CONFIGURATION_ERROR"
        )

    url = f"{telegram.TELEGRAM_API_URL.rstrip('/')}/bot{telegram.TELEGRAM_BOT_TOKEN}/sendMessage"
    payload = {"chat_id": chat_id, "text": text}
    if parse_mode:
        payload["parse_mode"] = parse_mode

    try:
        response = requests.post(url, json=payload, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        result = classify_requests_error("Telegram", exc)
        # Request URLs embed the bot token
        result.message = result.message.replace(
            telegram.TELEGRAM_BOT_TOKEN, "***REDACTED***"
        )
        logger.error(
            "telegram_send_failed",
            chat_id=chat_id,
            error=result.message,
            error_code=result.error_code,
        )
        return result

    body = response.json()
    if not body.get("ok", False):
        logger.error(
            "telegram_send_rejected",
            chat_id=chat_id,
            description=body.get("description"),
        )
        return OperationResult.permanent_error(
            body.get("description", "Telegram rejected the message"),
            error_code="TELEGRAM_REJECTED",
        )
    return OperationResult.success(data=body.get("result"))
