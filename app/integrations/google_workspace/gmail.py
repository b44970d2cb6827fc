"""Gmail API integration.

Sends mail from the configured sender mailbox through the Gmail API
using domain-wide delegation.
"""

import base64
from email.message import EmailMessage
from typing import Optional

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult
from integrations.google_workspace.google_service import execute_google_api_call

logger = get_module_logger()

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


def create_mime_message(
    subject: str,
    body: str,
    sender: str,
    recipient: str,
    content_type: str = "plain",
) -> str:
    """Build a base64url-encoded MIME message for ``users.messages.send``.

    Args:
        subject: Subject line
        body: Message body
        sender: From address
        recipient: To address
        content_type: 'plain' or 'html'
    """
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = recipient
    if content_type == "html":
        message.set_content(body, subtype="html")
    else:
        message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("utf-8")


def send_email(
    subject: str,
    body: str,
    sender: str,
    recipient: str,
    content_type: str = "plain",
    delegated_user_email: Optional[str] = None,
) -> OperationResult:
    """Send an email via the Gmail API.

    Args:
        subject: Subject line
        body: Message body
        sender: From address
        recipient: To address
        content_type: 'plain' or 'html'
        delegated_user_email: Mailbox to impersonate (defaults to sender)

    Returns:
        OperationResult whose data holds the Gmail message resource
        (``{"id": ..., "threadId": ..., "labelIds": [...]}``).
    """
    try:
        raw_message = create_mime_message(subject, body, sender, recipient, content_type)
    except (ValueError, TypeError) as exc:
        logger.error("mime_message_creation_failed", error=str(exc))
        return OperationResult.permanent_error(
            f"Failed to create email message: {exc}",
            error_code="MIME_CREATION_ERROR",
        )

    return execute_google_api_call(
        "gmail",
        "v1",
        "users.messages",
        "send",
        scopes=[GMAIL_SEND_SCOPE],
        delegated_user_email=delegated_user_email or sender,
        userId="me",
        body={"raw": raw_message},
    )
