"""GC Notify client."""

import calendar
import json
import time
from typing import Optional

import jwt
import requests

from infrastructure.logging import get_module_logger
from infrastructure.services.providers import get_settings

logger = get_module_logger()

SMS_ENDPOINT = "/v2/notifications/sms"


def epoch_seconds() -> int:
    return calendar.timegm(time.gmtime())


def create_jwt_token(secret: str, client_id: str) -> str:
    """
    Generate a JWT token for the Notify API.

    Tokens are HS256 signed with claims:
    iss: identifier for the client
    iat: epoch seconds for the token (UTC)
    """
    if not secret:
        logger.error("jwt_token_creation_failed", error="Missing secret key")
        raise ValueError("Missing secret key")
    if not client_id:
        logger.error("jwt_token_creation_failed", error="Missing client id")
        raise ValueError("Missing client id")

    headers = {"typ": "JWT", "alg": "HS256"}
    claims = {"iss": client_id, "iat": epoch_seconds()}
    return jwt.encode(payload=claims, key=secret, headers=headers)


def create_authorization_header() -> tuple[str, str]:
    """Build the ``Authorization: Bearer <jwt>`` header for the Notify API."""
    notify = get_settings().notify
    if not notify.NOTIFY_USER_NAME:
        logger.error(
            "authorization_header_creation_failed", error="NOTIFY_USER_NAME is missing"
        )
        raise ValueError("NOTIFY_USER_NAME is missing")
    if not notify.NOTIFY_CLIENT_SECRET:
        logger.error(
            "authorization_header_creation_failed",
            error="NOTIFY_CLIENT_SECRET is missing",
        )
        raise ValueError("NOTIFY_CLIENT_SECRET is missing")

    token = create_jwt_token(
        secret=notify.NOTIFY_CLIENT_SECRET, client_id=notify.NOTIFY_USER_NAME
    )
    return "Authorization", "Bearer {}".format(token)


def post_event(url: str, payload: dict, timeout: int = 60) -> requests.Response:
    """Post a JSON payload to Notify with a fresh authorization header."""
    header_key, header_value = create_authorization_header()
    headers = {header_key: header_value, "Content-Type": "application/json"}
    return requests.post(url, data=json.dumps(payload), headers=headers, timeout=timeout)


def send_sms(
    phone_number: str,
    message: str,
    timeout: int = 60,
    reference: Optional[str] = None,
) -> requests.Response:
    """Send an SMS through the Notify ``/v2/notifications/sms`` endpoint.

    The configured template is expected to render its ``((message))``
    placeholder as the whole SMS body. A 201 response means Notify
    accepted the message.

    Raises:
        ValueError: If credentials or the API URL are not configured.
        requests.RequestException: On transport failures.
    """
    notify = get_settings().notify
    if not notify.NOTIFY_API_URL:
        logger.error("send_sms_failed", error="NOTIFY_API_URL is missing")
        raise ValueError("NOTIFY_API_URL is missing")

    payload = {
        "phone_number": phone_number,
        "template_id": notify.NOTIFY_SMS_TEMPLATE_ID,
        "personalisation": {"message": message},
    }
    if reference:
        payload["reference"] = reference

    url = notify.NOTIFY_API_URL.rstrip("/") + SMS_ENDPOINT
    return post_event(url, payload, timeout=timeout)
