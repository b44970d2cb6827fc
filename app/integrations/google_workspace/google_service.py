"""Google Workspace API helpers.

Provides service account authentication with domain-wide delegation and a
single entry point, ``execute_google_api_call``, that walks a resource
path, retries rate-limited and server errors, and returns an
``OperationResult``.

Usage:
    result = execute_google_api_call(
        "calendar",
        "v3",
        "events",
        "insert",
        scopes=["https://www.googleapis.com/auth/calendar.events"],
        delegated_user_email="bot@example.com",
        calendarId="primary",
        body={...},
    )
"""

import json
import time
from json import JSONDecodeError
from typing import List, Optional

from google.oauth2 import service_account  # type: ignore
from googleapiclient.discovery import Resource, build  # type: ignore
from googleapiclient.errors import HttpError  # type: ignore

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_google_error
from infrastructure.services.providers import get_settings

logger = get_module_logger()

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0


def get_google_service(
    service: str,
    version: str,
    delegated_user_email: Optional[str] = None,
    scopes: Optional[List[str]] = None,
) -> Resource:
    """Build an authenticated Google API resource.

    Args:
        service: API name (e.g. "gmail", "calendar").
        version: API version (e.g. "v1", "v3").
        delegated_user_email: User to impersonate.
        scopes: OAuth scopes to request.

    Raises:
        ValueError: If the service account key is missing or not valid JSON.
    """
    creds_json = get_settings().google_workspace.GCP_SERVICE_ACCOUNT_KEY_FILE
    if not creds_json:
        raise ValueError("Credentials JSON not set")

    try:
        creds_info = json.loads(creds_json)
    except JSONDecodeError as exc:
        logger.error("google_credentials_invalid_json", error=str(exc))
        raise ValueError("Invalid credentials JSON") from exc

    creds = service_account.Credentials.from_service_account_info(creds_info)
    if delegated_user_email:
        creds = creds.with_subject(delegated_user_email)
    if scopes:
        creds = creds.with_scopes(scopes)
    return build(service, version, credentials=creds, cache_discovery=False)


def execute_google_api_call(
    service_name: str,
    version: str,
    resource_path: str,
    method: str,
    scopes: Optional[List[str]] = None,
    delegated_user_email: Optional[str] = None,
    max_retries: Optional[int] = None,
    **kwargs,
) -> OperationResult:
    """Execute ``resource_path.method(**kwargs)`` on a Google API.

    Args:
        service_name: API name.
        version: API version.
        resource_path: Dotted resource path (e.g. "users.messages").
        method: Method on the final resource (e.g. "send").
        scopes: OAuth scopes.
        delegated_user_email: User to impersonate.
        max_retries: Override for the number of retries on 429/5xx.
        **kwargs: Arguments for the API method.

    Returns:
        OperationResult with the decoded response in ``data``.
    """
    function_name = f"{service_name}_{resource_path}_{method}"
    retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries

    try:
        service = get_google_service(
            service_name, version, delegated_user_email, scopes
        )
    except ValueError as exc:
        logger.error("google_service_unavailable", function=function_name, error=str(exc))
        return OperationResult.permanent_error(str(exc), error_code="CONFIGURATION_ERROR")

    for attempt in range(retries + 1):
        try:
            resource = service
            for part in resource_path.split("."):
                resource = getattr(resource, part)()
            response = getattr(resource, method)(**kwargs).execute()
            if attempt > 0:
                logger.info(
                    "google_api_retry_success",
                    function=function_name,
                    attempt=attempt + 1,
                )
            return OperationResult.success(data=response)
        except HttpError as exc:
            if exc.resp.status in RETRY_STATUS_CODES and attempt < retries:
                delay = DEFAULT_BACKOFF_FACTOR * (2**attempt)
                logger.warning(
                    "google_api_retrying",
                    function=function_name,
                    attempt=attempt + 1,
                    status_code=exc.resp.status,
                    delay=delay,
                )
                time.sleep(delay)
                continue
            logger.error(
                "google_api_error_final",
                function=function_name,
                error=str(exc),
                status_code=exc.resp.status,
            )
            return classify_google_error(exc)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(
                "google_api_error_final", function=function_name, error=str(exc)
            )
            return classify_google_error(exc)

    return OperationResult.transient_error(
        f"{function_name} exhausted retries", error_code="RETRIES_EXHAUSTED"
    )
