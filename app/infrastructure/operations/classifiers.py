"""Error classifiers for provider exceptions.

Turn exceptions raised by the Google client, requests and boto3 into
``OperationResult`` objects so every integration reports failures the
same way.

Usage:
    try:
        service.events().insert(calendarId="primary", body=body).execute()
    except Exception as exc:
        return classify_google_error(exc)
"""

from typing import Optional

import requests
from botocore.exceptions import ClientError
from googleapiclient.errors import HttpError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def _from_http_status(
    provider: str, status_code: Optional[int], detail: str
) -> OperationResult:
    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{provider} rate limited",
            error_code="RATE_LIMITED",
            retry_after=60,
        )
    if status_code in (401, 403):
        return OperationResult.permanent_error(
            f"{provider} rejected credentials ({status_code})",
            error_code="UNAUTHORIZED",
        )
    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{provider} resource not found",
            error_code="NOT_FOUND",
        )
    if status_code and status_code >= 500:
        return OperationResult.transient_error(
            f"{provider} server error ({status_code})",
            error_code="SERVER_ERROR",
        )
    return OperationResult.permanent_error(
        f"{provider} error ({status_code}): {detail}",
        error_code="HTTP_ERROR",
    )


def classify_google_error(exc: Exception) -> OperationResult:
    """Classify a Google API client exception.

    Non-HTTP failures (socket errors, auth refresh timeouts) are treated
    as transient.
    """
    if not isinstance(exc, HttpError):
        return OperationResult.transient_error(
            f"Google API connection error: {type(exc).__name__}: {exc}",
            error_code="CONNECTION_ERROR",
        )
    status_code = exc.resp.status if getattr(exc, "resp", None) else None
    return _from_http_status("Google API", status_code, str(exc))


def classify_requests_error(provider: str, exc: Exception) -> OperationResult:
    """Classify a ``requests`` exception raised while calling ``provider``."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return _from_http_status(provider, exc.response.status_code, exc.response.text)
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"{provider} request timed out", error_code="TIMEOUT"
        )
    return OperationResult.transient_error(
        f"{provider} connection error: {type(exc).__name__}: {exc}",
        error_code="CONNECTION_ERROR",
    )


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify a boto3/botocore exception.

    Unknown ClientError codes are treated as transient, following the AWS
    SDK convention of retrying by default.
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {exc}",
            error_code="CONNECTION_ERROR",
        )

    error_code = exc.response.get("Error", {}).get("Code", "Unknown")

    if error_code in (
        "ThrottlingException",
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
    ):
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "AWS API throttled",
            error_code="RATE_LIMITED",
            retry_after=60,
        )
    if error_code == "ConditionalCheckFailedException":
        return OperationResult.permanent_error(
            "Conditional check failed", error_code="CONDITION_FAILED"
        )
    if error_code == "AccessDeniedException":
        return OperationResult.permanent_error(
            "AWS API access denied", error_code="FORBIDDEN"
        )
    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "AWS resource not found",
            error_code="NOT_FOUND",
        )
    if error_code == "ValidationException":
        return OperationResult.permanent_error(
            f"AWS validation error: {exc}", error_code="INVALID_REQUEST"
        )
    return OperationResult.transient_error(
        f"AWS client error: {error_code}", error_code="AWS_CLIENT_ERROR"
    )
