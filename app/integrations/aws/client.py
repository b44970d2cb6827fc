"""AWS client helpers.

Centralizes boto3 client creation, throttling retries and error
classification so table-level helpers return ``OperationResult`` objects
instead of raising.

Usage:
    result = execute_aws_api_call(
        "dynamodb",
        "get_item",
        TableName="document-notifications",
        Key={"id": {"S": "n-1"}},
    )
    if result.is_success:
        item = result.data.get("Item")
"""

import time
from typing import Any, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, classify_aws_error
from infrastructure.services.providers import get_settings

logger = get_module_logger()

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5


def get_aws_client(service_name: str) -> BaseClient:
    """Create a boto3 client for ``service_name`` using the configured region.

    ``DYNAMODB_ENDPOINT_URL`` redirects DynamoDB calls (DynamoDB Local).
    """
    aws_settings = get_settings().aws
    client_config: dict[str, Any] = {"region_name": aws_settings.AWS_REGION}
    if service_name == "dynamodb" and aws_settings.DYNAMODB_ENDPOINT_URL:
        client_config["endpoint_url"] = aws_settings.DYNAMODB_ENDPOINT_URL
    session = boto3.Session(region_name=aws_settings.AWS_REGION)
    return session.client(service_name, **client_config)


def _is_throttled(error: Exception) -> bool:
    if not isinstance(error, ClientError):
        return False
    error_code = error.response.get("Error", {}).get("Code")
    return error_code in get_settings().aws.THROTTLING_ERRS


def _paginate_all_results(
    client: BaseClient, method: str, keys: List[str], **kwargs
) -> dict:
    paginator = client.get_paginator(method)
    merged: dict[str, list] = {key: [] for key in keys}
    for page in paginator.paginate(**kwargs):
        for key in keys:
            merged[key].extend(page.get(key, []))
    return merged


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    max_retries: Optional[int] = None,
    **kwargs,
) -> OperationResult:
    """Call ``method`` on a ``service_name`` client.

    Throttling errors are retried with exponential backoff. Any other
    failure is classified immediately.

    Args:
        service_name: boto3 service name (e.g. "dynamodb").
        method: Client method name (e.g. "put_item").
        keys: When given, the call is paginated and the listed result
            keys are merged across pages.
        max_retries: Override for the number of throttling retries.
        **kwargs: Parameters passed through to the boto3 call.

    Returns:
        OperationResult with the raw boto3 response in ``data``.
    """
    function_name = f"{service_name}_{method}"
    retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries

    for attempt in range(retries + 1):
        try:
            client = get_aws_client(service_name)
            if keys:
                response = _paginate_all_results(client, method, keys, **kwargs)
            else:
                response = getattr(client, method)(**kwargs)
            if attempt > 0:
                logger.info(
                    "aws_api_retry_success", function=function_name, attempt=attempt + 1
                )
            return OperationResult.success(data=response)
        except (BotoCoreError, ClientError) as error:
            if _is_throttled(error) and attempt < retries:
                delay = DEFAULT_BACKOFF_FACTOR * (2**attempt)
                logger.warning(
                    "aws_api_retrying",
                    function=function_name,
                    attempt=attempt + 1,
                    delay=delay,
                    error=str(error),
                )
                time.sleep(delay)
                continue
            result = classify_aws_error(error)
            log = logger.warning if result.error_code == "CONDITION_FAILED" else logger.error
            log(
                "aws_api_error",
                function=function_name,
                error=str(error),
                error_code=result.error_code,
            )
            return result

    # Unreachable: the loop always returns
    return OperationResult.transient_error(
        f"{function_name} exhausted retries", error_code="RETRIES_EXHAUSTED"
    )
