"""DynamoDB helpers returning ``OperationResult``.

Items and keys use the low-level attribute-value format
(``{"S": "..."}``, ``{"N": "1"}``).

Usage:
    result = get_item(
        table_name="document-notifications",
        Key={"id": {"S": "n-1"}},
    )
    if result.is_success and "Item" in result.data:
        item = result.data["Item"]
"""

from typing import Any, Dict

from infrastructure.operations import OperationResult
from integrations.aws.client import execute_aws_api_call


def get_item(table_name: str, Key: Dict[str, Any], **kwargs) -> OperationResult:
    return execute_aws_api_call(
        "dynamodb", "get_item", TableName=table_name, Key=Key, **kwargs
    )


def put_item(table_name: str, Item: Dict[str, Any], **kwargs) -> OperationResult:
    return execute_aws_api_call(
        "dynamodb", "put_item", TableName=table_name, Item=Item, **kwargs
    )


def update_item(table_name: str, Key: Dict[str, Any], **kwargs) -> OperationResult:
    """Update an item, typically with a ``ConditionExpression``.

    A failed condition comes back with ``error_code="CONDITION_FAILED"``.
    """
    return execute_aws_api_call(
        "dynamodb", "update_item", TableName=table_name, Key=Key, **kwargs
    )


def delete_item(table_name: str, Key: Dict[str, Any], **kwargs) -> OperationResult:
    return execute_aws_api_call(
        "dynamodb", "delete_item", TableName=table_name, Key=Key, **kwargs
    )


def query(table_name: str, KeyConditionExpression: str, **kwargs) -> OperationResult:
    """Query a table or index, following pagination.

    Returns:
        OperationResult whose data is ``{"Items": [...]}`` across all pages.
    """
    return execute_aws_api_call(
        "dynamodb",
        "query",
        keys=["Items"],
        TableName=table_name,
        KeyConditionExpression=KeyConditionExpression,
        **kwargs,
    )
