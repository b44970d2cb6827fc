"""Unit tests for integrations.aws.client."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from infrastructure.operations import OperationStatus
from integrations.aws import dynamodb
from integrations.aws.client import execute_aws_api_call, get_aws_client


def client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.mark.unit
class TestGetAwsClient:
    @patch("integrations.aws.client.boto3.Session")
    def test_uses_configured_region(self, mock_session, patched_settings):
        get_aws_client("dynamodb")

        mock_session.assert_called_once_with(region_name="ca-central-1")
        mock_session.return_value.client.assert_called_once_with(
            "dynamodb", region_name="ca-central-1"
        )

    @patch("integrations.aws.client.boto3.Session")
    def test_dynamodb_endpoint_override(self, mock_session, patched_settings):
        patched_settings.aws.DYNAMODB_ENDPOINT_URL = "http://localhost:8000"

        get_aws_client("dynamodb")

        mock_session.return_value.client.assert_called_once_with(
            "dynamodb",
            region_name="ca-central-1",
            endpoint_url="http://localhost:8000",
        )


@pytest.mark.unit
class TestExecuteAwsApiCall:
    def test_success(self, mock_aws_client):
        mock_aws_client.get_item.return_value = {"Item": {"id": {"S": "n-1"}}}

        result = execute_aws_api_call("dynamodb", "get_item", TableName="t")

        assert result.is_success
        assert result.data == {"Item": {"id": {"S": "n-1"}}}
        mock_aws_client.get_item.assert_called_once_with(TableName="t")

    def test_throttling_is_retried(self, mock_aws_client, no_sleep):
        mock_aws_client.put_item.side_effect = [
            client_error("ThrottlingException"),
            {"ok": True},
        ]

        result = execute_aws_api_call("dynamodb", "put_item", TableName="t")

        assert result.is_success
        assert mock_aws_client.put_item.call_count == 2
        no_sleep.assert_called_once_with(0.5)

    def test_throttling_retries_exhausted(self, mock_aws_client, no_sleep):
        mock_aws_client.put_item.side_effect = client_error("ThrottlingException")

        result = execute_aws_api_call("dynamodb", "put_item", max_retries=2)

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "RATE_LIMITED"
        assert mock_aws_client.put_item.call_count == 3

    def test_condition_failure_is_not_retried(self, mock_aws_client, no_sleep):
        mock_aws_client.update_item.side_effect = client_error(
            "ConditionalCheckFailedException", "UpdateItem"
        )

        result = execute_aws_api_call("dynamodb", "update_item")

        assert result.error_code == "CONDITION_FAILED"
        assert mock_aws_client.update_item.call_count == 1
        no_sleep.assert_not_called()

    def test_connection_error_is_transient(self, mock_aws_client):
        mock_aws_client.get_item.side_effect = EndpointConnectionError(
            endpoint_url="http://localhost:8000"
        )

        result = execute_aws_api_call("dynamodb", "get_item")

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "CONNECTION_ERROR"

    def test_pagination_merges_keys(self, mock_aws_client):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Items": [{"id": {"S": "a"}}]},
            {"Items": [{"id": {"S": "b"}}]},
        ]
        mock_aws_client.get_paginator.return_value = paginator

        result = dynamodb.query(
            table_name="t", KeyConditionExpression="user_id = :u"
        )

        assert result.data == {"Items": [{"id": {"S": "a"}}, {"id": {"S": "b"}}]}
        mock_aws_client.get_paginator.assert_called_once_with("query")
        paginator.paginate.assert_called_once_with(
            TableName="t", KeyConditionExpression="user_id = :u"
        )


@pytest.mark.unit
class TestDynamoDBHelpers:
    @patch("integrations.aws.dynamodb.execute_aws_api_call")
    def test_update_item_passes_table_and_key(self, mock_execute):
        dynamodb.update_item(
            table_name="t",
            Key={"id": {"S": "n-1"}},
            UpdateExpression="SET #f0 = :v0",
        )

        mock_execute.assert_called_once_with(
            "dynamodb",
            "update_item",
            TableName="t",
            Key={"id": {"S": "n-1"}},
            UpdateExpression="SET #f0 = :v0",
        )
