"""DynamoDB-backed notification and preference stores.

Used for multi-instance deployments where every instance must see the
same notifications and where status changes must be atomic across
processes.

Notifications table:
    PK: id (String)
    Attributes: user_id, user (Map), document_id, document (Map), channel,
        type, scheduled_at, sent_at, status
    GSI: user_id-scheduled_at-index (user_id + scheduled_at)
    GSI: status-scheduled_at-index (status + scheduled_at)
    GSI: document_id-index (document_id)

Preferences table:
    PK: id (String)
    Attributes: user_id, channel, enabled, lead_days (List), daily_time
    GSI: user_id-channel-index (user_id + channel)
    GSI: channel-index (channel)

Timestamps are stored as fixed-width UTC strings so that string order is
chronological order and key conditions can compare them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Collection, Dict, List, Optional

import structlog
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer  # type: ignore

from infrastructure.operations import OperationResult
from integrations.aws import dynamodb
from modules.notifications.errors import ConflictError, NotFoundError, StoreError
from modules.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationPatch,
    NotificationPreference,
    NotificationStatus,
    PreferencePatch,
    to_utc,
)

logger = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

USER_INDEX = "user_id-scheduled_at-index"
STATUS_INDEX = "status-scheduled_at-index"
DOCUMENT_INDEX = "document_id-index"
PREFERENCE_USER_INDEX = "user_id-channel-index"
PREFERENCE_CHANNEL_INDEX = "channel-index"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def format_timestamp(value: datetime) -> str:
    return to_utc(value).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _plain(value: Any) -> Any:
    """Convert deserialized Decimals back to int/float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, set):
        return {_plain(v) for v in value}
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def to_item(data: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a plain dict to DynamoDB attribute values, dropping None."""
    return {k: _serializer.serialize(v) for k, v in data.items() if v is not None}


def from_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _plain(_deserializer.deserialize(v)) for k, v in item.items()}


def _raise_for(result: OperationResult, operation: str) -> None:
    if not result.is_success:
        logger.error(
            "dynamodb_operation_failed",
            operation=operation,
            error=result.message,
            error_code=result.error_code,
        )
        raise StoreError(
            f"DynamoDB {operation} failed: {result.message}",
            error_code=result.error_code,
        )


# Notifications


def notification_to_item(notification: Notification) -> Dict[str, Any]:
    return to_item(
        {
            "id": notification.id,
            "user_id": notification.user.id,
            "user": notification.user.model_dump(mode="json", exclude_none=True),
            "document_id": notification.document.id,
            "document": notification.document.model_dump(
                mode="json", exclude_none=True
            ),
            "channel": notification.channel.value,
            "type": notification.type.value,
            "scheduled_at": format_timestamp(notification.scheduled_at),
            "sent_at": (
                format_timestamp(notification.sent_at) if notification.sent_at else None
            ),
            "status": notification.status.value,
        }
    )


def item_to_notification(item: Dict[str, Any]) -> Notification:
    data = from_item(item)
    return Notification(
        id=data["id"],
        user=data["user"],
        document=data["document"],
        channel=data["channel"],
        type=data["type"],
        scheduled_at=parse_timestamp(data["scheduled_at"]),
        sent_at=parse_timestamp(data["sent_at"]) if data.get("sent_at") else None,
        status=data["status"],
    )


def _notification_patch_values(patch: NotificationPatch) -> Dict[str, Any]:
    """Attribute name -> new value (None means REMOVE) for the set fields."""
    values: Dict[str, Any] = {}
    for name in patch.model_fields_set:
        value = getattr(patch, name)
        if name == "user":
            values["user"] = value.model_dump(mode="json", exclude_none=True)
            values["user_id"] = value.id
        elif name == "document":
            values["document"] = value.model_dump(mode="json", exclude_none=True)
            values["document_id"] = value.id
        elif name in ("scheduled_at", "sent_at"):
            values[name] = format_timestamp(value) if value else None
        elif value is not None:
            values[name] = value.value
        else:
            values[name] = None
    return values


def build_update_expression(
    values: Dict[str, Any],
) -> tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build ``SET``/``REMOVE`` clauses with placeholder names and values."""
    names: Dict[str, str] = {}
    attr_values: Dict[str, Any] = {}
    set_parts: List[str] = []
    remove_parts: List[str] = []
    for i, (attribute, value) in enumerate(sorted(values.items())):
        names[f"#f{i}"] = attribute
        if value is None:
            remove_parts.append(f"#f{i}")
        else:
            attr_values[f":v{i}"] = _serializer.serialize(value)
            set_parts.append(f"#f{i} = :v{i}")

    clauses = []
    if set_parts:
        clauses.append("SET " + ", ".join(set_parts))
    if remove_parts:
        clauses.append("REMOVE " + ", ".join(remove_parts))
    return " ".join(clauses), names, attr_values


class DynamoDBNotificationStore:
    """Notification store backed by a DynamoDB table.

    ``apply`` is a single conditional ``UpdateItem``; when the condition
    fails the item is re-read to tell a missing record from a status
    conflict.

    Args:
        table_name: Notifications table name.
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        logger.info("dynamodb_notification_store_initialized", table_name=table_name)

    def save(self, notification: Notification) -> Notification:
        result = dynamodb.put_item(
            table_name=self.table_name, Item=notification_to_item(notification)
        )
        _raise_for(result, "put_item")
        return notification.model_copy(deep=True)

    def get(self, notification_id: str) -> Optional[Notification]:
        result = dynamodb.get_item(
            table_name=self.table_name,
            Key={"id": {"S": notification_id}},
            ConsistentRead=True,
        )
        _raise_for(result, "get_item")
        item = (result.data or {}).get("Item")
        return item_to_notification(item) if item else None

    def delete(self, notification_id: str) -> bool:
        result = dynamodb.delete_item(
            table_name=self.table_name,
            Key={"id": {"S": notification_id}},
            ReturnValues="ALL_OLD",
        )
        _raise_for(result, "delete_item")
        return bool((result.data or {}).get("Attributes"))

    def apply(
        self,
        notification_id: str,
        patch: NotificationPatch,
        expected_status: Optional[Collection[NotificationStatus]] = None,
    ) -> Notification:
        update_expression, names, values = build_update_expression(
            _notification_patch_values(patch)
        )
        if not update_expression:
            current = self.get(notification_id)
            if current is None:
                raise NotFoundError("Notification", notification_id)
            return current

        condition = "attribute_exists(id)"
        if expected_status is not None:
            names["#status"] = "status"
            placeholders = []
            for i, status in enumerate(sorted(s.value for s in expected_status)):
                values[f":expected{i}"] = {"S": status}
                placeholders.append(f":expected{i}")
            condition += f" AND #status IN ({', '.join(placeholders)})"

        kwargs: Dict[str, Any] = {
            "UpdateExpression": update_expression,
            "ConditionExpression": condition,
            "ExpressionAttributeNames": names,
            "ReturnValues": "ALL_NEW",
        }
        if values:
            kwargs["ExpressionAttributeValues"] = values

        result = dynamodb.update_item(
            table_name=self.table_name, Key={"id": {"S": notification_id}}, **kwargs
        )
        if result.error_code == "CONDITION_FAILED":
            current = self.get(notification_id)
            if current is None:
                raise NotFoundError("Notification", notification_id)
            raise ConflictError(notification_id, current.status.value)
        _raise_for(result, "update_item")
        return item_to_notification(result.data["Attributes"])

    def _query(self, operation: str, **kwargs) -> List[Notification]:
        result = dynamodb.query(table_name=self.table_name, **kwargs)
        _raise_for(result, operation)
        return [item_to_notification(i) for i in (result.data or {}).get("Items", [])]

    def find_due(self, now: datetime) -> List[Notification]:
        notifications = self._query(
            "find_due",
            IndexName=STATUS_INDEX,
            KeyConditionExpression="#status = :status AND scheduled_at <= :now",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={
                ":status": {"S": NotificationStatus.PENDING.value},
                ":now": {"S": format_timestamp(now)},
            },
        )
        return sorted(notifications, key=lambda n: (n.scheduled_at, n.id))

    def find_by_user(self, user_id: str) -> List[Notification]:
        return self._query(
            "find_by_user",
            IndexName=USER_INDEX,
            KeyConditionExpression="user_id = :user_id",
            ExpressionAttributeValues={":user_id": {"S": user_id}},
        )

    def find_by_document(self, document_id: str) -> List[Notification]:
        notifications = self._query(
            "find_by_document",
            IndexName=DOCUMENT_INDEX,
            KeyConditionExpression="document_id = :document_id",
            ExpressionAttributeValues={":document_id": {"S": document_id}},
        )
        return sorted(notifications, key=lambda n: (n.scheduled_at, n.id))

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        return self._query(
            "find_by_status",
            IndexName=STATUS_INDEX,
            KeyConditionExpression="#status = :status",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={":status": {"S": status.value}},
        )

    def find_by_user_and_status(
        self, user_id: str, status: NotificationStatus
    ) -> List[Notification]:
        notifications = self._query(
            "find_by_user_and_status",
            IndexName=USER_INDEX,
            KeyConditionExpression="user_id = :user_id",
            FilterExpression="#status = :status",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={
                ":user_id": {"S": user_id},
                ":status": {"S": status.value},
            },
            ScanIndexForward=False,
        )
        return sorted(notifications, key=lambda n: (n.scheduled_at, n.id), reverse=True)

    def find_by_user_in_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[Notification]:
        return self._query(
            "find_by_user_in_range",
            IndexName=USER_INDEX,
            KeyConditionExpression="user_id = :user_id AND scheduled_at BETWEEN :start AND :end",
            ExpressionAttributeValues={
                ":user_id": {"S": user_id},
                ":start": {"S": format_timestamp(start)},
                ":end": {"S": format_timestamp(end)},
            },
        )


# Preferences


def preference_to_item(preference: NotificationPreference) -> Dict[str, Any]:
    return to_item(
        {
            "id": preference.id,
            "user_id": preference.user_id,
            "channel": preference.channel.value,
            "enabled": preference.enabled,
            # Lists, not number sets: DynamoDB rejects empty sets
            "lead_days": sorted(preference.lead_days),
            "daily_time": (
                preference.daily_time.isoformat() if preference.daily_time else None
            ),
        }
    )


def item_to_preference(item: Dict[str, Any]) -> NotificationPreference:
    data = from_item(item)
    return NotificationPreference(
        id=data["id"],
        user_id=data["user_id"],
        channel=data["channel"],
        enabled=data.get("enabled", True),
        lead_days=set(data.get("lead_days", [])),
        daily_time=data.get("daily_time"),
    )


class DynamoDBPreferenceStore:
    """Preference store backed by a DynamoDB table.

    Args:
        table_name: Preferences table name.
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        logger.info("dynamodb_preference_store_initialized", table_name=table_name)

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        result = dynamodb.put_item(
            table_name=self.table_name, Item=preference_to_item(preference)
        )
        _raise_for(result, "put_item")
        return preference.model_copy(deep=True)

    def get(self, preference_id: str) -> Optional[NotificationPreference]:
        result = dynamodb.get_item(
            table_name=self.table_name,
            Key={"id": {"S": preference_id}},
            ConsistentRead=True,
        )
        _raise_for(result, "get_item")
        item = (result.data or {}).get("Item")
        return item_to_preference(item) if item else None

    def delete(self, preference_id: str) -> bool:
        result = dynamodb.delete_item(
            table_name=self.table_name,
            Key={"id": {"S": preference_id}},
            ReturnValues="ALL_OLD",
        )
        _raise_for(result, "delete_item")
        return bool((result.data or {}).get("Attributes"))

    def _query(self, operation: str, **kwargs) -> List[NotificationPreference]:
        result = dynamodb.query(table_name=self.table_name, **kwargs)
        _raise_for(result, operation)
        return [item_to_preference(i) for i in (result.data or {}).get("Items", [])]

    def find_by_user(self, user_id: str) -> List[NotificationPreference]:
        return self._query(
            "find_by_user",
            IndexName=PREFERENCE_USER_INDEX,
            KeyConditionExpression="user_id = :user_id",
            ExpressionAttributeValues={":user_id": {"S": user_id}},
        )

    def find_by_user_and_channel(
        self, user_id: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        preferences = self._query(
            "find_by_user_and_channel",
            IndexName=PREFERENCE_USER_INDEX,
            KeyConditionExpression="user_id = :user_id AND #channel = :channel",
            ExpressionAttributeNames={"#channel": "channel"},
            ExpressionAttributeValues={
                ":user_id": {"S": user_id},
                ":channel": {"S": channel.value},
            },
        )
        return preferences[0] if preferences else None

    def find_by_channel(
        self, channel: NotificationChannel
    ) -> List[NotificationPreference]:
        return self._query(
            "find_by_channel",
            IndexName=PREFERENCE_CHANNEL_INDEX,
            KeyConditionExpression="#channel = :channel",
            ExpressionAttributeNames={"#channel": "channel"},
            ExpressionAttributeValues={":channel": {"S": channel.value}},
        )

    def apply(self, preference_id: str, patch: PreferencePatch) -> NotificationPreference:
        values: Dict[str, Any] = {}
        for name in patch.model_fields_set:
            value = getattr(patch, name)
            if name == "channel":
                values[name] = value.value
            elif name == "lead_days":
                values[name] = sorted(value)
            elif name == "daily_time":
                values[name] = value.isoformat() if value else None
            else:
                values[name] = value

        update_expression, names, attr_values = build_update_expression(values)
        if not update_expression:
            current = self.get(preference_id)
            if current is None:
                raise NotFoundError("NotificationPreference", preference_id)
            return current

        kwargs: Dict[str, Any] = {
            "UpdateExpression": update_expression,
            "ConditionExpression": "attribute_exists(id)",
            "ExpressionAttributeNames": names,
            "ReturnValues": "ALL_NEW",
        }
        if attr_values:
            kwargs["ExpressionAttributeValues"] = attr_values

        result = dynamodb.update_item(
            table_name=self.table_name, Key={"id": {"S": preference_id}}, **kwargs
        )
        if result.error_code == "CONDITION_FAILED":
            raise NotFoundError("NotificationPreference", preference_id)
        _raise_for(result, "update_item")
        return item_to_preference(result.data["Attributes"])
