"""Notification storage.

``NotificationStore`` is the persistence contract used by the lifecycle
service and the dispatcher. ``InMemoryNotificationStore`` serves
single-instance deployments and tests; see ``dynamodb_store`` for the
shared backend.
"""

import threading
from datetime import datetime
from typing import Collection, Dict, List, Optional, Protocol

import structlog

from modules.notifications.errors import ConflictError, NotFoundError
from modules.notifications.models import (
    Notification,
    NotificationPatch,
    NotificationStatus,
    to_utc,
)

logger = structlog.get_logger()


class NotificationStore(Protocol):
    """Persistence contract for notifications.

    Implementations return copies: mutating a returned notification never
    changes the stored record.
    """

    def save(self, notification: Notification) -> Notification:
        """Insert or fully replace a notification."""
        ...

    def get(self, notification_id: str) -> Optional[Notification]:
        ...

    def delete(self, notification_id: str) -> bool:
        """Delete a notification. Returns False if it did not exist."""
        ...

    def apply(
        self,
        notification_id: str,
        patch: NotificationPatch,
        expected_status: Optional[Collection[NotificationStatus]] = None,
    ) -> Notification:
        """Atomically merge ``patch`` into a stored notification.

        Raises:
            NotFoundError: The notification does not exist.
            ConflictError: ``expected_status`` is given and the stored
                status is not in it.
        """
        ...

    def find_due(self, now: datetime) -> List[Notification]:
        """PENDING notifications with ``scheduled_at <= now``, oldest first."""
        ...

    def find_by_user(self, user_id: str) -> List[Notification]:
        ...

    def find_by_document(self, document_id: str) -> List[Notification]:
        ...

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        ...

    def find_by_user_and_status(
        self, user_id: str, status: NotificationStatus
    ) -> List[Notification]:
        """Ordered by ``scheduled_at`` descending."""
        ...

    def find_by_user_in_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[Notification]:
        """Notifications scheduled within ``[start, end]``, oldest first."""
        ...


def _by_schedule(notification: Notification):
    return (notification.scheduled_at, notification.id)


class InMemoryNotificationStore:
    """Thread-safe in-process notification store.

    Every operation runs under a single lock, which makes ``apply`` an
    atomic read-modify-write.
    """

    def __init__(self):
        self._records: Dict[str, Notification] = {}
        self._lock = threading.Lock()
        logger.info("in_memory_notification_store_initialized")

    def save(self, notification: Notification) -> Notification:
        stored = notification.model_copy(deep=True)
        with self._lock:
            self._records[stored.id] = stored
        return stored.model_copy(deep=True)

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            record = self._records.get(notification_id)
            return record.model_copy(deep=True) if record else None

    def delete(self, notification_id: str) -> bool:
        with self._lock:
            return self._records.pop(notification_id, None) is not None

    def apply(
        self,
        notification_id: str,
        patch: NotificationPatch,
        expected_status: Optional[Collection[NotificationStatus]] = None,
    ) -> Notification:
        with self._lock:
            current = self._records.get(notification_id)
            if current is None:
                raise NotFoundError("Notification", notification_id)
            if expected_status is not None and current.status not in expected_status:
                raise ConflictError(notification_id, current.status.value)
            updated = patch.apply_to(current)
            self._records[notification_id] = updated
            return updated.model_copy(deep=True)

    def _select(self, predicate) -> List[Notification]:
        with self._lock:
            return [
                record.model_copy(deep=True)
                for record in self._records.values()
                if predicate(record)
            ]

    def find_due(self, now: datetime) -> List[Notification]:
        now = to_utc(now)
        return sorted(self._select(lambda n: n.is_due(now)), key=_by_schedule)

    def find_by_user(self, user_id: str) -> List[Notification]:
        return sorted(self._select(lambda n: n.user.id == user_id), key=_by_schedule)

    def find_by_document(self, document_id: str) -> List[Notification]:
        return sorted(
            self._select(lambda n: n.document.id == document_id), key=_by_schedule
        )

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        return sorted(self._select(lambda n: n.status == status), key=_by_schedule)

    def find_by_user_and_status(
        self, user_id: str, status: NotificationStatus
    ) -> List[Notification]:
        return sorted(
            self._select(lambda n: n.user.id == user_id and n.status == status),
            key=_by_schedule,
            reverse=True,
        )

    def find_by_user_in_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[Notification]:
        start, end = to_utc(start), to_utc(end)
        return sorted(
            self._select(
                lambda n: n.user.id == user_id and start <= n.scheduled_at <= end
            ),
            key=_by_schedule,
        )
