"""Notification lifecycle service.

Creation, queries and manual status changes for document notifications.
Automatic delivery is handled by ``NotificationDispatcher``; this
service exposes it on demand through ``process_notifications``.

Status transitions:

    PENDING   -> SENT | FAILED | DISMISSED
    SENT      -> DISMISSED (clears sent_at)
    FAILED    -> PENDING (requeue) | SENT
    DISMISSED -> DISMISSED (no-op)
"""

from datetime import datetime
from typing import Dict, List, Optional

import structlog

from modules.notifications.calendar_events import CalendarClient
from modules.notifications.directory import ReferenceDirectory
from modules.notifications.dispatcher import Clock, NotificationDispatcher, utc_now
from modules.notifications.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from modules.notifications.models import (
    CalendarEventDetails,
    DocumentRef,
    Notification,
    NotificationChannel,
    NotificationPatch,
    NotificationStatus,
    NotificationType,
    UserRef,
    to_utc,
)
from modules.notifications.store import NotificationStore

logger = structlog.get_logger()

ALLOWED_TRANSITIONS: Dict[NotificationStatus, set] = {
    NotificationStatus.PENDING: {
        NotificationStatus.SENT,
        NotificationStatus.FAILED,
        NotificationStatus.DISMISSED,
    },
    NotificationStatus.SENT: {NotificationStatus.DISMISSED},
    NotificationStatus.FAILED: {NotificationStatus.PENDING, NotificationStatus.SENT},
    NotificationStatus.DISMISSED: {NotificationStatus.DISMISSED},
}


def sources_for(target: NotificationStatus) -> set:
    """Statuses from which ``target`` may be reached."""
    return {
        source for source, targets in ALLOWED_TRANSITIONS.items() if target in targets
    }


def check_sent_invariant(notification: Notification) -> None:
    """Raise ValidationError unless sent_at is set exactly when status is SENT."""
    is_sent = notification.status == NotificationStatus.SENT
    if is_sent != (notification.sent_at is not None):
        raise ValidationError(
            f"Notification {notification.id}: sent_at must be set if and only if "
            f"status is SENT (status={notification.status.value})"
        )


class NotificationService:
    """Lifecycle operations on document notifications.

    Args:
        store: Notification store.
        dispatcher: Dispatcher used by ``process_notifications``.
        calendar: Optional calendar client for ``create_with_calendar_event``.
        directory: Optional directory used to validate user/document ids.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        store: NotificationStore,
        dispatcher: Optional[NotificationDispatcher] = None,
        calendar: Optional[CalendarClient] = None,
        directory: Optional[ReferenceDirectory] = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.calendar = calendar
        self.directory = directory
        self.clock = clock

    # Creation

    def create(self, notification: Notification) -> Notification:
        """Persist a new notification as PENDING.

        Raises:
            ValidationError: A directory is configured and does not know the
                user or the document.
        """
        notification = notification.model_copy(
            update={"status": NotificationStatus.PENDING, "sent_at": None}
        )
        if self.directory is not None:
            notification = self._resolve_references(notification)

        saved = self.store.save(notification)
        logger.info(
            "notification_created",
            notification_id=saved.id,
            user_id=saved.user.id,
            document_id=saved.document.id,
            channel=saved.channel.value,
            type=saved.type.value,
            scheduled_at=saved.scheduled_at.isoformat(),
        )
        return saved

    def _resolve_references(self, notification: Notification) -> Notification:
        user = self.directory.get_user(notification.user.id)
        if user is None:
            raise ValidationError(f"User not found with id: {notification.user.id}")
        document = self.directory.get_document(notification.document.id)
        if document is None:
            raise ValidationError(
                f"Document not found with id: {notification.document.id}"
            )
        return notification.model_copy(update={"user": user, "document": document})

    def create_with_calendar_event(
        self, notification: Notification, details: Optional[CalendarEventDetails]
    ) -> Notification:
        """Create a notification, then a calendar event if requested.

        Calendar failures are logged and never undo the notification.
        """
        saved = self.create(notification)
        if details is None or not details.create_calendar_event:
            return saved
        if self.calendar is None:
            logger.warning("calendar_client_not_configured", notification_id=saved.id)
            return saved

        try:
            self.calendar.create_event(
                details.summary or saved.document.title,
                "",
                details.description or saved.document.description or "",
                details.start_date_time,
                details.end_date_time,
                details.time_zone or "UTC",
                [saved.user.email] if saved.user.email else [],
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "calendar_event_creation_error",
                notification_id=saved.id,
                error=str(e),
                exc_info=True,
            )
        return saved

    def schedule(
        self,
        document: DocumentRef,
        user: UserRef,
        type: NotificationType,
        scheduled_at: datetime,
    ) -> Notification:
        """Create an IN_APP notification for ``user`` about ``document``."""
        return self.create(
            Notification(
                user=user,
                document=document,
                channel=NotificationChannel.IN_APP,
                type=type,
                scheduled_at=scheduled_at,
            )
        )

    # Updates

    def update(self, notification: Notification) -> Notification:
        """Fully overwrite an existing notification.

        Raises:
            NotFoundError: No notification with this id.
            ValidationError: sent_at and status disagree.
        """
        if self.store.get(notification.id) is None:
            raise NotFoundError("Notification", notification.id)
        check_sent_invariant(notification)
        saved = self.store.save(notification)
        logger.info(
            "notification_updated",
            notification_id=saved.id,
            status=saved.status.value,
        )
        return saved

    def delete(self, notification_id: str) -> None:
        if not self.store.delete(notification_id):
            raise NotFoundError("Notification", notification_id)
        logger.info("notification_deleted", notification_id=notification_id)

    def mark_as_sent(self, notification_id: str) -> Notification:
        return self._transition(
            notification_id,
            NotificationPatch(status=NotificationStatus.SENT, sent_at=self.clock()),
        )

    def mark_as_dismissed(self, notification_id: str) -> Notification:
        current = self.store.get(notification_id)
        if current is None:
            raise NotFoundError("Notification", notification_id)
        if current.status == NotificationStatus.DISMISSED:
            return current
        return self._transition(
            notification_id,
            NotificationPatch(status=NotificationStatus.DISMISSED, sent_at=None),
        )

    def requeue(self, notification_id: str) -> Notification:
        """Move a FAILED notification back to PENDING for another attempt."""
        return self._transition(
            notification_id,
            NotificationPatch(status=NotificationStatus.PENDING, sent_at=None),
        )

    def _transition(
        self, notification_id: str, patch: NotificationPatch
    ) -> Notification:
        target = patch.status
        try:
            updated = self.store.apply(
                notification_id, patch, expected_status=sources_for(target)
            )
        except ConflictError as e:
            raise InvalidTransitionError(
                notification_id, e.actual_status or "UNKNOWN", target.value
            ) from e
        logger.info(
            "notification_status_changed",
            notification_id=notification_id,
            status=target.value,
        )
        return updated

    # Queries

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        return self.store.get(notification_id)

    def get_by_user(self, user_id: str) -> List[Notification]:
        return self.store.find_by_user(user_id)

    def get_by_document(self, document_id: str) -> List[Notification]:
        return self.store.find_by_document(document_id)

    def get_by_status(self, status: NotificationStatus) -> List[Notification]:
        return self.store.find_by_status(status)

    def get_due_before(self, time: datetime) -> List[Notification]:
        return self.store.find_due(to_utc(time))

    def get_pending_due(self) -> List[Notification]:
        return self.store.find_due(self.clock())

    def get_by_user_and_status(
        self, user_id: str, status: NotificationStatus
    ) -> List[Notification]:
        """Newest scheduled first."""
        return self.store.find_by_user_and_status(user_id, status)

    def get_by_user_in_date_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> List[Notification]:
        """Notifications scheduled between ``start`` and ``end`` inclusive."""
        if to_utc(start) > to_utc(end):
            raise ValidationError("Range start must not be after its end")
        return self.store.find_by_user_in_range(user_id, start, end)

    # Dispatch

    def process_notifications(self) -> Optional[Dict[str, int]]:
        """Run one dispatch cycle now. Returns None if one is already running."""
        if self.dispatcher is None:
            raise ValidationError("No dispatcher configured")
        return self.dispatcher.process_due()
