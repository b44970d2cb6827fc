"""Notification dispatcher.

Runs one dispatch cycle: select due PENDING notifications, check the
user's preference for the channel, hand the notification to the
channel's sender and record SENT or FAILED. A failing item never stops
the rest of the batch.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import structlog

from infrastructure.logging import bind_log_context
from modules.notifications.errors import ConflictError, NotFoundError
from modules.notifications.models import (
    Notification,
    NotificationPatch,
    NotificationStatus,
)
from modules.notifications.preferences import PreferenceService
from modules.notifications.senders import SenderRegistry
from modules.notifications.store import NotificationStore

logger = structlog.get_logger()

Clock = Callable[[], datetime]

OUTCOME_WRITE_ATTEMPTS = 2


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    """Processes due notifications in batches.

    Only one cycle runs at a time per dispatcher; an overlapping call
    returns immediately.

    Args:
        store: Notification store.
        preferences: Preference lookups.
        senders: Mapping of channel to sender.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        store: NotificationStore,
        preferences: PreferenceService,
        senders: SenderRegistry,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.preferences = preferences
        self.senders = senders
        self.clock = clock
        self._running = threading.Lock()

    def process_due(self) -> Optional[Dict[str, int]]:
        """Run one dispatch cycle.

        Returns:
            Counters ``due``, ``sent``, ``failed``, ``skipped``,
            ``conflicts`` and ``persist_failed``, or None if another cycle
            was already running.
        """
        if not self._running.acquire(blocking=False):
            logger.warning("dispatch_cycle_already_running")
            return None

        try:
            with bind_log_context(cycle_id=str(uuid.uuid4())):
                return self._run_cycle()
        finally:
            self._running.release()

    def _run_cycle(self) -> Dict[str, int]:
        now = self.clock()
        stats = {
            "due": 0,
            "sent": 0,
            "failed": 0,
            "skipped": 0,
            "conflicts": 0,
            "persist_failed": 0,
        }

        due = self.store.find_due(now)
        stats["due"] = len(due)
        if not due:
            logger.debug("no_due_notifications", now=now.isoformat())
            return stats

        logger.info("dispatch_cycle_started", due=len(due))
        for notification in due:
            outcome = self._process_one(notification, now)
            stats[outcome] += 1

        logger.info("dispatch_cycle_completed", **stats)
        return stats

    def _process_one(self, notification: Notification, now: datetime) -> str:
        log = logger.bind(
            notification_id=notification.id,
            user_id=notification.user.id,
            channel=notification.channel.value,
        )

        try:
            preference = self.preferences.get_by_user_and_channel(
                notification.user.id, notification.channel
            )
        except Exception as e:  # pylint: disable=broad-except
            # Left PENDING, the next cycle looks again
            log.error("notification_preference_lookup_failed", error=str(e))
            return "skipped"
        if preference is None or not preference.enabled:
            log.info(
                "notification_skipped_channel_disabled",
                preference_exists=preference is not None,
            )
            return "skipped"

        delivered = False
        sender = self.senders.get(notification.channel)
        if sender is None:
            log.error("notification_sender_missing")
        else:
            try:
                delivered = sender.send(notification)
            except Exception as e:  # pylint: disable=broad-except
                log.error("notification_send_error", error=str(e), exc_info=True)
                delivered = False

        if delivered:
            patch = NotificationPatch(status=NotificationStatus.SENT, sent_at=now)
        else:
            patch = NotificationPatch(status=NotificationStatus.FAILED, sent_at=None)

        outcome = self._persist_outcome(notification, patch, delivered, log)
        if outcome is not None:
            return outcome

        if delivered:
            log.info("notification_sent")
            return "sent"
        log.warning("notification_failed")
        return "failed"

    def _persist_outcome(
        self,
        notification: Notification,
        patch: NotificationPatch,
        delivered: bool,
        log,
    ) -> Optional[str]:
        """Write SENT or FAILED, retrying a failed write once.

        Returns None once the outcome is stored, otherwise the counter to
        bump. An item whose write is lost stays PENDING and is sent again
        by a later cycle.
        """
        for attempt in range(1, OUTCOME_WRITE_ATTEMPTS + 1):
            try:
                self.store.apply(
                    notification.id,
                    patch,
                    expected_status={NotificationStatus.PENDING},
                )
                return None
            except (ConflictError, NotFoundError) as e:
                log.warning(
                    "notification_changed_during_dispatch",
                    delivered=delivered,
                    error=str(e),
                )
                return "conflicts"
            except Exception as e:  # pylint: disable=broad-except
                log.error(
                    "notification_outcome_persist_failed",
                    delivered=delivered,
                    attempt=attempt,
                    error=str(e),
                    exc_info=True,
                )
        return "persist_failed"
