"""Notification preferences.

A preference says whether a user wants notifications over a channel.
The dispatcher treats a missing preference the same as a disabled one.
"""

import threading
from typing import Dict, List, Optional, Protocol

import structlog

from modules.notifications.errors import NotFoundError, ValidationError
from modules.notifications.models import (
    NotificationChannel,
    NotificationPreference,
    PreferencePatch,
)

logger = structlog.get_logger()


class PreferenceStore(Protocol):
    """Persistence contract for preferences."""

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        ...

    def get(self, preference_id: str) -> Optional[NotificationPreference]:
        ...

    def delete(self, preference_id: str) -> bool:
        ...

    def find_by_user(self, user_id: str) -> List[NotificationPreference]:
        ...

    def find_by_user_and_channel(
        self, user_id: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        ...

    def find_by_channel(
        self, channel: NotificationChannel
    ) -> List[NotificationPreference]:
        ...

    def apply(self, preference_id: str, patch: PreferencePatch) -> NotificationPreference:
        """Atomically merge ``patch``; raises NotFoundError if absent."""
        ...


class InMemoryPreferenceStore:
    """Thread-safe in-process preference store.

    Enforces one preference per (user, channel) on every write.
    """

    def __init__(self):
        self._records: Dict[str, NotificationPreference] = {}
        self._lock = threading.Lock()

    def _check_unique(self, preference: NotificationPreference) -> None:
        for record in self._records.values():
            if (
                record.id != preference.id
                and record.user_id == preference.user_id
                and record.channel == preference.channel
            ):
                raise ValidationError(
                    f"Preference already exists for user {preference.user_id} "
                    f"and channel {preference.channel.value}"
                )

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        stored = preference.model_copy(deep=True)
        with self._lock:
            self._check_unique(stored)
            self._records[stored.id] = stored
        return stored.model_copy(deep=True)

    def get(self, preference_id: str) -> Optional[NotificationPreference]:
        with self._lock:
            record = self._records.get(preference_id)
            return record.model_copy(deep=True) if record else None

    def delete(self, preference_id: str) -> bool:
        with self._lock:
            return self._records.pop(preference_id, None) is not None

    def find_by_user(self, user_id: str) -> List[NotificationPreference]:
        with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._records.values()
                if p.user_id == user_id
            ]

    def find_by_user_and_channel(
        self, user_id: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        with self._lock:
            for p in self._records.values():
                if p.user_id == user_id and p.channel == channel:
                    return p.model_copy(deep=True)
        return None

    def find_by_channel(
        self, channel: NotificationChannel
    ) -> List[NotificationPreference]:
        with self._lock:
            return [
                p.model_copy(deep=True)
                for p in self._records.values()
                if p.channel == channel
            ]

    def apply(self, preference_id: str, patch: PreferencePatch) -> NotificationPreference:
        with self._lock:
            current = self._records.get(preference_id)
            if current is None:
                raise NotFoundError("NotificationPreference", preference_id)
            updated = patch.apply_to(current)
            self._check_unique(updated)
            self._records[preference_id] = updated
            return updated.model_copy(deep=True)


class PreferenceService:
    """CRUD operations on notification preferences.

    Example:
        service = PreferenceService(InMemoryPreferenceStore())
        pref = service.create(
            NotificationPreference(user_id="u-1", channel=NotificationChannel.EMAIL)
        )
        service.toggle(pref.id, enabled=False)
    """

    def __init__(self, store: PreferenceStore):
        self.store = store

    def create(self, preference: NotificationPreference) -> NotificationPreference:
        """Persist a new preference.

        Raises:
            ValidationError: The user already has a preference for the channel.
        """
        if self.store.find_by_user_and_channel(preference.user_id, preference.channel):
            raise ValidationError(
                f"Preference already exists for user {preference.user_id} "
                f"and channel {preference.channel.value}"
            )
        saved = self.store.save(preference)
        logger.info(
            "notification_preference_created",
            preference_id=saved.id,
            user_id=saved.user_id,
            channel=saved.channel.value,
            enabled=saved.enabled,
        )
        return saved

    def update(self, preference_id: str, patch: PreferencePatch) -> NotificationPreference:
        """Merge ``patch`` into an existing preference.

        Raises:
            NotFoundError: No preference with this id.
            ValidationError: The new channel collides with another preference.
        """
        if patch.channel is not None:
            current = self.store.get(preference_id)
            if current is None:
                raise NotFoundError("NotificationPreference", preference_id)
            other = self.store.find_by_user_and_channel(current.user_id, patch.channel)
            if other and other.id != preference_id:
                raise ValidationError(
                    f"Preference already exists for user {current.user_id} "
                    f"and channel {patch.channel.value}"
                )
        updated = self.store.apply(preference_id, patch)
        logger.info(
            "notification_preference_updated",
            preference_id=preference_id,
            fields=sorted(patch.model_fields_set),
        )
        return updated

    def get_by_id(self, preference_id: str) -> Optional[NotificationPreference]:
        return self.store.get(preference_id)

    def get_by_user(self, user_id: str) -> List[NotificationPreference]:
        return self.store.find_by_user(user_id)

    def get_by_user_and_channel(
        self, user_id: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        return self.store.find_by_user_and_channel(user_id, channel)

    def get_enabled_by_user(self, user_id: str) -> List[NotificationPreference]:
        return [p for p in self.store.find_by_user(user_id) if p.enabled]

    def get_by_channel(
        self, channel: NotificationChannel
    ) -> List[NotificationPreference]:
        return self.store.find_by_channel(channel)

    def delete(self, preference_id: str) -> None:
        if not self.store.delete(preference_id):
            raise NotFoundError("NotificationPreference", preference_id)
        logger.info("notification_preference_deleted", preference_id=preference_id)

    def toggle(self, preference_id: str, enabled: bool) -> NotificationPreference:
        """Enable or disable a preference."""
        updated = self.store.apply(preference_id, PreferencePatch(enabled=enabled))
        logger.info(
            "notification_preference_toggled",
            preference_id=preference_id,
            enabled=enabled,
        )
        return updated
