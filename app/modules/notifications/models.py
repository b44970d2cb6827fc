"""Document notification models.

Pydantic models shared by the stores, senders, dispatcher and the
lifecycle service.

All timestamps are timezone-aware UTC. Naive datetimes are interpreted
as UTC on input.
"""

import uuid
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional, Set

from pydantic import BaseModel, EmailStr, Field, field_validator


class NotificationChannel(str, Enum):
    """Delivery channel."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    TELEGRAM = "TELEGRAM"
    IN_APP = "IN_APP"


class NotificationStatus(str, Enum):
    """Lifecycle status.

    PENDING notifications are picked up by the dispatcher once due.
    SENT carries ``sent_at``; every other status has ``sent_at`` unset.
    """

    PENDING = "PENDING"
    SENT = "SENT"
    DISMISSED = "DISMISSED"
    FAILED = "FAILED"


class NotificationType(str, Enum):
    """What the notification is about."""

    EXPIRATION_WARNING = "EXPIRATION_WARNING"
    EXPIRED = "EXPIRED"
    RENEWAL_REMINDER = "RENEWAL_REMINDER"
    CUSTOM = "CUSTOM"


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UserRef(BaseModel):
    """The user a notification is addressed to.

    Attributes:
        id: User identifier
        name: Display name used in greetings
        email: Address for the EMAIL channel
        telegram_chat_id: Chat for the TELEGRAM channel
        phone_number: E.164 number for the SMS channel
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    email: Optional[EmailStr] = None
    telegram_chat_id: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: Optional[str]) -> Optional[str]:
        """Validate E.164 phone format if provided."""
        if v is None:
            return v
        if not v.startswith("+") or not v[1:].isdigit():
            raise ValueError(f"Phone number must be in E.164 format: {v}")
        if len(v) < 8 or len(v) > 16:
            raise ValueError(f"Phone number length invalid: {v}")
        return v


class DocumentRef(BaseModel):
    """The document a notification is about."""

    id: str = Field(..., min_length=1)
    title: str
    description: Optional[str] = None
    expiration_date: Optional[date] = None


class Notification(BaseModel):
    """A scheduled message about a document, for one user over one channel.

    Example:
        notification = Notification(
            user=UserRef(id="u-1", name="Ada", email="ada@example.com"),
            document=DocumentRef(id="d-1", title="Passport"),
            channel=NotificationChannel.EMAIL,
            type=NotificationType.EXPIRATION_WARNING,
            scheduled_at=datetime(2025, 1, 1, 9, tzinfo=timezone.utc),
        )
    """

    id: str = Field(default_factory=new_id)
    user: UserRef
    document: DocumentRef
    channel: NotificationChannel
    type: NotificationType
    scheduled_at: datetime
    sent_at: Optional[datetime] = None
    status: NotificationStatus = NotificationStatus.PENDING

    @field_validator("scheduled_at", "sent_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)

    def is_due(self, now: datetime) -> bool:
        return self.status == NotificationStatus.PENDING and self.scheduled_at <= now


class NotificationPatch(BaseModel):
    """Partial update of a notification.

    Only fields explicitly passed are applied. A field set to None
    overwrites (``sent_at=None`` clears the timestamp); a field left out
    keeps the stored value.
    """

    user: Optional[UserRef] = None
    document: Optional[DocumentRef] = None
    channel: Optional[NotificationChannel] = None
    type: Optional[NotificationType] = None
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    status: Optional[NotificationStatus] = None

    @field_validator("user", "document", "channel", "type", "scheduled_at", "status")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("field cannot be cleared")
        return v

    @field_validator("scheduled_at", "sent_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)

    def apply_to(self, notification: Notification) -> Notification:
        """Return a copy of ``notification`` with the set fields replaced."""
        updates = {name: getattr(self, name) for name in self.model_fields_set}
        return notification.model_copy(deep=True, update=updates)


class NotificationPreference(BaseModel):
    """Per-user, per-channel delivery settings.

    A user has at most one preference per channel. The dispatcher only
    delivers over channels whose preference exists and is enabled.

    Attributes:
        lead_days: Days before expiration at which reminders are wanted
        daily_time: Preferred local delivery time
    """

    id: str = Field(default_factory=new_id)
    user_id: str = Field(..., min_length=1)
    channel: NotificationChannel
    enabled: bool = True
    lead_days: Set[int] = Field(default_factory=set)
    daily_time: Optional[time] = None

    @field_validator("lead_days")
    @classmethod
    def validate_lead_days(cls, v: Set[int]) -> Set[int]:
        if any(day < 0 for day in v):
            raise ValueError("lead days must be non-negative")
        return v


class PreferencePatch(BaseModel):
    """Partial update of a preference, same presence rules as NotificationPatch."""

    channel: Optional[NotificationChannel] = None
    enabled: Optional[bool] = None
    lead_days: Optional[Set[int]] = None
    daily_time: Optional[time] = None

    @field_validator("channel", "enabled", "lead_days")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("field cannot be cleared")
        return v

    @field_validator("lead_days")
    @classmethod
    def validate_lead_days(cls, v: Set[int]) -> Set[int]:
        if any(day < 0 for day in v):
            raise ValueError("lead days must be non-negative")
        return v

    def apply_to(self, preference: NotificationPreference) -> NotificationPreference:
        updates = {name: getattr(self, name) for name in self.model_fields_set}
        return preference.model_copy(deep=True, update=updates)


class CalendarEventDetails(BaseModel):
    """Optional calendar event created alongside a notification."""

    create_calendar_event: bool = False
    summary: Optional[str] = None
    description: Optional[str] = None
    start_date_time: Optional[str] = None
    end_date_time: Optional[str] = None
    time_zone: Optional[str] = "UTC"
