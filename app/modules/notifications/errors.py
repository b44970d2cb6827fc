"""Document notification errors.

Hierarchy:
    NotificationError
    ├── NotFoundError
    ├── ValidationError
    │   └── InvalidTransitionError
    ├── ConflictError
    └── StoreError
"""

from typing import Optional


class NotificationError(Exception):
    """Base class for all notification errors."""


class NotFoundError(NotificationError):
    """Lookup by id found nothing."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found with id: {entity_id}")


class ValidationError(NotificationError):
    """Malformed input, unknown references or a broken invariant."""


class InvalidTransitionError(ValidationError):
    """A status change the lifecycle does not allow."""

    def __init__(self, notification_id: str, current: str, target: str):
        self.notification_id = notification_id
        self.current = current
        self.target = target
        super().__init__(
            f"Notification {notification_id} cannot move from {current} to {target}"
        )


class ConflictError(NotificationError):
    """A conditional write found the record in an unexpected status."""

    def __init__(self, notification_id: str, actual_status: Optional[str] = None):
        self.notification_id = notification_id
        self.actual_status = actual_status
        super().__init__(
            f"Notification {notification_id} changed concurrently"
            + (f" (now {actual_status})" if actual_status else "")
        )


class StoreError(NotificationError):
    """The storage backend failed."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)
