"""Operation status enumeration."""

from enum import Enum


class OperationStatus(Enum):
    """High-level outcome of a provider call.

    Attributes:
        SUCCESS: The provider accepted the request
        TRANSIENT_ERROR: Network, timeout, throttling or 5xx failure
        PERMANENT_ERROR: Rejected request (validation, auth, bad recipient)
        NOT_FOUND: The addressed resource does not exist
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
